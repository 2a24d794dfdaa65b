from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from pathlib import Path

import typer

from sharelink.config import Settings, get_settings, resolve_config_path
from sharelink.core import Bridge
from sharelink.models import Tab
from sharelink.surfaces import MemoryContextMenu, MemoryToolbar, StaticTabs


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_bridge(settings: Settings, url: str | None = None) -> Bridge:
    tabs = StaticTabs(Tab(id=1, url=url) if url else None)
    return Bridge(settings, MemoryToolbar(), MemoryContextMenu(), tabs)


@contextlib.asynccontextmanager
async def roster_bridge(
    settings: Settings, url: str | None, timeout: float
) -> AsyncIterator[Bridge | None]:
    """Start a bridge and yield it once the companion reported its devices.

    Yields None if no device list arrived within ``timeout`` seconds.
    """
    bridge = build_bridge(settings, url)
    try:
        with bridge.hub.listen() as queue:
            await bridge.start()
            try:
                await asyncio.wait_for(_wait_for_devices(queue), timeout)
            except asyncio.TimeoutError:
                ready = False
            else:
                await bridge.drain()
                ready = True
        yield bridge if ready else None
    finally:
        await bridge.stop()


async def _wait_for_devices(queue: asyncio.Queue[dict[str, object]]) -> None:
    while True:
        message = await queue.get()
        if message.get("type") == "devices":
            return
