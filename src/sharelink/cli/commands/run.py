from __future__ import annotations

import asyncio
import json

import typer
from rich.console import Console

from sharelink.cli.common import build_bridge, load_settings_or_exit
from sharelink.config import Settings


async def _run(settings: Settings, url: str | None, console: Console) -> None:
    bridge = build_bridge(settings, url)
    with bridge.hub.listen() as queue:
        await bridge.start()
        try:
            while True:
                message = await queue.get()
                mtype = message.get("type")
                data = json.dumps(message.get("data"), ensure_ascii=False)
                console.print(f"[cyan]{mtype}[/cyan] {data}", highlight=False)
        finally:
            await bridge.stop()


def run(
    url: str | None = typer.Option(
        None, "--url", "-u", help="URL of the active tab the menu is built for"
    ),
) -> None:
    """Run the bridge and print every message relayed to the UI."""
    settings = load_settings_or_exit()
    console = Console()
    console.print(f"Connecting to {settings.companion.host_name}...")
    console.print("Press Ctrl+C to stop.\n")

    try:
        asyncio.run(_run(settings, url, console))
    except KeyboardInterrupt:
        console.print("\n[green]Stopped.[/green]")


def register(app: typer.Typer) -> None:
    app.command()(run)
