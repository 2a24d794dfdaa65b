from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from sharelink.cli.common import load_settings_or_exit, roster_bridge
from sharelink.config import Settings
from sharelink.errors import FailureKind
from sharelink.models import Action, SharePayload, ShareRequest


async def _share(
    settings: Settings, request: ShareRequest, timeout: float
) -> FailureKind | None:
    async with roster_bridge(settings, None, timeout) as bridge:
        if bridge is None:
            return FailureKind.NOT_CONNECTED
        if bridge.roster.find(request.data.device) is None:
            return FailureKind.INVALID_DEVICE
        return await bridge.supervisor.send(request)


def share(
    device: str = typer.Argument(..., help="Device ID"),
    url: str = typer.Argument(..., help="URL to share, or phone number for SMS"),
    action: Action = typer.Option(Action.SHARE, "--action", "-a", help="Action"),
    timeout: float = typer.Option(5.0, "--timeout", "-t", help="Seconds to wait"),
) -> None:
    """Send a link or number to a paired device."""
    settings = load_settings_or_exit()
    console = Console()

    request = ShareRequest(data=SharePayload(device=device, url=url, action=action))
    failure = asyncio.run(_share(settings, request, timeout))

    if failure is FailureKind.INVALID_DEVICE:
        console.print(f"[yellow]![/yellow] Device '{device}' not found")
        raise typer.Exit(1)
    if failure is not None:
        console.print(f"[red]Error:[/red] share failed ({failure.value})")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Sent {url} to '{device}'")


def register(app: typer.Typer) -> None:
    app.command()(share)
