from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from sharelink.cli.common import load_settings_or_exit, roster_bridge
from sharelink.config import Settings
from sharelink.models import Device, MenuItem

DEFAULT_URL = "https://example.com/"


async def _fetch(
    settings: Settings, url: str | None, timeout: float
) -> tuple[list[Device], list[MenuItem]] | None:
    async with roster_bridge(settings, url, timeout) as bridge:
        if bridge is None:
            return None
        tab = await bridge.projector.active_tab()
        items = await bridge.projector.build_context_menu(tab)
        return list(bridge.roster.devices), items


def _fetch_or_exit(
    settings: Settings, url: str | None, timeout: float, console: Console
) -> tuple[list[Device], list[MenuItem]]:
    result = asyncio.run(_fetch(settings, url, timeout))
    if result is None:
        console.print(
            f"[red]Error:[/red] no device list from "
            f"{settings.companion.host_name} within {timeout:g}s"
        )
        raise typer.Exit(1)
    return result


def list_devices(
    timeout: float = typer.Option(5.0, "--timeout", "-t", help="Seconds to wait"),
) -> None:
    """List devices known to the companion process."""
    settings = load_settings_or_exit()
    console = Console()
    devices, _ = _fetch_or_exit(settings, DEFAULT_URL, timeout, console)

    if not devices:
        console.print("No devices reported.")
        return

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Share")
    table.add_column("SMS")

    for device in devices:
        table.add_row(
            device.id,
            device.name,
            "✓" if device.share else "",
            "✓" if device.telephony else "",
        )

    console.print(table)


def show_menu(
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="URL of the active tab"),
    timeout: float = typer.Option(5.0, "--timeout", "-t", help="Seconds to wait"),
) -> None:
    """Print the context menu the bridge would build for a page."""
    settings = load_settings_or_exit()
    console = Console()
    _, items = _fetch_or_exit(settings, url, timeout, console)

    if not items:
        console.print("Context menu is empty.")
        return

    tree = Tree("[bold]Context menu[/bold]")
    nodes: dict[str | None, Tree] = {}
    for item in items:
        parent = nodes.get(item.parent_id, tree)
        nodes[item.id] = parent.add(f"{item.title} [dim]({item.id})[/dim]")
    console.print(tree)


def register(app: typer.Typer) -> None:
    app.command("devices")(list_devices)
    app.command("menu")(show_menu)
