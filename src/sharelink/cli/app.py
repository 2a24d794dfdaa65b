from __future__ import annotations

from typing import Annotated

import typer

from sharelink.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands.devices import register as register_devices
from .commands.init import register as register_init
from .commands.mock import register as register_mock
from .commands.run import register as register_run
from .commands.share import register as register_share

app = typer.Typer(
    help="sharelink - relay links and SMS to paired devices", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")

register_init(app)
register_run(app)
register_devices(app)
register_share(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """sharelink CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"sharelink version {get_version('sharelink')}")
        raise typer.Exit()
