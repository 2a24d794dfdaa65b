from __future__ import annotations

import asyncio

import typer

from sharelink.core import parse_device_spec, run_mock_companion


def register(app: typer.Typer) -> None:
    @app.command("mock-companion")
    def mock_companion(
        origin: str | None = typer.Argument(
            None, help="Caller origin, passed by the bridge and ignored"
        ),
        device: list[str] = typer.Option(
            [],
            "--device",
            "-d",
            help="Device as ID:NAME[:CAPS], CAPS a comma list of share,telephony",
        ),
        silent: bool = typer.Option(
            False, "--silent", help="Do not announce the connection on start"
        ),
    ) -> None:
        """Act as a companion process on stdin/stdout."""
        try:
            devices = [parse_device_spec(spec) for spec in device]
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc

        try:
            asyncio.run(run_mock_companion(devices, announce=not silent))
        except KeyboardInterrupt:
            pass
