from __future__ import annotations

from typing import Annotated

import typer

from wsabridge.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands import packages as packages_cmd
from .commands.devices import register as register_devices
from .commands.subsystem import register as register_subsystem

app = typer.Typer(
    help="wsabridge - manage apps on Windows Subsystem for Android via adb",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(packages_cmd.app, name="packages")

register_devices(app)
register_subsystem(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (defaults to $LOGLEVEL or INFO)"),
    ] = None,
) -> None:
    """wsabridge CLI."""
    setup_logging(log_level)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"wsabridge version {get_version('wsabridge')}")
        raise typer.Exit()
