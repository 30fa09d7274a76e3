from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from wsabridge.cli.common import (
    build_adb_client,
    load_settings_or_exit,
    resolve_serial,
    run_or_exit,
)
from wsabridge.models import KnownDevice

DEVICE_TYPE_STYLES = {
    "device": "green",
    "emulator": "cyan",
    "offline": "red",
    "unauthorized": "yellow",
}


def _device_table(devices: list[KnownDevice]) -> Table:
    table = Table()
    table.add_column("Serial", style="cyan")
    table.add_column("State")
    table.add_column("Model")
    table.add_column("Product")
    table.add_column("Device")
    table.add_column("Transport")

    for device in devices:
        state = device.device_type.value
        style = DEVICE_TYPE_STYLES.get(state, "white")
        table.add_row(
            device.serial_number,
            f"[{style}]{state}[/{style}]",
            device.model_number,
            device.product_code,
            device.device_code,
            device.transport_id,
        )
    return table


def list_devices() -> None:
    """List devices known by adb."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    devices = run_or_exit(adb.list_devices())

    console = Console()
    if not devices:
        console.print("No devices attached.")
        return

    console.print(_device_table(devices))


def connect(
    address: Annotated[
        str | None,
        typer.Argument(help="host:port to connect to (defaults to the subsystem)"),
    ] = None,
) -> None:
    """Connect adb to a device over TCP."""
    settings = load_settings_or_exit()
    target = address or f"{settings.subsystem.host}:{settings.subsystem.port}"
    adb = build_adb_client(settings)
    run_or_exit(adb.connect(target))
    Console().print(f"[green]✓[/green] Connected to {target}")


def disconnect(
    address: Annotated[
        str | None,
        typer.Argument(help="host:port to disconnect (defaults to the subsystem)"),
    ] = None,
) -> None:
    """Disconnect a TCP device from adb."""
    settings = load_settings_or_exit()
    target = address or f"{settings.subsystem.host}:{settings.subsystem.port}"
    adb = build_adb_client(settings)
    run_or_exit(adb.disconnect(target))
    Console().print(f"[green]✓[/green] Disconnected {target}")


def restart_server() -> None:
    """Restart the adb server."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    run_or_exit(adb.restart_server())
    Console().print("[green]✓[/green] adb server restarted")


def shell(
    command: Annotated[str, typer.Argument(help="Shell command to run on the device")],
    arguments: Annotated[
        list[str] | None, typer.Argument(help="Arguments for the command")
    ] = None,
    serial: Annotated[
        str | None,
        typer.Option("--serial", "-s", help="Target device (defaults to the subsystem)"),
    ] = None,
) -> None:
    """Run a shell command on a device."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)

    async def _run() -> str:
        target = await resolve_serial(adb, settings, serial)
        return await adb.execute_shell_command(
            command, arguments or [], device_serial_number=target
        )

    typer.echo(run_or_exit(_run()))


def register(app: typer.Typer) -> None:
    app.command("devices")(list_devices)
    app.command("connect")(connect)
    app.command("disconnect")(disconnect)
    app.command("restart-server")(restart_server)
    app.command("shell")(shell)
