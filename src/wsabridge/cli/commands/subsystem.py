from __future__ import annotations

import typer
from rich.console import Console

from wsabridge.cli.common import (
    build_adb_client,
    build_subsystem,
    load_settings_or_exit,
    resolve_config_path_or_exit,
    run_or_exit,
)


def ready() -> None:
    """Start the subsystem if needed and connect adb to it."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    subsystem = build_subsystem(settings, adb)
    console = Console()

    def _progress(message: str) -> None:
        console.print(f"[dim]{message}[/dim]")

    async def _run() -> str:
        await subsystem.ensure_ready(_progress)
        return await subsystem.get_device_id()

    device_id = run_or_exit(_run())
    console.print(f"[green]✓[/green] Subsystem ready, device: {device_id}")


def device_id() -> None:
    """Print the adb serial number of the subsystem device."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    subsystem = build_subsystem(settings, adb)
    typer.echo(run_or_exit(subsystem.get_device_id()))


def info() -> None:
    """Show platform tools and subsystem status."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    subsystem = build_subsystem(settings, adb)
    config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)

    console = Console()
    console.print("[bold]wsabridge info[/bold]\n")
    console.print(f"Config file: {config_path if config_exists else 'defaults'}")

    console.print("\n[bold]Platform tools[/bold]")
    if adb.is_installed:
        console.print(f"adb: {adb.path_to_adb}")
    else:
        console.print("adb: [red]not found in PATH[/red]")
    console.print(f"Command timeout: {settings.adb.command_timeout}s")

    console.print("\n[bold]Subsystem[/bold]")
    missing = subsystem.missing_capabilities()
    if missing is None:
        console.print("Supported: [green]yes[/green]")
    else:
        console.print(f"Supported: [red]no[/red] ({missing})")
    console.print(f"Running: {'yes' if subsystem.is_running else 'no'}")
    console.print(f"Endpoint: {subsystem.endpoint}")


def register(app: typer.Typer) -> None:
    app.command("ready")(ready)
    app.command("device-id")(device_id)
    app.command("info")(info)
