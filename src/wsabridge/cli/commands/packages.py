from __future__ import annotations

from pathlib import Path
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
from wsabridge.models import PackageInfo
from wsabridge.package_manager import AdbPackageManager

app = typer.Typer(no_args_is_help=True, help="Manage installed packages.")

SerialOption = Annotated[
    str | None,
    typer.Option("--serial", "-s", help="Target device (defaults to the subsystem)"),
]


def _package_table(packages: list[PackageInfo]) -> Table:
    table = Table()
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Version code")
    table.add_column("Installed")

    for package in sorted(packages, key=lambda p: p.package_name):
        table.add_row(
            package.package_name,
            package.display_version,
            package.version_code,
            package.install_date.isoformat(),
        )
    return table


@app.command("list")
def list_packages(serial: SerialOption = None) -> None:
    """List user-installed packages."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    manager = AdbPackageManager(adb)

    async def _run() -> list[PackageInfo]:
        target = await resolve_serial(adb, settings, serial)
        return await manager.get_all_installed_packages(target)

    packages = run_or_exit(_run())
    console = Console()
    if not packages:
        console.print("No user packages installed.")
        return
    console.print(_package_table(packages))


@app.command("show")
def show_package(
    package_name: Annotated[str, typer.Argument(help="Package name")],
    serial: SerialOption = None,
) -> None:
    """Show details of an installed package."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    manager = AdbPackageManager(adb)

    async def _run() -> PackageInfo | None:
        target = await resolve_serial(adb, settings, serial)
        return await manager.get_installed_package(target, package_name)

    package = run_or_exit(_run())
    console = Console()
    if package is None:
        console.print(f"[yellow]![/yellow] Package '{package_name}' is not installed")
        raise typer.Exit(1)
    console.print(_package_table([package]))


@app.command("install")
def install_package(
    file_path: Annotated[Path, typer.Argument(help="Path to the .apk file")],
    downgrade: Annotated[
        bool, typer.Option("--downgrade", "-d", help="Allow version downgrade")
    ] = False,
    serial: SerialOption = None,
) -> None:
    """Install or upgrade a package."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    manager = AdbPackageManager(adb)
    console = Console()

    async def _run() -> None:
        target = await resolve_serial(adb, settings, serial)
        await manager.install_package(
            target, str(file_path), console.print, allow_downgrade=downgrade
        )

    run_or_exit(_run())
    console.print(f"[green]✓[/green] Installed {file_path}")


@app.command("uninstall")
def uninstall_package(
    package_name: Annotated[str, typer.Argument(help="Package name")],
    serial: SerialOption = None,
) -> None:
    """Uninstall a package."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    manager = AdbPackageManager(adb)

    async def _run() -> None:
        target = await resolve_serial(adb, settings, serial)
        await manager.uninstall_package(target, package_name)

    run_or_exit(_run())
    Console().print(f"[green]✓[/green] Uninstalled {package_name}")


@app.command("launch")
def launch_package(
    package_name: Annotated[str, typer.Argument(help="Package name")],
    serial: SerialOption = None,
) -> None:
    """Launch an installed package."""
    settings = load_settings_or_exit()
    adb = build_adb_client(settings)
    manager = AdbPackageManager(adb)

    async def _run() -> None:
        target = await resolve_serial(adb, settings, serial)
        await manager.launch(target, package_name)

    run_or_exit(_run())
    Console().print(f"[green]✓[/green] Launched {package_name}")
