from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer

from wsabridge.adb import AdbClient, DeviceLineError, DumpParseError
from wsabridge.config import Settings, get_settings, resolve_config_path
from wsabridge.errors import AdbException, LauncherError, ServiceException
from wsabridge.factory import create_adb_client, create_subsystem
from wsabridge.subsystem import Subsystem

T = TypeVar("T")


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


def build_adb_client(settings: Settings) -> AdbClient:
    return create_adb_client(settings)


def build_subsystem(settings: Settings, adb: AdbClient) -> Subsystem:
    return create_subsystem(settings, adb=adb)


def run_or_exit(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` and turn client failures into a clean exit code."""
    try:
        return asyncio.run(coro)
    except (
        AdbException,
        ServiceException,
        LauncherError,
        DeviceLineError,
        DumpParseError,
    ) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


async def resolve_serial(adb: AdbClient, settings: Settings, serial: str | None) -> str:
    if serial:
        return serial
    return await build_subsystem(settings, adb).get_device_id()
