"""Wire the clients to the real operating system."""

from __future__ import annotations

from wsabridge.adb import AdbClient
from wsabridge.config import Settings, get_settings
from wsabridge.launcher import WsaClient
from wsabridge.package_manager import AdbPackageManager
from wsabridge.subsystem import Subsystem
from wsabridge.system import (
    AsyncioProcessRunner,
    OsEnvironment,
    OsFileSystem,
    ScServiceController,
    TcpPortProbe,
    Win32MutexProbe,
)


def create_adb_client(settings: Settings | None = None) -> AdbClient:
    settings = settings or get_settings()
    return AdbClient(
        AsyncioProcessRunner(), OsEnvironment(), OsFileSystem(), settings.adb
    )


def create_launcher(settings: Settings | None = None) -> WsaClient:
    settings = settings or get_settings()
    return WsaClient(
        AsyncioProcessRunner(),
        OsEnvironment(),
        OsFileSystem(),
        settings.subsystem.package_family_name,
    )


def create_subsystem(
    settings: Settings | None = None, adb: AdbClient | None = None
) -> Subsystem:
    settings = settings or get_settings()
    runner = AsyncioProcessRunner()
    return Subsystem(
        adb=adb or create_adb_client(settings),
        launcher=create_launcher(settings),
        runner=runner,
        environment=OsEnvironment(),
        services=ScServiceController(runner),
        mutex=Win32MutexProbe(),
        ports=TcpPortProbe(),
        config=settings.subsystem,
    )


def create_package_manager(
    settings: Settings | None = None, adb: AdbClient | None = None
) -> AdbPackageManager:
    return AdbPackageManager(adb or create_adb_client(settings))
