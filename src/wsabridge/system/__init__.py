"""Thin adapters over host OS facilities."""

from __future__ import annotations

from .environment import Environment, OsEnvironment
from .filesystem import FileSystem, OsFileSystem
from .mutex import MutexProbe, Win32MutexProbe
from .network import PortProbe, TcpPortProbe
from .process import (
    AsyncioProcessRunner,
    ProcessHandle,
    ProcessRunner,
    collect_output,
    start_readers,
)
from .service import (
    ScServiceController,
    ServiceControlError,
    ServiceController,
    ServiceStatus,
    parse_service_state,
)

__all__ = [
    "AsyncioProcessRunner",
    "Environment",
    "FileSystem",
    "MutexProbe",
    "OsEnvironment",
    "OsFileSystem",
    "PortProbe",
    "ProcessHandle",
    "ProcessRunner",
    "ScServiceController",
    "ServiceControlError",
    "ServiceController",
    "ServiceStatus",
    "TcpPortProbe",
    "Win32MutexProbe",
    "collect_output",
    "parse_service_state",
    "start_readers",
]
