"""wsabridge - manage Android packages and devices on Windows Subsystem for Android."""

from __future__ import annotations

from importlib.metadata import version

from .adb import AdbClient, Endpoint
from .config import AdbConfig, Settings, SubsystemConfig, get_settings
from .errors import AdbError, AdbException, ServiceError, ServiceException
from .factory import create_adb_client, create_package_manager, create_subsystem
from .models import DeviceType, KnownDevice, PackageInfo
from .package_manager import AdbPackageManager
from .subsystem import ReadinessState, Subsystem

__all__ = [
    "AdbClient",
    "AdbConfig",
    "AdbError",
    "AdbException",
    "AdbPackageManager",
    "DeviceType",
    "Endpoint",
    "KnownDevice",
    "PackageInfo",
    "ReadinessState",
    "ServiceError",
    "ServiceException",
    "Settings",
    "Subsystem",
    "SubsystemConfig",
    "__version__",
    "create_adb_client",
    "create_package_manager",
    "create_subsystem",
    "get_settings",
]

__version__ = version("wsabridge")
