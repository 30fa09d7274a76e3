"""Data models for wsabridge."""

from wsabridge.models.device import DeviceType, KnownDevice
from wsabridge.models.package import PackageInfo

__all__ = [
    "DeviceType",
    "KnownDevice",
    "PackageInfo",
]
