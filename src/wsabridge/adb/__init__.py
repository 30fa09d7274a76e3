from __future__ import annotations

from .client import AdbClient, format_command
from .endpoint import Endpoint, EndpointLike, format_address
from .parsers import (
    DeviceLineError,
    DumpParseError,
    DumpValue,
    DumpValueStatus,
    extract_dump_value,
    parse_device_line,
    parse_device_list,
    parse_package_dump,
    parse_package_list,
)

__all__ = [
    "AdbClient",
    "DeviceLineError",
    "DumpParseError",
    "DumpValue",
    "DumpValueStatus",
    "Endpoint",
    "EndpointLike",
    "extract_dump_value",
    "format_address",
    "format_command",
    "parse_device_line",
    "parse_device_list",
    "parse_package_dump",
    "parse_package_list",
]
