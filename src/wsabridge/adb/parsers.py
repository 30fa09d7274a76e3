"""Parsers for adb text output.

Everything in here is pure: the functions take the raw tool output (plus any
context needed for error messages) and return typed values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from wsabridge.models import DeviceType, KnownDevice, PackageInfo

DEVICE_LIST_HEADER = "List of devices attached"
PACKAGE_PREFIX = "package:"

VERSION_CODE_KEY = "versionCode="
VERSION_NAME_KEY = "versionName="
FIRST_INSTALL_TIME_KEY = "firstInstallTime="
INSTALL_DATE_FORMAT = "%Y-%m-%d"

_WHITESPACE = re.compile(r"\s")


class DeviceLineError(ValueError):
    """A line of ``adb devices -l`` output could not be parsed."""


class DumpParseError(ValueError):
    """A ``dumpsys package`` dump lacks an expected value."""


def parse_device_type(raw: str) -> DeviceType:
    try:
        return DeviceType(raw.lower())
    except ValueError as exc:
        raise DeviceLineError(f"Device type '{raw}' is unknown!") from exc


def _find_property(properties: list[str], key: str) -> str:
    prefix = f"{key}:"
    for prop in properties:
        if prop.startswith(prefix):
            return prop[len(prefix) :]
    return ""


def parse_device_line(line: str) -> KnownDevice:
    """Parse ``<serial> <type> [key:value ...]``."""
    parts = line.split()
    if len(parts) < 2:
        raise DeviceLineError(f"Invalid adb device line: {line!r}")

    properties = parts[2:]
    return KnownDevice(
        serial_number=parts[0],
        device_type=parse_device_type(parts[1]),
        product_code=_find_property(properties, "product"),
        device_code=_find_property(properties, "device"),
        model_number=_find_property(properties, "model"),
        transport_id=_find_property(properties, "transport_id"),
    )


def parse_device_list(output: str) -> list[KnownDevice]:
    lines = [line.strip() for line in output.splitlines()]
    lines = [line for line in lines if line]

    # adb may print daemon startup notices before the header
    start = 1
    for index, line in enumerate(lines):
        if line.lower() == DEVICE_LIST_HEADER.lower():
            start = index + 1
            break

    return [parse_device_line(line) for line in lines[start:]]


def parse_package_list(output: str) -> list[str]:
    return [
        line[len(PACKAGE_PREFIX) :].strip()
        for line in output.splitlines()
        if line.startswith(PACKAGE_PREFIX)
    ]


class DumpValueStatus(Enum):
    FOUND = "found"
    KEY_MISSING = "key_missing"
    VALUE_UNTERMINATED = "value_unterminated"


@dataclass(frozen=True)
class DumpValue:
    key: str
    status: DumpValueStatus
    value: str = ""

    @property
    def found(self) -> bool:
        return self.status is DumpValueStatus.FOUND


def extract_dump_value(dump: str, key: str) -> DumpValue:
    """Locate ``key`` in ``dump`` and return the text up to the next whitespace.

    The end of the dump also terminates a value, unless nothing follows the
    key at all.
    """
    index = dump.find(key)
    if index < 0:
        return DumpValue(key, DumpValueStatus.KEY_MISSING)

    start = index + len(key)
    if start >= len(dump):
        return DumpValue(key, DumpValueStatus.VALUE_UNTERMINATED)

    match = _WHITESPACE.search(dump, start)
    end = match.start() if match else len(dump)
    return DumpValue(key, DumpValueStatus.FOUND, dump[start:end])


def require_dump_value(
    dump: str, key: str, package_name: str, device_serial_number: str
) -> str:
    result = extract_dump_value(dump, key)
    if result.status is DumpValueStatus.KEY_MISSING:
        raise DumpParseError(
            f"Failed to find key {key} in dump of {package_name} "
            f"on device {device_serial_number}"
        )
    if result.status is DumpValueStatus.VALUE_UNTERMINATED:
        raise DumpParseError(
            f"Failed to find end of value for key {key} in dump of {package_name} "
            f"on device {device_serial_number}"
        )
    return result.value


def parse_install_date(
    value: str, package_name: str, device_serial_number: str
) -> date:
    try:
        return datetime.strptime(value, INSTALL_DATE_FORMAT).date()
    except ValueError as exc:
        raise DumpParseError(
            f"Invalid {FIRST_INSTALL_TIME_KEY} value '{value}' in dump of "
            f"{package_name} on device {device_serial_number}"
        ) from exc


def parse_package_dump(
    dump: str, package_name: str, device_serial_number: str
) -> PackageInfo:
    version_code = require_dump_value(
        dump, VERSION_CODE_KEY, package_name, device_serial_number
    )
    version_name = require_dump_value(
        dump, VERSION_NAME_KEY, package_name, device_serial_number
    )
    first_install = require_dump_value(
        dump, FIRST_INSTALL_TIME_KEY, package_name, device_serial_number
    )

    return PackageInfo(
        package_name=package_name,
        version_code=version_code,
        display_version=version_name,
        install_date=parse_install_date(
            first_install, package_name, device_serial_number
        ),
    )
