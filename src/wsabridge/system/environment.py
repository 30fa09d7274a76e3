from __future__ import annotations

import os
import platform
import sys
from typing import Protocol


class Environment(Protocol):
    @property
    def path_separator(self) -> str: ...

    @property
    def is_windows(self) -> bool: ...

    @property
    def is_64bit_os(self) -> bool: ...

    @property
    def is_64bit_process(self) -> bool: ...

    @property
    def os_build(self) -> int: ...

    def get_environment_variable(self, name: str) -> str:
        """Return the variable's value, or an empty string when unset."""
        ...

    def local_app_data(self) -> str: ...


def _parse_build(version: str) -> int:
    last = version.rsplit(".", 1)[-1]
    return int(last) if last.isdigit() else 0


class OsEnvironment:
    @property
    def path_separator(self) -> str:
        return os.pathsep

    @property
    def is_windows(self) -> bool:
        return sys.platform == "win32"

    @property
    def is_64bit_os(self) -> bool:
        return platform.machine().endswith("64")

    @property
    def is_64bit_process(self) -> bool:
        return sys.maxsize > 2**32

    @property
    def os_build(self) -> int:
        if not self.is_windows:
            return 0
        return _parse_build(platform.version())

    def get_environment_variable(self, name: str) -> str:
        return os.environ.get(name, "")

    def local_app_data(self) -> str:
        return self.get_environment_variable("LOCALAPPDATA")
