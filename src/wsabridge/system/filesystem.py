from __future__ import annotations

from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    def directory_exists(self, path: str) -> bool: ...

    def file_exists(self, path: str) -> bool: ...

    def combine(self, *segments: str) -> str: ...


class OsFileSystem:
    def directory_exists(self, path: str) -> bool:
        return Path(path).is_dir()

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()

    def combine(self, *segments: str) -> str:
        return str(Path(*segments))
