from __future__ import annotations

import ctypes
import sys
from typing import Protocol

SYNCHRONIZE = 0x00100000


class MutexProbe(Protocol):
    def exists(self, name: str) -> bool:
        """Return ``True`` if some process currently holds the named mutex."""
        ...


class Win32MutexProbe:
    def exists(self, name: str) -> bool:
        if sys.platform != "win32":
            return False
        kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)
        handle = kernel32.OpenMutexW(SYNCHRONIZE, False, name)
        if not handle:
            return False
        kernel32.CloseHandle(handle)
        return True
