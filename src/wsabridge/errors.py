"""Error types raised by the bridge client and the subsystem orchestrator."""

from __future__ import annotations

from enum import Enum


class AdbError(Enum):
    """Failure tag carried by every :class:`AdbException`."""

    ADB_IS_NOT_INSTALLED = "adb_is_not_installed"
    CANNOT_START_ADB = "cannot_start_adb"
    COMMAND_FAILED = "command_failed"
    COMMAND_FINISHED_WITH_INVALID_OUTPUT = "command_finished_with_invalid_output"
    COMMAND_TIMED_OUT = "command_timed_out"


ADB_ERROR_MESSAGES: dict[AdbError, str] = {
    AdbError.ADB_IS_NOT_INSTALLED: (
        "Platform tools (which contains Adb executable) are not installed."
    ),
    AdbError.CANNOT_START_ADB: "Adb executable cannot be started by the system.",
    AdbError.COMMAND_FAILED: (
        "Adb command could be started but the exit code wasn't zero."
    ),
    AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT: (
        "Adb command could be started and has finished but the output is invalid."
    ),
    AdbError.COMMAND_TIMED_OUT: "Adb command has been started but timed out.",
}


class AdbException(Exception):
    """A failed bridge command.

    Callers branch on :attr:`error`; :attr:`command` and :attr:`output` keep
    the attempted command line and the combined stdout/stderr text.
    """

    def __init__(
        self,
        error: AdbError,
        command: str | None = None,
        output: str | None = None,
    ) -> None:
        parts = [ADB_ERROR_MESSAGES[error]]
        if command is not None:
            parts.append(f"Command: {command}")
        if output:
            parts.append(output)
        super().__init__("\n".join(parts))
        self.error = error
        self.command = command
        self.output = output


class ServiceError(Enum):
    """Failure tag carried by every :class:`ServiceException`."""

    CANNOT_START_SERVICE = "cannot_start_service"
    CANNOT_CONNECT_TO_SERVICE = "cannot_connect_to_service"
    CANNOT_CONNECT_TO_DEVICE = "cannot_connect_to_device"


SERVICE_ERROR_MESSAGES: dict[ServiceError, str] = {
    ServiceError.CANNOT_START_SERVICE: "Cannot start the WSA-service",
    ServiceError.CANNOT_CONNECT_TO_SERVICE: "Adb cannot connect to WSA-service",
    ServiceError.CANNOT_CONNECT_TO_DEVICE: "Adb cannot connect to the WSA device",
}


class ServiceException(Exception):
    """The subsystem could not be brought into a usable state."""

    def __init__(self, error: ServiceError) -> None:
        super().__init__(SERVICE_ERROR_MESSAGES[error])
        self.error = error


class LauncherError(Exception):
    """The launcher helper could not be started or reported a failure."""
