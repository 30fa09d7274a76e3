"""Wrapper around the adb executable."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from wsabridge.config import AdbConfig
from wsabridge.errors import AdbError, AdbException
from wsabridge.models import KnownDevice, PackageInfo
from wsabridge.system import (
    Environment,
    FileSystem,
    ProcessRunner,
    collect_output,
    start_readers,
)

from .endpoint import EndpointLike, format_address
from .parsers import (
    DEVICE_LIST_HEADER,
    parse_device_list,
    parse_package_dump,
    parse_package_list,
)

logger = logging.getLogger(__name__)

PATH_VARIABLE = "PATH"
WINDOWS_PLATFORM_TOOLS = ("adb.exe", "AdbWinApi.dll", "fastboot.exe")
POSIX_PLATFORM_TOOLS = ("adb", "fastboot")


def format_command(arguments: Sequence[str]) -> str:
    return " ".join(["adb", *(argument for argument in arguments if argument)])


def _combine_output(stdout: str, stderr: str) -> str:
    return "\n".join(part for part in (stdout, stderr) if part)


class AdbClient:
    """Runs adb commands and turns their output into typed results.

    The first member of the platform tools tuple is the adb executable; a
    PATH entry only qualifies when it contains every file of the tuple.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        environment: Environment,
        filesystem: FileSystem,
        config: AdbConfig | None = None,
    ) -> None:
        config = config or AdbConfig()
        self._runner = runner
        self._environment = environment
        self._filesystem = filesystem
        self._timeout = config.command_timeout
        self._path_to_adb: str | None = config.path
        self.restart_server_on_command_timeout = config.restart_server_on_timeout

    @property
    def path_to_adb(self) -> str | None:
        """Full path to adb, ``""`` if it was not found, ``None`` if not looked up yet."""
        return self._path_to_adb

    @path_to_adb.setter
    def path_to_adb(self, value: str | None) -> None:
        self._path_to_adb = value

    @property
    def is_installed(self) -> bool:
        if self._path_to_adb is None:
            self._path_to_adb = self._find_adb()
        return self._path_to_adb != ""

    @property
    def platform_tools(self) -> tuple[str, ...]:
        if self._environment.is_windows:
            return WINDOWS_PLATFORM_TOOLS
        return POSIX_PLATFORM_TOOLS

    def _find_adb(self) -> str:
        raw = self._environment.get_environment_variable(PATH_VARIABLE)
        candidates = [
            entry.strip() for entry in raw.split(self._environment.path_separator)
        ]
        required = self.platform_tools

        for directory in candidates:
            if not directory or not self._filesystem.directory_exists(directory):
                continue
            if all(
                self._filesystem.file_exists(self._filesystem.combine(directory, name))
                for name in required
            ):
                path = self._filesystem.combine(directory, required[0])
                logger.debug("Found platform tools in %s", directory)
                return path

        logger.info("Platform tools were not found in %s", PATH_VARIABLE)
        return ""

    async def execute_command(
        self,
        arguments: Sequence[str],
        *,
        output_must_include: str | None = None,
        output_must_not_include: str | None = None,
        restart_on_timeout: bool | None = None,
    ) -> str:
        """Run adb with ``arguments`` and return its standard output.

        Empty arguments are dropped. On timeout the process is killed and,
        if restarting is enabled, the adb server is restarted and the command
        retried exactly once.
        """
        adb_path = self._path_to_adb if self.is_installed else None
        if not adb_path:
            raise AdbException(AdbError.ADB_IS_NOT_INSTALLED)

        if restart_on_timeout is None:
            restart_on_timeout = self.restart_server_on_command_timeout

        command = format_command(arguments)
        logger.debug("Executing %s", command)

        process = await self._runner.start(
            adb_path, [argument for argument in arguments if argument]
        )
        if process is None:
            raise AdbException(AdbError.CANNOT_START_ADB, command)

        readers = start_readers(process)
        exit_code = await process.wait_for_exit(self._timeout)

        if exit_code is None:
            process.kill()
            stdout, stderr = await collect_output(process, readers)

            if restart_on_timeout:
                logger.warning(
                    "%s timed out after %.1fs, restarting adb server", command, self._timeout
                )
                await self.restart_server()
                return await self.execute_command(
                    arguments,
                    output_must_include=output_must_include,
                    output_must_not_include=output_must_not_include,
                    restart_on_timeout=False,
                )

            raise AdbException(
                AdbError.COMMAND_TIMED_OUT, command, _combine_output(stdout, stderr)
            )

        stdout, stderr = await collect_output(process, readers)

        if exit_code != 0:
            logger.debug("%s exited with code %d", command, exit_code)
            raise AdbException(
                AdbError.COMMAND_FAILED, command, _combine_output(stdout, stderr)
            )

        if output_must_include and output_must_include.lower() not in stdout.lower():
            raise AdbException(
                AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT,
                command,
                _combine_output(stdout, stderr),
            )

        if output_must_not_include and output_must_not_include.lower() in stdout.lower():
            raise AdbException(
                AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT,
                command,
                _combine_output(stdout, stderr),
            )

        return stdout

    async def kill_server(self) -> None:
        await self.execute_command(["kill-server"], restart_on_timeout=False)

    async def start_server(self) -> None:
        await self.execute_command(["start-server"], restart_on_timeout=False)

    async def restart_server(self) -> None:
        await self.kill_server()
        await self.start_server()

    async def install_package(
        self,
        device_serial_number: str,
        file_path: str,
        allow_downgrade: bool = False,
    ) -> None:
        await self.execute_command(
            [
                "-s",
                device_serial_number,
                "install",
                file_path,
                "-d" if allow_downgrade else "",
            ],
            output_must_include="Success",
        )

    async def uninstall_package(
        self, device_serial_number: str, package_name: str
    ) -> None:
        await self.execute_command(
            ["-s", device_serial_number, "uninstall", package_name],
            output_must_include="Success",
        )

    async def connect(self, endpoint: EndpointLike) -> None:
        address = format_address(endpoint)
        await self.execute_command(
            ["connect", address],
            output_must_not_include=f"cannot connect to {address}",
        )

    async def disconnect(self, endpoint: EndpointLike) -> None:
        address = format_address(endpoint)
        await self.execute_command(
            ["disconnect", address],
            output_must_include=f"disconnected {address}",
        )

    async def list_devices(self) -> list[KnownDevice]:
        output = await self.execute_command(
            ["devices", "-l"], output_must_include=DEVICE_LIST_HEADER
        )
        return parse_device_list(output)

    async def get_installed_packages(
        self, device_serial_number: str
    ) -> list[PackageInfo]:
        output = await self.execute_command(
            ["-s", device_serial_number, "shell", "pm", "list", "packages", "-3"]
        )

        # one dump at a time, each dump is a separate adb process
        packages: list[PackageInfo] = []
        for package_name in parse_package_list(output):
            packages.append(
                await self._get_package_dump(device_serial_number, package_name)
            )
        return packages

    async def get_installed_package(
        self, device_serial_number: str, package_name: str
    ) -> PackageInfo | None:
        """Return the package's info, or ``None`` if it is not installed."""
        try:
            return await self._get_package_dump(device_serial_number, package_name)
        except AdbException as exc:
            if exc.error is not AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT:
                raise
            logger.debug(
                "Package %s is not installed on %s", package_name, device_serial_number
            )
            return None

    async def launch_package(self, device_serial_number: str, package_name: str) -> None:
        await self.execute_command(
            ["-s", device_serial_number, "shell", "monkey", "-p", package_name, "1"],
            output_must_include="Events injected: 1",
        )

    async def execute_shell_command(
        self,
        command: str,
        arguments: Sequence[str] = (),
        device_serial_number: str | None = None,
    ) -> str:
        target = ["-s", device_serial_number] if device_serial_number else []
        output = await self.execute_command([*target, "shell", command, *arguments])
        return output.strip()

    async def _get_package_dump(
        self, device_serial_number: str, package_name: str
    ) -> PackageInfo:
        dump = await self.execute_command(
            ["-s", device_serial_number, "shell", "dumpsys", "package", package_name],
            output_must_not_include=f"Unable to find package: {package_name}",
        )
        return parse_package_dump(dump, package_name, device_serial_number)
