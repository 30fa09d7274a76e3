"""Wrapper for the subsystem's ``WsaClient.exe`` launcher helper."""

from __future__ import annotations

import logging

from wsabridge.errors import LauncherError
from wsabridge.system import Environment, FileSystem, ProcessRunner

logger = logging.getLogger(__name__)

LAUNCHER_EXECUTABLE = "WsaClient.exe"


class WsaClient:
    def __init__(
        self,
        runner: ProcessRunner,
        environment: Environment,
        filesystem: FileSystem,
        package_family_name: str,
    ) -> None:
        self._runner = runner
        self._environment = environment
        self._filesystem = filesystem
        self._package_family_name = package_family_name
        self._program_file_path = ""

    def _candidate_path(self) -> str:
        local_app_data = self._environment.local_app_data()
        if not local_app_data:
            return ""
        return self._filesystem.combine(
            local_app_data,
            "Microsoft",
            "WindowsApps",
            self._package_family_name,
            LAUNCHER_EXECUTABLE,
        )

    @property
    def program_file_path(self) -> str:
        if not self._program_file_path:
            path = self._candidate_path()
            if not path or not self._filesystem.file_exists(path):
                raise FileNotFoundError(
                    f"Windows Subsystem for Android is not installed "
                    f"({LAUNCHER_EXECUTABLE} not found at '{path}')"
                )
            self._program_file_path = path
        return self._program_file_path

    @property
    def is_installed(self) -> bool:
        path = self._candidate_path()
        return bool(path) and self._filesystem.file_exists(path)

    async def start(self) -> None:
        """Spawn the launcher without waiting for it to exit."""
        process = await self._runner.start(
            self.program_file_path, [], capture_output=False
        )
        if process is None:
            raise LauncherError(f"Failed to start {LAUNCHER_EXECUTABLE}")
        logger.debug("Started %s", LAUNCHER_EXECUTABLE)

    async def launch(self, package_name: str) -> None:
        await self._execute("launch", f"wsa://{package_name}")

    async def uninstall(self, package_name: str) -> None:
        await self._execute("/uninstall", package_name)

    async def launch_deep_link(self, link: str) -> None:
        await self._execute("/deeplink", link)

    async def _execute(self, *arguments: str) -> None:
        process = await self._runner.start(
            self.program_file_path, arguments, capture_output=False
        )
        if process is None:
            raise LauncherError(f"Failed to start {LAUNCHER_EXECUTABLE}")

        exit_code = await process.wait_for_exit()
        if exit_code != 0:
            raise LauncherError(
                f"{LAUNCHER_EXECUTABLE} failed to execute command "
                f"'{' '.join(arguments)}' (Exit code is {exit_code})."
            )
