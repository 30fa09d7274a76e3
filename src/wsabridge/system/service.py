"""Windows service control through ``sc.exe``."""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Protocol

from .process import ProcessRunner, collect_output, start_readers

logger = logging.getLogger(__name__)

SC_EXECUTABLE = "sc.exe"
SC_TIMEOUT = 30.0

_STATE_PATTERN = re.compile(r"STATE\s*:\s*\d+\s+(\w+)")


class ServiceStatus(Enum):
    STOPPED = "STOPPED"
    START_PENDING = "START_PENDING"
    STOP_PENDING = "STOP_PENDING"
    RUNNING = "RUNNING"
    CONTINUE_PENDING = "CONTINUE_PENDING"
    PAUSE_PENDING = "PAUSE_PENDING"
    PAUSED = "PAUSED"
    UNKNOWN = "UNKNOWN"


class ServiceControlError(Exception):
    pass


class ServiceController(Protocol):
    async def get_status(self, service_name: str) -> ServiceStatus: ...

    async def start(self, service_name: str) -> None: ...


def parse_service_state(output: str) -> ServiceStatus:
    match = _STATE_PATTERN.search(output)
    if match is None:
        return ServiceStatus.UNKNOWN
    try:
        return ServiceStatus(match.group(1).upper())
    except ValueError:
        return ServiceStatus.UNKNOWN


def _failure_details(stdout: str, stderr: str) -> str:
    return "\n".join(part.strip() for part in (stdout, stderr) if part.strip())


class ScServiceController:
    def __init__(self, runner: ProcessRunner) -> None:
        self._runner = runner

    async def _run(self, *arguments: str) -> tuple[int, str, str]:
        process = await self._runner.start(SC_EXECUTABLE, arguments)
        if process is None:
            raise ServiceControlError(f"Cannot start {SC_EXECUTABLE}")

        readers = start_readers(process)
        exit_code = await process.wait_for_exit(SC_TIMEOUT)
        if exit_code is None:
            process.kill()
            await collect_output(process, readers)
            raise ServiceControlError(
                f"{SC_EXECUTABLE} {' '.join(arguments)} timed out"
            )

        stdout, stderr = await collect_output(process, readers)
        return exit_code, stdout, stderr

    async def get_status(self, service_name: str) -> ServiceStatus:
        exit_code, stdout, stderr = await self._run("query", service_name)
        if exit_code != 0:
            raise ServiceControlError(
                f"Cannot query service {service_name} (exit code {exit_code}):\n"
                f"{_failure_details(stdout, stderr)}"
            )
        status = parse_service_state(stdout)
        logger.debug("Service %s is %s", service_name, status.value)
        return status

    async def start(self, service_name: str) -> None:
        logger.info("Starting service %s", service_name)
        exit_code, stdout, stderr = await self._run("start", service_name)
        if exit_code != 0:
            raise ServiceControlError(
                f"Cannot start service {service_name} (exit code {exit_code}):\n"
                f"{_failure_details(stdout, stderr)}"
            )
