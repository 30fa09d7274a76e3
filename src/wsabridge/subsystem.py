"""Bring the Android subsystem into a state where adb can talk to it."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol

from wsabridge.adb import Endpoint, EndpointLike
from wsabridge.config import SubsystemConfig
from wsabridge.errors import LauncherError, ServiceError, ServiceException
from wsabridge.launcher import WsaClient
from wsabridge.models import KnownDevice
from wsabridge.system import (
    Environment,
    MutexProbe,
    PortProbe,
    ProcessRunner,
    ServiceControlError,
    ServiceController,
    ServiceStatus,
)

logger = logging.getLogger(__name__)

ProgressSink = Callable[[str], None]

REQUIREMENTS_MESSAGE = (
    "Windows Subsystem for Android requires 64-bit system and Windows 11 or higher"
)
NOT_INSTALLED_MESSAGE = "This system does not have WSA installed."


class ReadinessState(Enum):
    NOT_RUNNING = "not_running"
    SERVICE_STARTING = "service_starting"
    PORT_WAITING = "port_waiting"
    DEVICE_RECONCILING = "device_reconciling"
    CONNECTED = "connected"


class DeviceBridge(Protocol):
    async def list_devices(self) -> Sequence[KnownDevice]: ...

    async def connect(self, endpoint: EndpointLike) -> None: ...

    async def disconnect(self, endpoint: EndpointLike) -> None: ...


def _ignore_progress(_message: str) -> None:
    return None


class Subsystem:
    """Readiness state machine for the Windows Subsystem for Android.

    ``ensure_ready`` walks NOT_RUNNING -> SERVICE_STARTING -> PORT_WAITING ->
    DEVICE_RECONCILING -> CONNECTED, skipping the service phases when the
    subsystem is already running. Any phase may raise
    :class:`~wsabridge.errors.ServiceException`, which aborts the sequence.

    Only one ``ensure_ready`` call may be in flight per instance.
    """

    def __init__(
        self,
        adb: DeviceBridge,
        launcher: WsaClient,
        runner: ProcessRunner,
        environment: Environment,
        services: ServiceController,
        mutex: MutexProbe,
        ports: PortProbe,
        config: SubsystemConfig | None = None,
    ) -> None:
        self._adb = adb
        self._launcher = launcher
        self._runner = runner
        self._environment = environment
        self._services = services
        self._mutex = mutex
        self._ports = ports
        self._config = config or SubsystemConfig()
        self._state = ReadinessState.NOT_RUNNING

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(self._config.host, self._config.port)

    @property
    def is_running(self) -> bool:
        return self._mutex.exists(self._config.mutex_name)

    @property
    def is_installed(self) -> bool:
        return self._launcher.is_installed

    def missing_capabilities(self) -> str | None:
        """Explain why the host cannot run the subsystem, or ``None`` if it can."""
        env = self._environment
        if not env.is_64bit_os or not env.is_64bit_process:
            return REQUIREMENTS_MESSAGE
        if not env.is_windows:
            return REQUIREMENTS_MESSAGE
        if env.os_build < self._config.min_os_build:
            return REQUIREMENTS_MESSAGE
        if not self.is_installed:
            return NOT_INSTALLED_MESSAGE
        return None

    def is_wsa_supported(self) -> bool:
        return self.missing_capabilities() is None

    async def ensure_ready(self, progress: ProgressSink | None = None) -> None:
        report = progress or _ignore_progress

        if not self.is_running:
            self._state = ReadinessState.NOT_RUNNING
            report("Starting Windows Subsystem for Android...")
            await self.start_service()
            await self._wait_for_open_port()

        report("Connecting to Windows Subsystem for Android...")
        await self._ensure_connected(report)
        await self._adb.connect(self.endpoint)
        self._state = ReadinessState.CONNECTED

    async def start_service(self) -> None:
        """Start the background service (if needed) and the launcher process."""
        self._state = ReadinessState.SERVICE_STARTING
        service_name = self._config.service_name
        try:
            status = await self._services.get_status(service_name)
            if status is not ServiceStatus.RUNNING:
                await self._services.start(service_name)
                await self._wait_for_service_status(ServiceStatus.RUNNING)

            await self._ensure_launcher_running()
        except (ServiceControlError, LauncherError, OSError) as exc:
            logger.error("Cannot start %s: %s", service_name, exc)
            raise ServiceException(ServiceError.CANNOT_START_SERVICE) from exc

    async def get_device_id(self) -> str:
        devices = await self._adb.list_devices()
        device = self._find_device(devices)
        if device is None:
            raise ServiceException(ServiceError.CANNOT_CONNECT_TO_DEVICE)
        return device.serial_number

    def _find_device(self, devices: Sequence[KnownDevice]) -> KnownDevice | None:
        wanted = self._config.model_number.lower()
        for device in devices:
            if device.model_number.lower() == wanted:
                return device
        return None

    async def _wait_for_service_status(self, target: ServiceStatus) -> None:
        service_name = self._config.service_name
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.service_start_timeout

        while await self._services.get_status(service_name) is not target:
            if loop.time() > deadline:
                raise TimeoutError(
                    f"Service {service_name} failed to transition to "
                    f"target status {target.value}"
                )
            await asyncio.sleep(self._config.poll_interval)

    async def _ensure_launcher_running(self) -> None:
        name = self._config.client_process_name
        if self._runner.find_by_name(name) is None:
            logger.info("%s is not running, starting it", name)
            await self._launcher.start()

    async def _wait_for_open_port(self) -> None:
        self._state = ReadinessState.PORT_WAITING
        host, port = self._config.host, self._config.port

        for attempt in range(1, self._config.port_wait_attempts + 1):
            if await self._ports.is_open(host, port):
                logger.debug("Port %s:%d is open after %d attempt(s)", host, port, attempt)
                return
            await asyncio.sleep(self._config.poll_interval)

        raise ServiceException(ServiceError.CANNOT_CONNECT_TO_SERVICE)

    async def _ensure_connected(self, report: ProgressSink) -> None:
        self._state = ReadinessState.DEVICE_RECONCILING
        endpoint = self.endpoint
        tried_to_connect = False

        while True:
            report("Querying connected devices...")
            device = self._find_device(await self._adb.list_devices())

            if device is None:
                if tried_to_connect:
                    raise ServiceException(ServiceError.CANNOT_CONNECT_TO_DEVICE)
                tried_to_connect = True
                report("Connecting to wsa device...")
                await self._adb.connect(endpoint)
            elif device.is_offline:
                report("Reconnecting to wsa device...")
                await self._adb.disconnect(endpoint)
                await self._adb.connect(endpoint)
            elif device.is_device:
                break
            else:
                logger.debug(
                    "Device %s is %s, polling again",
                    device.serial_number,
                    device.device_type.value,
                )
                await asyncio.sleep(self._config.poll_interval)

        report("Connected to wsa device")
