from __future__ import annotations

import asyncio
import sys

import pytest

from fakes import FakeRunner, exits, times_out
from wsabridge.system import (
    AsyncioProcessRunner,
    ScServiceController,
    ServiceControlError,
    ServiceStatus,
    parse_service_state,
)

QUERY_RUNNING = """
SERVICE_NAME: WsaService
        TYPE               : 10  WIN32_OWN_PROCESS
        STATE              : 4  RUNNING
                                (STOPPABLE, NOT_PAUSABLE, ACCEPTS_SHUTDOWN)
        WIN32_EXIT_CODE    : 0  (0x0)
"""


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        (QUERY_RUNNING, ServiceStatus.RUNNING),
        ("        STATE              : 1  STOPPED\n", ServiceStatus.STOPPED),
        ("        STATE              : 2  START_PENDING\n", ServiceStatus.START_PENDING),
        ("no state here", ServiceStatus.UNKNOWN),
        ("STATE : 9 EXPLODING", ServiceStatus.UNKNOWN),
    ],
)
def test_parse_service_state(output, expected):
    assert parse_service_state(output) is expected


def test_get_status_queries_sc():
    runner = FakeRunner([exits(QUERY_RUNNING)])

    status = asyncio.run(ScServiceController(runner).get_status("WsaService"))

    assert status is ServiceStatus.RUNNING
    assert runner.calls == [("sc.exe", ["query", "WsaService"], True)]


def test_get_status_failure():
    runner = FakeRunner([exits("[SC] OpenService FAILED 1060", exit_code=1060)])

    with pytest.raises(ServiceControlError, match="1060"):
        asyncio.run(ScServiceController(runner).get_status("WsaService"))


def test_failure_message_includes_stderr():
    runner = FakeRunner([exits("", "Access is denied.", exit_code=5)])

    with pytest.raises(ServiceControlError, match="Access is denied"):
        asyncio.run(ScServiceController(runner).start("WsaService"))


class _PythonScRunner(AsyncioProcessRunner):
    """Runs a python script in place of sc.exe."""

    def __init__(self, script: str) -> None:
        super().__init__()
        self._script = script

    async def start(self, program, arguments, capture_output=True):
        return await super().start(
            sys.executable, ["-c", self._script], capture_output
        )


NOISY_SC = """
import sys
sys.stderr.write("x" * (1024 * 1024))
sys.stderr.flush()
print("        STATE              : 4  RUNNING")
"""


def test_get_status_drains_a_large_stderr():
    controller = ScServiceController(_PythonScRunner(NOISY_SC))

    status = asyncio.run(asyncio.wait_for(controller.get_status("WsaService"), 20))

    assert status is ServiceStatus.RUNNING


def test_start_service():
    runner = FakeRunner([exits("START_PENDING")])

    asyncio.run(ScServiceController(runner).start("WsaService"))

    assert runner.commands == [["start", "WsaService"]]


def test_start_service_timeout_kills_sc():
    process = times_out()
    runner = FakeRunner([process])

    with pytest.raises(ServiceControlError, match="timed out"):
        asyncio.run(ScServiceController(runner).start("WsaService"))

    assert process.killed


def test_sc_cannot_start():
    with pytest.raises(ServiceControlError):
        asyncio.run(ScServiceController(FakeRunner([None])).start("WsaService"))
