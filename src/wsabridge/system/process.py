"""Child process spawning on top of asyncio."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol

import psutil

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
# how long readers may keep going once the process has exited or been killed
OUTPUT_DRAIN_TIMEOUT = 1.0


class ProcessHandle(Protocol):
    @property
    def exit_code(self) -> int | None: ...

    async def read_stdout(self) -> str: ...

    async def read_stderr(self) -> str: ...

    def captured_output(self) -> tuple[str, str]:
        """Return the stdout and stderr text read so far."""
        ...

    async def wait_for_exit(self, timeout: float | None = None) -> int | None:
        """Return the exit code, or ``None`` if ``timeout`` elapsed first."""
        ...

    def kill(self) -> None:
        """Kill the process together with all of its descendants."""
        ...


class ProcessRunner(Protocol):
    async def start(
        self,
        program: str,
        arguments: Sequence[str],
        capture_output: bool = True,
    ) -> ProcessHandle | None:
        """Spawn ``program``; ``None`` means the system refused to start it."""
        ...

    def find_by_name(self, name: str) -> int | None:
        """Return the pid of the first process called ``name``."""
        ...


async def _consume_stream(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        buffer.extend(chunk)


def start_readers(process: ProcessHandle) -> tuple[asyncio.Task[str], asyncio.Task[str]]:
    """Start draining stdout and stderr concurrently."""
    return (
        asyncio.create_task(process.read_stdout()),
        asyncio.create_task(process.read_stderr()),
    )


async def collect_output(
    process: ProcessHandle,
    readers: tuple[asyncio.Task[str], asyncio.Task[str]],
    timeout: float = OUTPUT_DRAIN_TIMEOUT,
) -> tuple[str, str]:
    """Join the reader tasks, giving up after ``timeout`` seconds.

    A descendant that inherited the pipes (``adb start-server`` leaves its
    daemon behind) keeps them open after the process itself is gone. In that
    case the readers are cancelled and the text captured so far is returned.
    """
    try:
        async with asyncio.timeout(timeout):
            stdout, stderr = await asyncio.gather(*readers)
    except TimeoutError:
        logger.debug("Output pipes still open after %.1fs, using partial output", timeout)
        return process.captured_output()
    return stdout, stderr


class AsyncioProcess:
    """:class:`ProcessHandle` backed by :class:`asyncio.subprocess.Process`."""

    def __init__(self, process: asyncio.subprocess.Process) -> None:
        self._process = process
        self._stdout = bytearray()
        self._stderr = bytearray()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def exit_code(self) -> int | None:
        return self._process.returncode

    async def read_stdout(self) -> str:
        await _consume_stream(self._process.stdout, self._stdout)
        return self._stdout.decode("utf-8", errors="replace")

    async def read_stderr(self) -> str:
        await _consume_stream(self._process.stderr, self._stderr)
        return self._stderr.decode("utf-8", errors="replace")

    def captured_output(self) -> tuple[str, str]:
        return (
            self._stdout.decode("utf-8", errors="replace"),
            self._stderr.decode("utf-8", errors="replace"),
        )

    async def wait_for_exit(self, timeout: float | None = None) -> int | None:
        try:
            return await asyncio.wait_for(self._process.wait(), timeout)
        except TimeoutError:
            # the process may be gone while a descendant still holds its pipes
            return self._process.returncode

    def kill(self) -> None:
        pid = self._process.pid
        try:
            children = psutil.Process(pid).children(recursive=True)
        except psutil.Error:
            children = []

        for child in children:
            try:
                child.kill()
            except psutil.Error:
                logger.debug("Descendant %d of %d already gone", child.pid, pid)

        try:
            self._process.kill()
        except ProcessLookupError:
            logger.debug("Process %d already exited before kill", pid)


class AsyncioProcessRunner:
    def __init__(self, hide_window: bool = True) -> None:
        self._creation_flags = (
            getattr(subprocess, "CREATE_NO_WINDOW", 0) if hide_window else 0
        )

    async def start(
        self,
        program: str,
        arguments: Sequence[str],
        capture_output: bool = True,
    ) -> AsyncioProcess | None:
        pipe = subprocess.PIPE if capture_output else subprocess.DEVNULL
        try:
            process = await asyncio.create_subprocess_exec(
                program,
                *arguments,
                stdin=subprocess.DEVNULL,
                stdout=pipe,
                stderr=pipe,
                creationflags=self._creation_flags,
            )
        except OSError as exc:
            logger.warning("Failed to start '%s': %s", program, exc)
            return None
        return AsyncioProcess(process)

    def find_by_name(self, name: str) -> int | None:
        wanted = name.lower()
        for proc in psutil.process_iter(["name"]):
            proc_name = (proc.info.get("name") or "").lower()
            if proc_name in (wanted, f"{wanted}.exe"):
                return proc.pid
        return None
