from __future__ import annotations

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 1.0


class PortProbe(Protocol):
    async def is_open(self, host: str, port: int) -> bool: ...


class TcpPortProbe:
    def __init__(self, timeout: float = CONNECT_TIMEOUT) -> None:
        self._timeout = timeout

    async def is_open(self, host: str, port: int) -> bool:
        try:
            _, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self._timeout
            )
        except (OSError, TimeoutError) as exc:
            logger.debug("Port %s:%d is not reachable: %s", host, port, exc)
            return False

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            logger.debug("Error while closing probe connection", exc_info=True)
        return True
