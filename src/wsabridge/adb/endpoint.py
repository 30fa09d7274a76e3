from __future__ import annotations

import re
from dataclasses import dataclass

_FAMILY_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9]*/")


@dataclass(frozen=True)
class Endpoint:
    """A host/port pair, optionally tagged with an address family name.

    The string form mirrors how platform endpoint objects render themselves,
    e.g. ``InterNetwork/localhost:58526``.
    """

    host: str
    port: int
    family: str | None = None

    def __str__(self) -> str:
        address = f"{self.host}:{self.port}"
        if self.family:
            return f"{self.family}/{address}"
        return address


EndpointLike = Endpoint | tuple[str, int] | str


def format_address(endpoint: EndpointLike) -> str:
    """Return the ``host:port`` form adb expects for ``connect``/``disconnect``."""
    if isinstance(endpoint, tuple):
        host, port = endpoint
        return f"{host}:{port}"
    return _FAMILY_PREFIX.sub("", str(endpoint).strip(), count=1)
