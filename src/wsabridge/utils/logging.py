from __future__ import annotations

import logging
import os
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

# floor levels for loggers that flood DEBUG output
NOISY_LOGGERS = {
    "asyncio": logging.WARNING,
    # one line per refused connection while waiting for the subsystem port
    "wsabridge.system.network": logging.INFO,
}


def setup_logging(level: LogLevel | str | None = None) -> None:
    resolved = (level or os.environ.get("LOGLEVEL", "INFO")).upper()

    coloredlogs.install(
        level=resolved,
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    )

    threshold = coloredlogs.level_to_number(resolved)
    for name, floor in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(max(floor, threshold))
