from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "wsabridge"
CONFIG_FILENAME = "config.toml"


def config_home() -> Path:
    """Base directory for per-user configuration.

    ``XDG_CONFIG_HOME`` wins everywhere. On Windows, where WSA lives, the
    roaming ``APPDATA`` folder is used next, then ``~/.config``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
    return Path.home() / ".config"


def default_config_path() -> Path:
    return config_home() / APP_NAME / CONFIG_FILENAME


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
