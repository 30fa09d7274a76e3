from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "WSABRIDGE_CONFIG"


class AdbConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    # bypasses the PATH lookup when set
    path: str | None = None
    command_timeout: float = Field(default=10.0, gt=0)
    restart_server_on_timeout: bool = True


class SubsystemConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    host: str = "localhost"
    port: int = Field(default=58526, ge=1, le=65535)
    model_number: str = "Subsystem_for_Android_TM_"
    mutex_name: str = "{42CEB0DF-325A-4FBE-BBB6-C259A6C3F0BB}"
    service_name: str = "WsaService"
    client_process_name: str = "WsaClient"
    package_family_name: str = (
        "MicrosoftCorporationII.WindowsSubsystemForAndroid_8wekyb3d8bbwe"
    )
    poll_interval: float = Field(default=1.0, ge=0)
    service_start_timeout: float = Field(default=60.0, gt=0)
    port_wait_attempts: int = Field(default=60, ge=1)
    min_os_build: int = Field(default=22000, ge=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    adb: AdbConfig = Field(default_factory=AdbConfig)
    subsystem: SubsystemConfig = Field(default_factory=SubsystemConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def render_settings_toml(settings: Settings) -> str:
    adb = settings.adb
    subsystem = settings.subsystem
    lines = ["# wsabridge configuration", "", "[adb]"]
    if adb.path is not None:
        lines.append(f"path = {_toml_string(adb.path)}")
    lines += [
        f"command_timeout = {adb.command_timeout}",
        f"restart_server_on_timeout = {_toml_bool(adb.restart_server_on_timeout)}",
        "",
        "[subsystem]",
        f"host = {_toml_string(subsystem.host)}",
        f"port = {subsystem.port}",
        f"model_number = {_toml_string(subsystem.model_number)}",
        f"mutex_name = {_toml_string(subsystem.mutex_name)}",
        f"service_name = {_toml_string(subsystem.service_name)}",
        f"client_process_name = {_toml_string(subsystem.client_process_name)}",
        f"package_family_name = {_toml_string(subsystem.package_family_name)}",
        f"poll_interval = {subsystem.poll_interval}",
        f"service_start_timeout = {subsystem.service_start_timeout}",
        f"port_wait_attempts = {subsystem.port_wait_attempts}",
        f"min_os_build = {subsystem.min_os_build}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
