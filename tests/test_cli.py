"""Tests for the wsabridge command line."""

from __future__ import annotations

from typer.testing import CliRunner

import wsabridge.cli.commands.devices as devices_cmd
import wsabridge.cli.commands.packages as packages_cmd
from fakes import FakeRunner, exits, make_adb_client
from wsabridge import __version__
from wsabridge.cli import app
from wsabridge.config import default_config_path

runner = CliRunner()

DEVICES_OUTPUT = (
    "List of devices attached\n"
    "127.0.0.1:58526 device product:windows_x86_64 model:Subsystem_for_Android_TM_ "
    "device:windows_x86_64 transport_id:2\n"
)


def _use_adb(monkeypatch, module, responses):
    fake_runner = FakeRunner(responses)
    monkeypatch.setattr(
        module, "build_adb_client", lambda _settings: make_adb_client(fake_runner)
    )
    return fake_runner


def test_version():
    """Test version command."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"wsabridge version {__version__}" in result.stdout


def test_version_short():
    """Test version command with short flag."""
    result = runner.invoke(app, ["-v"])
    assert result.exit_code == 0
    assert f"wsabridge version {__version__}" in result.stdout


def test_devices(monkeypatch):
    _use_adb(monkeypatch, devices_cmd, [exits(DEVICES_OUTPUT)])

    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 0
    assert "127.0.0.1:58526" in result.stdout


def test_devices_empty(monkeypatch):
    _use_adb(monkeypatch, devices_cmd, [exits("List of devices attached\n\n")])

    result = runner.invoke(app, ["devices"])

    assert result.exit_code == 0
    assert "No devices attached." in result.stdout


def test_connect_defaults_to_subsystem_endpoint(monkeypatch):
    fake_runner = _use_adb(monkeypatch, devices_cmd, [exits("connected to localhost:58526")])

    result = runner.invoke(app, ["connect"])

    assert result.exit_code == 0
    assert "Connected to localhost:58526" in result.stdout
    assert fake_runner.commands == [["connect", "localhost:58526"]]


def test_adb_failure_exits_with_error(monkeypatch):
    _use_adb(monkeypatch, devices_cmd, [exits("", "error: unknown host", exit_code=1)])

    result = runner.invoke(app, ["connect", "nowhere:1"])

    assert result.exit_code == 1
    assert "exit code wasn't zero" in result.output


def test_shell_with_serial(monkeypatch):
    fake_runner = _use_adb(monkeypatch, devices_cmd, [exits("33\n")])

    result = runner.invoke(
        app, ["shell", "getprop", "ro.build.version.sdk", "--serial", "sn"]
    )

    assert result.exit_code == 0
    assert "33" in result.stdout
    assert fake_runner.commands == [
        ["-s", "sn", "shell", "getprop", "ro.build.version.sdk"]
    ]


def test_packages_show_missing(monkeypatch):
    _use_adb(monkeypatch, packages_cmd, [exits("Unable to find package: com.x")])

    result = runner.invoke(app, ["packages", "show", "com.x", "-s", "sn"])

    assert result.exit_code == 1
    assert "Package 'com.x' is not installed" in result.stdout


def test_packages_list(monkeypatch):
    _use_adb(
        monkeypatch,
        packages_cmd,
        [
            exits("package:com.x\n"),
            exits("versionCode=5 versionName=5.1 firstInstallTime=2024-01-31 10:00:00\n"),
        ],
    )

    result = runner.invoke(app, ["packages", "list", "-s", "sn"])

    assert result.exit_code == 0
    assert "com.x" in result.stdout
    assert "2024-01-31" in result.stdout


def test_packages_install_allows_downgrade(monkeypatch):
    fake_runner = _use_adb(
        monkeypatch, packages_cmd, [exits("Performing Streamed Install\nSuccess\n")]
    )

    result = runner.invoke(app, ["packages", "install", "app.apk", "-d", "-s", "sn"])

    assert result.exit_code == 0
    assert fake_runner.commands == [["-s", "sn", "install", "app.apk", "-d"]]
    assert "Installing app.apk..." in result.stdout
    assert "Installed app.apk" in result.stdout


def test_config_init_and_show():
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert default_config_path().exists()

    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "[subsystem]" in result.stdout
    assert "port = 58526" in result.stdout
