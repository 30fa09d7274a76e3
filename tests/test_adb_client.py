from __future__ import annotations

import asyncio
from datetime import date

import pytest

from fakes import (
    ADB_PATH,
    FakeEnvironment,
    FakeFileSystem,
    FakeProcess,
    FakeRunner,
    exits,
    make_adb_client,
    times_out,
)
from wsabridge.adb import AdbClient, Endpoint, format_address, format_command
from wsabridge.config import AdbConfig
from wsabridge.errors import AdbError, AdbException

DEVICES_OUTPUT = (
    "List of devices attached\n"
    "127.0.0.1:58526 device product:windows_x86_64 model:Subsystem_for_Android_TM_ "
    "device:windows_x86_64 transport_id:2\n"
)
DUMP = "versionCode=7 minSdk=24\n    versionName=2.0\n    firstInstallTime=2023-06-30 12:00:00\n"


def _discovering_client(path: str, filesystem: FakeFileSystem, **env) -> AdbClient:
    return AdbClient(
        FakeRunner([exits()]),
        FakeEnvironment(path=path, **env),
        filesystem,
        AdbConfig(),
    )


def test_find_adb_picks_first_directory_with_all_platform_tools():
    filesystem = FakeFileSystem(
        directories=["C:\\", "D:\\"],
        files=["C:\\adb.exe", "D:\\adb.exe", "D:\\AdbWinApi.dll", "D:\\fastboot.exe"],
    )
    client = _discovering_client("C:\\;D:\\", filesystem)

    assert client.path_to_adb is None
    assert client.is_installed
    assert client.path_to_adb == "D:\\adb.exe"


def test_find_adb_skips_empty_and_missing_entries():
    filesystem = FakeFileSystem(directories=["E:\\tools"], all_files_exist=True)
    client = _discovering_client(";  ;Z:\\nowhere; E:\\tools ;", filesystem)

    assert client.is_installed
    assert client.path_to_adb == "E:\\tools\\adb.exe"
    assert filesystem.directory_checks == ["Z:\\nowhere", "E:\\tools"]


def test_find_adb_not_found_is_cached():
    filesystem = FakeFileSystem(directories=["C:\\"])
    client = _discovering_client("C:\\", filesystem)

    assert not client.is_installed
    assert client.path_to_adb == ""
    assert not client.is_installed
    assert filesystem.directory_checks == ["C:\\"]


def test_find_adb_uses_posix_tool_names_off_windows():
    filesystem = FakeFileSystem(directories=["/opt/pt"], all_files_exist=True)
    client = _discovering_client("/usr/bin:/opt/pt", filesystem, separator=":", windows=False)

    assert client.platform_tools == ("adb", "fastboot")
    assert client.is_installed


def test_configured_path_skips_discovery():
    filesystem = FakeFileSystem()
    client = AdbClient(
        FakeRunner(), FakeEnvironment(path="C:\\"), filesystem, AdbConfig(path="X:\\adb.exe")
    )

    assert client.is_installed
    assert client.path_to_adb == "X:\\adb.exe"
    assert filesystem.directory_checks == []


def test_path_setter_overrides_cached_value():
    client = _discovering_client("", FakeFileSystem())

    assert not client.is_installed
    client.path_to_adb = "Y:\\adb.exe"
    assert client.is_installed


def test_execute_command_without_adb():
    runner = FakeRunner()
    client = make_adb_client(runner, path="")

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["devices"]))

    assert exc_info.value.error is AdbError.ADB_IS_NOT_INSTALLED
    assert runner.calls == []


def test_execute_command_cannot_start():
    client = make_adb_client(FakeRunner([None]))

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["devices"]))

    assert exc_info.value.error is AdbError.CANNOT_START_ADB
    assert exc_info.value.command == "adb devices"


def test_execute_command_returns_stdout_and_drops_empty_arguments():
    runner = FakeRunner([exits("hello\n")])
    client = make_adb_client(runner)

    output = asyncio.run(client.execute_command(["shell", "", "echo", "hello"]))

    assert output == "hello\n"
    assert runner.calls == [(ADB_PATH, ["shell", "echo", "hello"], True)]


def test_execute_command_nonzero_exit_is_checked_before_output():
    client = make_adb_client(FakeRunner([exits("Success", "boom", exit_code=1)]))

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["x"], output_must_include="Success"))

    exc = exc_info.value
    assert exc.error is AdbError.COMMAND_FAILED
    assert exc.command == "adb x"
    assert "Success" in exc.output
    assert "boom" in exc.output


def test_execute_command_output_checks_are_case_insensitive():
    client = make_adb_client(FakeRunner([exits("SUCCESS"), exits("Cannot Connect To h:1")]))

    assert asyncio.run(client.execute_command(["a"], output_must_include="success"))
    with pytest.raises(AdbException) as exc_info:
        asyncio.run(
            client.execute_command(["b"], output_must_not_include="cannot connect to h:1")
        )

    assert exc_info.value.error is AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT


def test_execute_command_missing_required_output():
    client = make_adb_client(FakeRunner([exits("Failure [INSTALL_FAILED]")]))

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["install"], output_must_include="Success"))

    assert exc_info.value.error is AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT
    assert "INSTALL_FAILED" in str(exc_info.value)


def test_timeout_restarts_server_and_retries_once():
    hung = times_out()
    runner = FakeRunner([hung, exits(), exits(), exits("ok")])
    client = make_adb_client(runner)

    output = asyncio.run(client.execute_command(["devices"]))

    assert output == "ok"
    assert hung.killed
    assert runner.commands == [["devices"], ["kill-server"], ["start-server"], ["devices"]]


def test_timeout_on_retry_raises():
    runner = FakeRunner([times_out(), exits(), exits(), times_out("partial")])
    client = make_adb_client(runner)

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["devices"]))

    assert exc_info.value.error is AdbError.COMMAND_TIMED_OUT
    assert exc_info.value.output == "partial"
    assert len(runner.calls) == 4


def test_timeout_without_restart_raises_immediately():
    hung = times_out()
    runner = FakeRunner([hung])
    client = make_adb_client(runner, restart_server_on_timeout=False)

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["devices"]))

    assert exc_info.value.error is AdbError.COMMAND_TIMED_OUT
    assert hung.killed
    assert hung.wait_timeouts == [10.0]
    assert len(runner.calls) == 1


def test_timeout_keeps_partial_output_when_pipes_stay_open():
    hung = FakeProcess("partial", exit_code=None, pipes_held=True)
    client = make_adb_client(FakeRunner([hung]), restart_server_on_timeout=False)

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.execute_command(["devices"]))

    assert exc_info.value.error is AdbError.COMMAND_TIMED_OUT
    assert exc_info.value.output == "partial"
    assert hung.killed


def test_exited_command_does_not_wait_for_held_pipes():
    runner = FakeRunner([FakeProcess("* daemon started successfully\n", pipes_held=True)])
    client = make_adb_client(runner)

    output = asyncio.run(asyncio.wait_for(client.execute_command(["start-server"]), 5))

    assert output == "* daemon started successfully\n"


def test_restart_server_flag_can_be_toggled():
    runner = FakeRunner([times_out()])
    client = make_adb_client(runner)
    client.restart_server_on_command_timeout = False

    with pytest.raises(AdbException):
        asyncio.run(client.execute_command(["devices"]))

    assert len(runner.calls) == 1


def test_format_command():
    assert format_command(["-s", "sn", "install", "a.apk", ""]) == "adb -s sn install a.apk"


@pytest.mark.parametrize(
    ("endpoint", "expected"),
    [
        (Endpoint("host", 1, "InterNetwork"), "host:1"),
        (Endpoint("localhost", 58526), "localhost:58526"),
        (("127.0.0.1", 5555), "127.0.0.1:5555"),
        ("InterNetworkV6/[::1]:5555", "[::1]:5555"),
        ("10.0.0.2:5555", "10.0.0.2:5555"),
    ],
)
def test_format_address(endpoint, expected):
    assert format_address(endpoint) == expected


def test_endpoint_str_includes_family():
    assert str(Endpoint("host", 1, "InterNetwork")) == "InterNetwork/host:1"


def test_connect_strips_family_prefix():
    runner = FakeRunner([exits("connected to host:1")])
    client = make_adb_client(runner)

    asyncio.run(client.connect(Endpoint("host", 1, "InterNetwork")))

    assert runner.commands == [["connect", "host:1"]]


def test_connect_refused():
    client = make_adb_client(
        FakeRunner([exits("cannot connect to host:1: No connection could be made")])
    )

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.connect(("host", 1)))

    assert exc_info.value.error is AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT


def test_disconnect_requires_confirmation():
    runner = FakeRunner([exits("disconnected host:1"), exits("error: no such device 'host:1'")])
    client = make_adb_client(runner)

    asyncio.run(client.disconnect("host:1"))
    with pytest.raises(AdbException):
        asyncio.run(client.disconnect("host:1"))

    assert runner.commands[0] == ["disconnect", "host:1"]


def test_install_package_with_and_without_downgrade():
    runner = FakeRunner([exits("Performing Streamed Install\nSuccess"), exits("Success")])
    client = make_adb_client(runner)

    asyncio.run(client.install_package("sn", "C:\\app.apk"))
    asyncio.run(client.install_package("sn", "C:\\app.apk", allow_downgrade=True))

    assert runner.commands == [
        ["-s", "sn", "install", "C:\\app.apk"],
        ["-s", "sn", "install", "C:\\app.apk", "-d"],
    ]


def test_uninstall_package():
    runner = FakeRunner([exits("Success")])
    client = make_adb_client(runner)

    asyncio.run(client.uninstall_package("sn", "com.x"))

    assert runner.commands == [["-s", "sn", "uninstall", "com.x"]]


def test_list_devices():
    runner = FakeRunner([exits(DEVICES_OUTPUT)])
    client = make_adb_client(runner)

    devices = asyncio.run(client.list_devices())

    assert runner.commands == [["devices", "-l"]]
    assert len(devices) == 1
    assert devices[0].serial_number == "127.0.0.1:58526"
    assert devices[0].model_number == "Subsystem_for_Android_TM_"


def test_list_devices_requires_header():
    client = make_adb_client(FakeRunner([exits("adb: usage")]))

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.list_devices())

    assert exc_info.value.error is AdbError.COMMAND_FINISHED_WITH_INVALID_OUTPUT


def test_get_installed_packages_dumps_each_package_in_order():
    def respond(arguments: list[str]):
        if "list" in arguments:
            return exits("package:com.a\npackage:com.b\n")
        name = arguments[-1]
        code = "1" if name == "com.a" else "2"
        return exits(f"versionCode={code} versionName=v{code} firstInstallTime=2022-01-0{code}\n")

    runner = FakeRunner(respond)
    client = make_adb_client(runner)

    packages = asyncio.run(client.get_installed_packages("sn"))

    assert [p.package_name for p in packages] == ["com.a", "com.b"]
    assert [p.version_code for p in packages] == ["1", "2"]
    assert packages[1].install_date == date(2022, 1, 2)
    assert runner.commands == [
        ["-s", "sn", "shell", "pm", "list", "packages", "-3"],
        ["-s", "sn", "shell", "dumpsys", "package", "com.a"],
        ["-s", "sn", "shell", "dumpsys", "package", "com.b"],
    ]


def test_get_installed_package():
    client = make_adb_client(FakeRunner([exits(DUMP)]))

    package = asyncio.run(client.get_installed_package("sn", "com.x"))

    assert package is not None
    assert package.version_code == "7"
    assert package.display_version == "2.0"
    assert package.install_date == date(2023, 6, 30)


def test_get_installed_package_returns_none_when_missing():
    client = make_adb_client(FakeRunner([exits("Unable to find package: com.x\n")]))

    assert asyncio.run(client.get_installed_package("sn", "com.x")) is None


def test_get_installed_package_propagates_other_failures():
    client = make_adb_client(FakeRunner([exits("", "error: device offline", exit_code=1)]))

    with pytest.raises(AdbException) as exc_info:
        asyncio.run(client.get_installed_package("sn", "com.x"))

    assert exc_info.value.error is AdbError.COMMAND_FAILED


def test_launch_package():
    runner = FakeRunner([exits("Events injected: 1\n"), exits("Events injected: 0\n")])
    client = make_adb_client(runner)

    asyncio.run(client.launch_package("sn", "com.x"))
    with pytest.raises(AdbException):
        asyncio.run(client.launch_package("sn", "com.x"))

    assert runner.commands[0] == ["-s", "sn", "shell", "monkey", "-p", "com.x", "1"]


def test_execute_shell_command_trims_output():
    runner = FakeRunner([exits("  30\r\n"), exits("x\n")])
    client = make_adb_client(runner)

    assert asyncio.run(client.execute_shell_command("getprop", ["ro.build.version.sdk"])) == "30"
    assert asyncio.run(client.execute_shell_command("id", device_serial_number="sn")) == "x"
    assert runner.commands == [
        ["shell", "getprop", "ro.build.version.sdk"],
        ["-s", "sn", "shell", "id"],
    ]
