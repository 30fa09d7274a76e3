from __future__ import annotations

from wsabridge.adb import AdbClient
from wsabridge.models import PackageInfo
from wsabridge.subsystem import ProgressSink


class AdbPackageManager:
    """Package management on a single device, backed by adb."""

    def __init__(self, adb: AdbClient) -> None:
        self._adb = adb

    async def install_package(
        self,
        device_id: str,
        file_path: str,
        progress: ProgressSink | None = None,
        allow_downgrade: bool = False,
    ) -> None:
        if progress:
            progress(f"Installing {file_path}...")
        await self._adb.install_package(
            device_id, file_path, allow_downgrade=allow_downgrade
        )
        if progress:
            progress(f"Installed {file_path}")

    async def get_all_installed_packages(self, device_id: str) -> list[PackageInfo]:
        return await self._adb.get_installed_packages(device_id)

    async def get_installed_package(
        self, device_id: str, package_name: str
    ) -> PackageInfo | None:
        return await self._adb.get_installed_package(device_id, package_name)

    async def is_package_installed(self, device_id: str, package_name: str) -> bool:
        package = await self.get_installed_package(device_id, package_name)
        return package is not None and package.package_name == package_name

    async def uninstall_package(self, device_id: str, package_name: str) -> None:
        await self._adb.uninstall_package(device_id, package_name)

    async def launch(self, device_id: str, package_name: str) -> None:
        await self._adb.launch_package(device_id, package_name)
