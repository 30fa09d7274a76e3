from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class DeviceType(Enum):
    """Connection state reported by ``adb devices``."""

    OFFLINE = "offline"
    DEVICE = "device"
    EMULATOR = "emulator"
    UNAUTHORIZED = "unauthorized"


class KnownDevice(BaseModel):
    """A device known by adb."""

    model_config = {"frozen": True, "extra": "forbid"}

    serial_number: str
    device_type: DeviceType
    product_code: str = ""
    model_number: str = ""
    device_code: str = ""
    transport_id: str = ""

    @property
    def is_offline(self) -> bool:
        return self.device_type is DeviceType.OFFLINE

    @property
    def is_device(self) -> bool:
        return self.device_type is DeviceType.DEVICE

    @property
    def is_emulator(self) -> bool:
        return self.device_type is DeviceType.EMULATOR

    @property
    def is_unauthorized(self) -> bool:
        return self.device_type is DeviceType.UNAUTHORIZED
