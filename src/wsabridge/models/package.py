from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class PackageInfo(BaseModel):
    """Metadata about an installed android package."""

    model_config = {"frozen": True, "extra": "forbid"}

    package_name: str
    version_code: str
    display_version: str
    install_date: date
    display_name: str = ""
    publisher: str = ""
    # png encoded, empty when unknown
    display_icon: bytes = b""
    capabilities: tuple[str, ...] = ()
