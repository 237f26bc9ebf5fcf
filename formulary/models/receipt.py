"""Install receipt: what was installed, from where, and whether it checked out."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from formulary.models.descriptor import Arch, Platform


class InstallReceipt(BaseModel):
    """Immutable record written after a successful install."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    platform: Platform
    arch: Arch
    url: str
    sha256: str
    binary_path: Path
    version_flag: str = "--version"
    installed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    verified: bool = False
