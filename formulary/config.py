"""Installer configuration — env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
FORMULARY_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class FormularyConfig(BaseSettings):
    """Installer configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export FORMULARY_BIN_DIR=/opt/tools/bin
        export FORMULARY_LOG_LEVEL=DEBUG
        export FORMULARY_DOWNLOAD_TIMEOUT_SECONDS=120

    Or via .env file::

        FORMULARY_CACHE_DIR=/var/cache/formulary
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FORMULARY_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Storage paths
    bin_dir: Path = Path.home() / ".local" / "bin"
    cache_dir: Path = Path.home() / ".cache" / "formulary"
    create_bin_dir: bool = True

    # Network
    download_timeout_seconds: float = 60.0
    chunk_size: int = 64 * 1024
    user_agent: str = "formulary/0.4.0"

    # Post-install verification
    verify_timeout_seconds: float = 30.0

    @property
    def downloads_dir(self) -> Path:
        return self.cache_dir / "downloads"

    @property
    def receipts_dir(self) -> Path:
        return self.cache_dir / "receipts"


# Module-level singleton — import as `from formulary.config import config`
config = FormularyConfig()
