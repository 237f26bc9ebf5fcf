"""Content-addressed cache of verified downloads.

Storage layout: {base_path}/{sha256[0:2]}/{sha256}/{filename}
Only bytes whose digest has already been checked are admitted.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from formulary.core.hasher import digests_match, sha256_file, strip_prefix
from formulary.errors import InstallIOError

logger = logging.getLogger(__name__)


class DownloadCache:
    """SHA-256 keyed cache of downloaded archives.

    Admitting the same content twice is a no-op. Entries are re-hashed on
    lookup; a corrupted entry is evicted and reported as a miss.

    Parameters
    ----------
    base_path:
        Root directory for cached archives.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base

    def _entry_dir(self, sha256_digest: str) -> Path:
        digest = strip_prefix(sha256_digest)
        return self._base / digest[:2] / digest

    def path_for(self, sha256_digest: str, filename: str) -> Path:
        return self._entry_dir(sha256_digest) / filename

    def staging_dir(self) -> Path:
        """Directory for in-flight downloads (same filesystem as the cache)."""
        path = self._base / ".partial"
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallIOError(f"Cannot create download cache at {path}: {exc}") from exc
        return path

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, sha256_digest: str, filename: str) -> Path | None:
        """Return the cached path if present and intact, else None."""
        path = self.path_for(sha256_digest, filename)
        if not path.is_file():
            return None
        try:
            actual = sha256_file(path)
        except OSError as exc:
            raise InstallIOError(f"Cannot read cache entry {path}: {exc}") from exc
        if not digests_match(sha256_digest, actual):
            logger.warning("Evicting corrupted cache entry '%s'.", path)
            self.evict(sha256_digest)
            return None
        return path

    def exists(self, sha256_digest: str, filename: str) -> bool:
        return self.path_for(sha256_digest, filename).is_file()

    # ------------------------------------------------------------------
    # Admit / evict
    # ------------------------------------------------------------------

    def admit(self, verified_file: Path, sha256_digest: str, filename: str) -> Path:
        """Move an already-verified file into the cache and return its path."""
        dest = self.path_for(sha256_digest, filename)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            os.replace(verified_file, dest)
        except OSError as exc:
            raise InstallIOError(f"Cannot store {filename} in download cache: {exc}") from exc
        return dest

    def evict(self, sha256_digest: str) -> None:
        shutil.rmtree(self._entry_dir(sha256_digest), ignore_errors=True)
