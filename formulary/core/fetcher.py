"""Fetch-and-verify: download an artifact and check it against its digest.

Bytes are streamed into a temporary file next to the download cache and
hashed as they arrive. The file only enters the cache after the digest
matches, so nothing downstream ever sees unverified bytes.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
from pathlib import Path
from typing import BinaryIO

import requests
import urllib3

from formulary.config import FormularyConfig
from formulary.config import config as default_config
from formulary.core.download_cache import DownloadCache
from formulary.core.hasher import digests_match, sha256_file, sha256_hex
from formulary.errors import InstallIOError, IntegrityError, NetworkError
from formulary.models.descriptor import Artifact

logger = logging.getLogger(__name__)


def verify_bytes(data: bytes, expected: str) -> str:
    """Check in-memory bytes against an expected SHA-256 digest.

    Returns the actual digest. Raises ``IntegrityError`` on mismatch.
    """
    actual = sha256_hex(data)
    if not digests_match(expected, actual):
        raise IntegrityError(
            f"SHA-256 mismatch: expected {expected}, got {actual}",
            expected=expected,
            actual=actual,
        )
    return actual


def verify_file(path: Path, expected: str) -> str:
    """Check a file on disk against an expected SHA-256 digest."""
    try:
        actual = sha256_file(path)
    except OSError as exc:
        raise InstallIOError(f"Cannot read {path}: {exc}") from exc
    if not digests_match(expected, actual):
        raise IntegrityError(
            f"SHA-256 mismatch for {Path(path).name}: expected {expected}, got {actual}",
            expected=expected,
            actual=actual,
        )
    return actual


class Fetcher:
    """Downloads artifacts over HTTP(S) and admits verified bytes to the cache.

    Parameters
    ----------
    cache:
        Download cache; defaults to ``config.downloads_dir``.
    session:
        ``requests.Session`` (or compatible) used for transport.
    settings:
        Timeouts, chunk size and user agent.
    """

    def __init__(
        self,
        cache: DownloadCache | None = None,
        session: requests.Session | None = None,
        settings: FormularyConfig | None = None,
    ) -> None:
        self._settings = settings or default_config
        self._cache = cache or DownloadCache(self._settings.downloads_dir)
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._settings.user_agent})

    @property
    def cache(self) -> DownloadCache:
        return self._cache

    def fetch(self, artifact: Artifact) -> Path:
        """Return a local path to the verified archive for ``artifact``.

        Raises
        ------
        NetworkError
            On connection failure, timeout, or an HTTP error status.
        IntegrityError
            When the downloaded bytes do not match ``artifact.sha256``.
        InstallIOError
            When the download cannot be written to or read from the cache.
        """
        cached = self._cache.get(artifact.sha256, artifact.filename)
        if cached is not None:
            logger.info("Using cached %s.", artifact.filename)
            return cached

        logger.info("Downloading %s.", artifact.url)
        staging = self._cache.staging_dir()
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f"{artifact.filename}.", suffix=".part", dir=staging
            )
        except OSError as exc:
            raise InstallIOError(f"Cannot create download file in {staging}: {exc}") from exc
        tmp_path = Path(tmp_name)
        try:
            try:
                with open(fd, "wb") as out:
                    actual = self._stream(artifact.url, out)
            except OSError as exc:
                raise InstallIOError(
                    f"Failed to write download of {artifact.filename}: {exc}"
                ) from exc
            if not digests_match(artifact.sha256, actual):
                raise IntegrityError(
                    f"SHA-256 mismatch for {artifact.url}: "
                    f"expected {artifact.sha256}, got {actual}",
                    expected=artifact.sha256,
                    actual=actual,
                )
            path = self._cache.admit(tmp_path, artifact.sha256, artifact.filename)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("Verified %s (sha256:%s...).", artifact.filename, actual[:12])
        return path

    def _stream(self, url: str, out: BinaryIO) -> str:
        """Write the response body for ``url`` to ``out``; return its digest.

        The body is read exactly as sent: no content-encoding is negotiated
        or decoded, so the digest covers the bytes served at ``url``.
        """
        digest = hashlib.sha256()
        try:
            with self._session.get(
                url,
                stream=True,
                timeout=self._settings.download_timeout_seconds,
                headers={"Accept-Encoding": "identity"},
            ) as response:
                response.raise_for_status()
                for chunk in response.raw.stream(
                    self._settings.chunk_size, decode_content=False
                ):
                    if chunk:
                        digest.update(chunk)
                        out.write(chunk)
        except requests.RequestException as exc:
            raise NetworkError(f"Download failed for {url}: {exc}") from exc
        except urllib3.exceptions.HTTPError as exc:
            raise NetworkError(f"Download failed for {url}: {exc}") from exc
        return digest.hexdigest()
