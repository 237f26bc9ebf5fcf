"""SHA-256 helpers for artifact integrity checks.

Digests are always lowercase hex. Content addresses use the
``sha256:<hex>`` form so cache keys and receipts read the same way.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Iterable
from pathlib import Path

DEFAULT_CHUNK_SIZE = 64 * 1024


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_chunks(chunks: Iterable[bytes]) -> str:
    """Return the SHA-256 hex digest of an iterable of byte chunks."""
    digest = hashlib.sha256()
    for chunk in chunks:
        digest.update(chunk)
    return digest.hexdigest()


def sha256_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Hash a file on disk without loading it whole."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def content_address(sha256_digest: str) -> str:
    """Return the ``sha256:<hex>`` form of a digest."""
    return f"sha256:{strip_prefix(sha256_digest)}"


def strip_prefix(value: str) -> str:
    """Strip the ``sha256:`` prefix from a content address, if present."""
    return value.removeprefix("sha256:").lower()


def digests_match(expected: str, actual: str) -> bool:
    """Constant-time comparison of two hex digests (prefix-insensitive)."""
    return hmac.compare_digest(strip_prefix(expected), strip_prefix(actual))
