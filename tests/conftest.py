"""Shared test fixtures for Formulary."""

from __future__ import annotations

import gzip
import io
import stat
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import requests

from formulary.config import FormularyConfig
from formulary.core.download_cache import DownloadCache
from formulary.core.fetcher import Fetcher
from formulary.core.hasher import sha256_hex
from formulary.core.receipts import ReceiptStore
from formulary.models.descriptor import PackageDescriptor

VERSION = "0.4.0"


def version_script(output: str = f"grdy {VERSION}", exit_code: int = 0) -> bytes:
    """A tiny shell script standing in for the real binary."""
    return f"#!/bin/sh\necho '{output}'\nexit {exit_code}\n".encode()


def make_tarball(members: dict[str, bytes], mode: int = 0o755) -> bytes:
    """Build a .tar.gz in memory from ``{name: content}``."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------


class FakeRawBody:
    """Stands in for ``urllib3.HTTPResponse``: wire bytes, optionally decoded."""

    def __init__(
        self,
        wire: bytes,
        content_encoding: str | None,
        chunk: int,
        error: Exception | None = None,
    ) -> None:
        self._wire = wire
        self._content_encoding = content_encoding
        self._chunk = chunk
        self._error = error

    def stream(self, amt: int = 2**16, decode_content: bool | None = None):
        data = self._wire
        if decode_content and self._content_encoding == "gzip":
            data = gzip.decompress(data)
        step = min(amt, self._chunk)
        for i in range(0, len(data), step):
            yield data[i : i + step]
            if self._error is not None:
                raise self._error


class FakeResponse:
    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        chunk: int = 7,
        content_encoding: str | None = None,
        stream_error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers: dict[str, str] = {}
        if content_encoding:
            self.headers["Content-Encoding"] = content_encoding
        self.raw = FakeRawBody(body, content_encoding, chunk, stream_error)

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: Any) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size: int = 1):
        # requests decodes Content-Encoding here
        return self.raw.stream(chunk_size, decode_content=True)


class FakeSession:
    """Maps URLs to bodies, statuses, or exceptions; records every request."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.calls: list[str] = []
        self.request_headers: list[dict[str, str]] = []

    def serve(
        self,
        url: str,
        body: bytes,
        status_code: int = 200,
        content_encoding: str | None = None,
    ) -> None:
        self.routes[url] = FakeResponse(body, status_code, content_encoding=content_encoding)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def fail_midstream(self, url: str, body: bytes, exc: Exception) -> None:
        self.routes[url] = FakeResponse(body, stream_error=exc)

    def get(
        self,
        url: str,
        stream: bool = False,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.calls.append(url)
        self.request_headers.append({**self.headers, **(headers or {})})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(b"", 404)
        if isinstance(route, Exception):
            raise route
        return route


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> FormularyConfig:
    """Settings rooted in a temp directory."""
    return FormularyConfig(
        bin_dir=tmp_path / "bin",
        cache_dir=tmp_path / "cache",
        verify_timeout_seconds=10,
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def download_cache(settings: FormularyConfig) -> DownloadCache:
    return DownloadCache(settings.downloads_dir)


@pytest.fixture
def fetcher(
    settings: FormularyConfig, session: FakeSession, download_cache: DownloadCache
) -> Fetcher:
    return Fetcher(cache=download_cache, session=session, settings=settings)


@pytest.fixture
def receipts(settings: FormularyConfig) -> ReceiptStore:
    return ReceiptStore(settings.receipts_dir)


@pytest.fixture
def grdy_tarball() -> bytes:
    """A release archive holding a working ``grdy`` stand-in."""
    return make_tarball({"grdy": version_script()})


@pytest.fixture
def make_descriptor() -> Callable[..., PackageDescriptor]:
    """Factory fixture: a descriptor whose linux/x86_64 artifact is ``body``."""

    def _factory(body: bytes, **overrides: Any) -> PackageDescriptor:
        defaults: dict[str, Any] = {
            "name": "grdy",
            "description": "CLI tool to render JSON data as tables",
            "homepage": "https://github.com/chrismo/grdy",
            "license": "BSD-3-Clause",
            "version": VERSION,
            "artifacts": [
                {
                    "platform": "linux",
                    "arch": "x86_64",
                    "url": "https://example.test/grdy-v0.4.0-x86_64-linux.tar.gz",
                    "sha256": sha256_hex(body),
                },
                {
                    "platform": "darwin",
                    "arch": "aarch64",
                    "url": "https://example.test/grdy-v0.4.0-aarch64-apple-darwin.tar.gz",
                    "sha256": "c0a02bcba12d7d07c2d5b9f84fef11aafc30a124c589f04a0e682d66f8437760",
                },
            ],
        }
        defaults.update(overrides)
        return PackageDescriptor(**defaults)

    return _factory


@pytest.fixture
def executable(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write an executable script and return its path."""

    def _factory(name: str = "grdy", content: bytes | None = None) -> Path:
        path = tmp_path / "scripts" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content if content is not None else version_script())
        path.chmod(path.stat().st_mode | stat.S_IXUSR)
        return path

    return _factory


@pytest.fixture
def tarball_factory() -> Callable[..., bytes]:
    """Factory fixture exposing ``make_tarball`` to test modules."""
    return make_tarball


@pytest.fixture
def script_factory() -> Callable[..., bytes]:
    """Factory fixture exposing ``version_script`` to test modules."""
    return version_script
