"""Package descriptor models: one immutable record per package release."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9._-]*$")
_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def is_valid_name(name: str) -> bool:
    """Whether ``name`` is a usable package name (also safe as a file stem)."""
    return bool(_NAME_RE.match(name))


class Platform(str, Enum):
    """Operating system family an artifact was built for."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"


class Arch(str, Enum):
    """CPU architecture an artifact was built for."""

    X86_64 = "x86_64"
    AARCH64 = "aarch64"


class Artifact(BaseModel):
    """One downloadable archive for a single platform/architecture pair.

    ``sha256`` is the lowercase hex digest of the exact bytes served at
    ``url``. Uppercase input is normalized; anything else is rejected.
    """

    model_config = ConfigDict(frozen=True)

    platform: Platform
    arch: Arch
    url: str
    sha256: str

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ValueError(f"artifact url must be http(s): {value!r}")
        return value

    @field_validator("sha256")
    @classmethod
    def _check_sha256(cls, value: str) -> str:
        value = value.removeprefix("sha256:").strip().lower()
        if not _SHA256_RE.match(value):
            raise ValueError("sha256 must be 64 hex characters")
        return value

    @property
    def key(self) -> tuple[Platform, Arch]:
        return (self.platform, self.arch)

    @property
    def filename(self) -> str:
        """Last path segment of the URL, used as the cached archive name."""
        return self.url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]


class PackageDescriptor(BaseModel):
    """Static metadata for one installable package release.

    Authored once per release and never mutated by the installer.

    Examples
    --------
    >>> d = PackageDescriptor(
    ...     name="grdy",
    ...     description="CLI tool to render JSON data as tables",
    ...     homepage="https://github.com/chrismo/grdy",
    ...     license="BSD-3-Clause",
    ...     version="0.4.0",
    ...     artifacts=[],
    ... )
    >>> d.binary, d.version_flag
    ('grdy', '--version')
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    homepage: str = ""
    license: str = ""
    version: str
    artifacts: list[Artifact] = Field(default_factory=list)
    binary: str = ""  # file inside the archive; defaults to ``name``
    version_flag: str = "--version"

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not is_valid_name(value):
            raise ValueError(f"invalid package name: {value!r}")
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not _SEMVER_RE.match(value):
            raise ValueError(f"version is not a semantic version: {value!r}")
        return value

    @field_validator("binary")
    @classmethod
    def _check_binary(cls, value: str) -> str:
        if value in (".", "..") or any(c in value for c in "/\\*?["):
            raise ValueError(f"binary must be a bare file name: {value!r}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_binary(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("binary") and data.get("name"):
            data = {**data, "binary": data["name"]}
        return data

    @model_validator(mode="after")
    def _check_unique_artifacts(self) -> PackageDescriptor:
        seen: set[tuple[Platform, Arch]] = set()
        for artifact in self.artifacts:
            if artifact.key in seen:
                raise ValueError(
                    f"duplicate artifact for {artifact.platform.value}/{artifact.arch.value}"
                )
            seen.add(artifact.key)
        return self

    @property
    def artifact_map(self) -> dict[tuple[Platform, Arch], Artifact]:
        """Artifacts keyed by ``(platform, arch)``."""
        return {a.key: a for a in self.artifacts}

    @property
    def supported(self) -> list[tuple[Platform, Arch]]:
        return [a.key for a in self.artifacts]
