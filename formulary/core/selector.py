"""Artifact selection — pick the archive built for this machine."""

from __future__ import annotations

import logging

from formulary.core.platform import detect_platform, normalize_arch, normalize_platform
from formulary.errors import UnsupportedPlatform
from formulary.models.descriptor import Arch, Artifact, PackageDescriptor, Platform

logger = logging.getLogger(__name__)


def select_artifact(
    descriptor: PackageDescriptor,
    platform: Platform | str | None = None,
    arch: Arch | str | None = None,
) -> Artifact:
    """Return the artifact matching ``(platform, arch)``.

    Missing values are detected from the running machine. String values
    are normalized like the detected ones, so ``"Darwin"``, ``"darwin"`` and
    ``Platform.DARWIN`` are equivalent, as are ``"arm64"`` and ``"aarch64"``.

    Raises
    ------
    UnsupportedPlatform
        If the pair is unknown or the descriptor has no matching entry.
    """
    if platform is None or arch is None:
        detected_platform, detected_arch = detect_platform()
        platform = platform if platform is not None else detected_platform
        arch = arch if arch is not None else detected_arch

    key = (
        platform if isinstance(platform, Platform) else normalize_platform(platform),
        arch if isinstance(arch, Arch) else normalize_arch(arch),
    )

    artifact = descriptor.artifact_map.get(key)
    if artifact is None:
        supported = ", ".join(f"{p.value}/{a.value}" for p, a in descriptor.supported)
        raise UnsupportedPlatform(
            f"{descriptor.name} {descriptor.version} has no artifact for "
            f"{key[0].value}/{key[1].value} (supported: {supported or 'none'})"
        )

    logger.debug(
        "Selected %s for %s/%s.", artifact.filename, key[0].value, key[1].value
    )
    return artifact
