"""Formulary data models — all Pydantic v2, all frozen (immutable)."""

from formulary.models.descriptor import Arch, Artifact, PackageDescriptor, Platform
from formulary.models.receipt import InstallReceipt

__all__ = [
    # descriptor
    "Platform",
    "Arch",
    "Artifact",
    "PackageDescriptor",
    # receipt
    "InstallReceipt",
]
