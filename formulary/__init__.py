"""Formulary: verified download-and-install of pre-built binaries.

A formula is a static ``PackageDescriptor`` naming one release of a tool:
per-platform archive URLs, their SHA-256 digests, the binary to install,
and how to smoke-test it. ``InstallPipeline`` is the host that selects,
fetches, verifies, extracts, installs and checks it.
"""

__version__ = "0.4.0"
__description__ = "Verified download-and-install of pre-built binaries"

from formulary.core.pipeline import InstallPipeline
from formulary.formulas import get_formula, load_descriptor
from formulary.models.descriptor import Arch, Artifact, PackageDescriptor, Platform

__all__ = [
    "InstallPipeline",
    "PackageDescriptor",
    "Artifact",
    "Platform",
    "Arch",
    "get_formula",
    "load_descriptor",
    "__version__",
]
