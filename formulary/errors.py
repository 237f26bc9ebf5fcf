"""Error taxonomy for the install workflow.

Every failure is terminal: nothing here is retried or rolled back by the
pipeline. The CLI turns any ``FormularyError`` into exit code 1.
"""

from __future__ import annotations


class FormularyError(RuntimeError):
    """Base class for all install workflow failures."""


class DescriptorError(FormularyError):
    """Raised when a descriptor file cannot be read or fails validation."""


class FormulaNotFound(FormularyError):
    """Raised when no formula or install receipt exists for a name."""


class UnsupportedPlatform(FormularyError):
    """Raised when no artifact matches the requested platform/architecture."""


class NetworkError(FormularyError):
    """Raised on transport failure while downloading an artifact."""


class IntegrityError(FormularyError):
    """Raised when downloaded bytes do not match the declared SHA-256 digest."""

    def __init__(self, message: str, *, expected: str = "", actual: str = "") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class InstallIOError(FormularyError, OSError):
    """Raised on filesystem failure while extracting or installing."""


class VerificationError(FormularyError):
    """Raised when the installed binary fails its version check."""
