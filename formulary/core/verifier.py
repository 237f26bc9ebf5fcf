"""Post-install smoke test: run the binary and look for its version."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from formulary.errors import VerificationError

logger = logging.getLogger(__name__)


def verify_installed(
    binary_path: Path,
    version: str,
    flag: str = "--version",
    timeout: float | None = None,
) -> str:
    """Run ``binary_path flag`` and require ``version`` in its stdout.

    Returns the captured stdout.

    Raises
    ------
    VerificationError
        If the process cannot start, times out, exits non-zero, or its
        output does not contain ``version``.
    """
    cmd = [str(binary_path), flag]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise VerificationError(
            f"{Path(binary_path).name} {flag} timed out after {timeout}s"
        ) from exc
    except OSError as exc:
        raise VerificationError(f"Could not run {binary_path}: {exc}") from exc

    if result.returncode != 0:
        raise VerificationError(
            f"{Path(binary_path).name} {flag} exited with code {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    if version not in result.stdout:
        raise VerificationError(
            f"Expected version {version!r} in output of {Path(binary_path).name} {flag}, "
            f"got {result.stdout.strip()!r}"
        )

    logger.info("Verified %s reports version %s.", Path(binary_path).name, version)
    return result.stdout
