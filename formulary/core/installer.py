"""Copy the package binary out of an extracted archive into the bin directory.

The destination is only touched by a final ``os.replace`` from a temp file
in the same directory. Re-running an install yields the same binary at the
same path, and an interrupted install never leaves a half-written file.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path

from formulary.errors import InstallIOError

logger = logging.getLogger(__name__)

def find_binary(staging_dir: Path, binary: str) -> Path:
    """Locate the single regular file named ``binary`` in an extracted tree.

    Only the top level and directories one level down are searched.

    Raises
    ------
    InstallIOError
        If no such file exists or more than one does.
    """
    staging_dir = Path(staging_dir)
    try:
        candidates = [staging_dir / binary] + [
            d / binary for d in staging_dir.iterdir() if d.is_dir() and not d.is_symlink()
        ]
    except OSError as exc:
        raise InstallIOError(f"Cannot read extracted archive {staging_dir}: {exc}") from exc
    matches = sorted(p for p in candidates if p.is_file() and not p.is_symlink())
    if not matches:
        raise InstallIOError(f"Binary '{binary}' not found in archive")
    if len(matches) > 1:
        listed = ", ".join(str(m.relative_to(staging_dir)) for m in matches)
        raise InstallIOError(f"Binary '{binary}' is ambiguous in archive: {listed}")
    return matches[0]


def _executable_mode(mode: int) -> int:
    """Add execute bits wherever the matching read bit is set."""
    mode = stat.S_IMODE(mode) | stat.S_IRUSR | stat.S_IXUSR
    if mode & stat.S_IRGRP:
        mode |= stat.S_IXGRP
    if mode & stat.S_IROTH:
        mode |= stat.S_IXOTH
    return mode


def install_binary(
    staging_dir: Path,
    binary: str,
    bin_dir: Path,
    *,
    create_bin_dir: bool = True,
) -> Path:
    """Install ``binary`` from ``staging_dir`` into ``bin_dir``.

    Returns the installed path. Permission bits are preserved and the file
    is made executable.
    """
    source = find_binary(staging_dir, binary)
    bin_dir = Path(bin_dir)
    dest = bin_dir / binary

    if not bin_dir.is_dir():
        if not create_bin_dir:
            raise InstallIOError(f"Destination directory does not exist: {bin_dir}")
        try:
            bin_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallIOError(f"Cannot create {bin_dir}: {exc}") from exc

    tmp_path: Path | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{binary}.", dir=bin_dir)
        os.close(fd)
        tmp_path = Path(tmp_name)
        shutil.copy2(source, tmp_path)
        tmp_path.chmod(_executable_mode(source.stat().st_mode))
        os.replace(tmp_path, dest)
        tmp_path = None
    except OSError as exc:
        raise InstallIOError(f"Failed to install {binary} into {bin_dir}: {exc}") from exc
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)

    logger.info("Installed %s -> %s.", binary, dest)
    return dest


def uninstall_binary(path: Path) -> bool:
    """Remove an installed binary. Returns False if it was already gone."""
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise InstallIOError(f"Failed to remove {path}: {exc}") from exc
    logger.info("Removed %s.", path)
    return True
