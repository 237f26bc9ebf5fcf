"""Archive extraction into a staging directory.

Members that would land outside the destination (absolute paths, ``..``
components, links pointing elsewhere) are refused before anything is
written.
"""

from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path

from formulary.errors import InstallIOError

logger = logging.getLogger(__name__)

_TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2", ".tar")


def _is_within(root: Path, candidate: Path) -> bool:
    try:
        candidate.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def _check_tar_members(archive: tarfile.TarFile, dest: Path) -> None:
    for member in archive.getmembers():
        target = dest / member.name
        if Path(member.name).is_absolute() or not _is_within(dest, target):
            raise InstallIOError(f"Archive member escapes destination: {member.name}")
        if member.issym() or member.islnk():
            link_target = (
                target.parent / member.linkname if member.issym() else dest / member.linkname
            )
            if Path(member.linkname).is_absolute() or not _is_within(dest, link_target):
                raise InstallIOError(
                    f"Archive link escapes destination: {member.name} -> {member.linkname}"
                )
        elif not (member.isfile() or member.isdir()):
            raise InstallIOError(f"Unsupported archive member type: {member.name}")


def _check_zip_members(archive: zipfile.ZipFile, dest: Path) -> None:
    for name in archive.namelist():
        if Path(name).is_absolute() or not _is_within(dest, dest / name):
            raise InstallIOError(f"Archive member escapes destination: {name}")


def extract_archive(archive: Path, dest: Path) -> Path:
    """Extract ``archive`` into ``dest`` and return ``dest``.

    Supports tarballs (plain, gzip, xz, bzip2) and zip files.
    Zip extraction restores the Unix permission bits stored in the archive.
    """
    archive = Path(archive)
    dest = Path(dest)
    name = archive.name.lower()
    try:
        dest.mkdir(parents=True, exist_ok=True)
        if name.endswith(_TAR_SUFFIXES):
            with tarfile.open(archive, "r:*") as tar:
                _check_tar_members(tar, dest)
                tar.extractall(dest, filter="data")
        elif name.endswith(".zip"):
            with zipfile.ZipFile(archive) as zf:
                _check_zip_members(zf, dest)
                for info in zf.infolist():
                    extracted = Path(zf.extract(info, dest))
                    mode = (info.external_attr >> 16) & 0o7777
                    if mode and not info.is_dir():
                        extracted.chmod(mode)
        else:
            raise InstallIOError(f"Unsupported archive format: {archive.name}")
    except (tarfile.TarError, zipfile.BadZipFile) as exc:
        raise InstallIOError(f"Corrupt archive {archive.name}: {exc}") from exc
    except InstallIOError:
        raise
    except OSError as exc:
        raise InstallIOError(f"Failed to extract {archive.name}: {exc}") from exc

    logger.debug("Extracted %s into %s.", archive.name, dest)
    return dest
