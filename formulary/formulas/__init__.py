"""Bundled formulas and descriptor loading.

Each bundled formula is a ``{name}.json`` file in this package, validated
into a ``PackageDescriptor`` on first use.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from formulary.errors import DescriptorError, FormulaNotFound
from formulary.models.descriptor import PackageDescriptor

logger = logging.getLogger(__name__)

_FORMULA_DIR = Path(__file__).parent


def load_descriptor(path: Path) -> PackageDescriptor:
    """Read and validate a descriptor JSON file.

    Raises
    ------
    DescriptorError
        If the file cannot be read or does not describe a valid package.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptorError(f"Cannot read descriptor {path}: {exc}") from exc
    try:
        return PackageDescriptor.model_validate_json(raw)
    except ValidationError as exc:
        raise DescriptorError(f"Invalid descriptor {path}:\n{exc}") from exc


@lru_cache(maxsize=None)
def _bundled() -> dict[str, PackageDescriptor]:
    formulas: dict[str, PackageDescriptor] = {}
    for path in sorted(_FORMULA_DIR.glob("*.json")):
        descriptor = load_descriptor(path)
        formulas[descriptor.name] = descriptor
    logger.debug("Loaded %d bundled formula(s).", len(formulas))
    return formulas


def list_formulas() -> list[PackageDescriptor]:
    """All bundled descriptors, sorted by name."""
    return [_bundled()[name] for name in sorted(_bundled())]


def find_formula(name: str) -> PackageDescriptor | None:
    return _bundled().get(name)


def get_formula(name: str) -> PackageDescriptor:
    """Return the bundled descriptor for ``name`` or raise ``FormulaNotFound``."""
    descriptor = find_formula(name)
    if descriptor is None:
        known = ", ".join(sorted(_bundled())) or "none"
        raise FormulaNotFound(f"No formula named '{name}' (available: {known})")
    return descriptor


__all__ = ["find_formula", "get_formula", "list_formulas", "load_descriptor"]
