"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

from formulary.config import FormularyConfig
from formulary.errors import DescriptorError
from formulary.formulas import get_formula, load_descriptor
from formulary.models.descriptor import PackageDescriptor


def resolve_descriptor(name: str | None, descriptor_path: Path | None) -> PackageDescriptor:
    """Pick a descriptor from ``--descriptor`` or the bundled formulas."""
    if descriptor_path is not None:
        descriptor = load_descriptor(descriptor_path)
        if name and name != descriptor.name:
            raise DescriptorError(
                f"Descriptor {descriptor_path} describes '{descriptor.name}', not '{name}'"
            )
        return descriptor
    if not name:
        raise DescriptorError("Give a formula name or --descriptor PATH")
    return get_formula(name)


def load_settings() -> FormularyConfig:
    """Fresh settings per invocation so environment overrides always apply."""
    return FormularyConfig()
