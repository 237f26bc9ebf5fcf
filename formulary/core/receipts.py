"""Install receipts on disk — one JSON file per installed formula.

Layout::

    {receipts_dir}/
        {name}.json
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from formulary.errors import DescriptorError, FormulaNotFound, InstallIOError
from formulary.models.descriptor import is_valid_name
from formulary.models.receipt import InstallReceipt

logger = logging.getLogger(__name__)


class ReceiptStore:
    """Reads and writes ``InstallReceipt`` records.

    Parameters
    ----------
    receipts_dir:
        Directory holding one ``{name}.json`` per installed formula.
    """

    def __init__(self, receipts_dir: Path) -> None:
        self._dir = Path(receipts_dir)

    def _path(self, name: str) -> Path:
        if not is_valid_name(name):
            raise FormulaNotFound(f"Invalid formula name: {name!r}")
        return self._dir / f"{name}.json"

    def save(self, receipt: InstallReceipt) -> Path:
        """Write the receipt for ``receipt.name``, replacing any previous one."""
        path = self._path(receipt.name)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(json.loads(receipt.model_dump_json()), indent=2, sort_keys=True),
                encoding="utf-8",
            )
        except OSError as exc:
            raise InstallIOError(f"Cannot write install receipt {path}: {exc}") from exc
        logger.debug("Wrote install receipt %s.", path)
        return path

    def get(self, name: str) -> InstallReceipt:
        """Return the receipt for ``name``.

        Raises
        ------
        FormulaNotFound
            If ``name`` is not installed.
        DescriptorError
            If the receipt file is unreadable or corrupt.
        """
        path = self._path(name)
        if not path.exists():
            raise FormulaNotFound(f"'{name}' is not installed")
        try:
            return InstallReceipt.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            raise DescriptorError(f"Corrupt install receipt {path}: {exc}") from exc

    def remove(self, name: str) -> bool:
        path = self._path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise InstallIOError(f"Cannot remove install receipt {path}: {exc}") from exc
        return True

    def list_receipts(self) -> list[InstallReceipt]:
        """All readable receipts, sorted by name. Unreadable files are skipped."""
        if not self._dir.is_dir():
            return []
        receipts: list[InstallReceipt] = []
        for path in sorted(self._dir.glob("*.json")):
            try:
                receipts.append(
                    InstallReceipt.model_validate_json(path.read_text(encoding="utf-8"))
                )
            except (OSError, ValidationError):
                logger.warning("Skipping unreadable receipt %s.", path)
        return receipts
