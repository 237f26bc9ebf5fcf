"""Install pipeline — the host side of a package descriptor.

Runs the steps strictly in order::

    select -> fetch -> verify hash -> extract -> install -> verify version

Every failure is terminal and propagates unchanged. The extraction staging
directory is always removed; the bin directory is only touched by the
installer's final atomic rename, so a failure before that point leaves any
previous install as it was. A failed version check keeps the new binary in
place but records no receipt.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from formulary.config import FormularyConfig
from formulary.config import config as default_config
from formulary.core.extractor import extract_archive
from formulary.core.fetcher import Fetcher
from formulary.core.installer import install_binary, uninstall_binary
from formulary.core.receipts import ReceiptStore
from formulary.core.selector import select_artifact
from formulary.core.verifier import verify_installed
from formulary.models.descriptor import Arch, PackageDescriptor, Platform
from formulary.models.receipt import InstallReceipt

logger = logging.getLogger(__name__)


class InstallPipeline:
    """Installs packages described by ``PackageDescriptor`` records.

    Parameters
    ----------
    settings:
        Installer configuration; defaults to the module-level ``config``.
    fetcher:
        Optional ``Fetcher``; built from ``settings`` when omitted.
    receipts:
        Optional ``ReceiptStore``; defaults to ``settings.receipts_dir``.
    bin_dir:
        Overrides ``settings.bin_dir``.
    """

    def __init__(
        self,
        settings: FormularyConfig | None = None,
        fetcher: Fetcher | None = None,
        receipts: ReceiptStore | None = None,
        bin_dir: Path | None = None,
    ) -> None:
        self._settings = settings or default_config
        self._fetcher = fetcher or Fetcher(settings=self._settings)
        self._receipts = receipts or ReceiptStore(self._settings.receipts_dir)
        self._bin_dir = Path(bin_dir) if bin_dir is not None else self._settings.bin_dir

    @property
    def bin_dir(self) -> Path:
        return self._bin_dir

    @property
    def receipts(self) -> ReceiptStore:
        return self._receipts

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(
        self,
        descriptor: PackageDescriptor,
        platform: Platform | str | None = None,
        arch: Arch | str | None = None,
        *,
        verify: bool = True,
    ) -> InstallReceipt:
        """Install ``descriptor`` for the given (or detected) platform."""
        logger.info("Installing %s %s.", descriptor.name, descriptor.version)

        artifact = select_artifact(descriptor, platform, arch)
        archive = self._fetcher.fetch(artifact)

        with tempfile.TemporaryDirectory(prefix=f"formulary-{descriptor.name}-") as tmp:
            staging = extract_archive(archive, Path(tmp) / "extract")
            installed = install_binary(
                staging,
                descriptor.binary,
                self._bin_dir,
                create_bin_dir=self._settings.create_bin_dir,
            )

        if verify:
            verify_installed(
                installed,
                descriptor.version,
                flag=descriptor.version_flag,
                timeout=self._settings.verify_timeout_seconds,
            )

        receipt = InstallReceipt(
            name=descriptor.name,
            version=descriptor.version,
            platform=artifact.platform,
            arch=artifact.arch,
            url=artifact.url,
            sha256=artifact.sha256,
            binary_path=installed,
            version_flag=descriptor.version_flag,
            verified=verify,
        )
        self._receipts.save(receipt)
        logger.info("Installed %s %s at %s.", descriptor.name, descriptor.version, installed)
        return receipt

    # ------------------------------------------------------------------
    # Verify / uninstall an existing install
    # ------------------------------------------------------------------

    def verify(self, name: str) -> str:
        """Re-run the version check for an installed formula.

        Returns the binary's version output. A receipt recorded without
        verification is marked verified once the check passes.
        """
        receipt = self._receipts.get(name)
        output = verify_installed(
            receipt.binary_path,
            receipt.version,
            flag=receipt.version_flag,
            timeout=self._settings.verify_timeout_seconds,
        )
        if not receipt.verified:
            self._receipts.save(receipt.model_copy(update={"verified": True}))
        return output

    def uninstall(self, name: str) -> InstallReceipt:
        """Remove the installed binary and its receipt."""
        receipt = self._receipts.get(name)
        uninstall_binary(receipt.binary_path)
        self._receipts.remove(name)
        logger.info("Uninstalled %s %s.", receipt.name, receipt.version)
        return receipt
