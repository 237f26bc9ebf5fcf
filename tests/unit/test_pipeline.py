"""Tests for InstallPipeline — the full select-to-verify sequence."""

from __future__ import annotations

import json

import pytest

from formulary.core.fetcher import Fetcher
from formulary.core.pipeline import InstallPipeline
from formulary.errors import (
    DescriptorError,
    FormulaNotFound,
    IntegrityError,
    InstallIOError,
    NetworkError,
    UnsupportedPlatform,
    VerificationError,
)
from formulary.models.descriptor import Arch, Platform


@pytest.fixture
def pipeline(settings, fetcher: Fetcher, receipts) -> InstallPipeline:
    return InstallPipeline(settings=settings, fetcher=fetcher, receipts=receipts)


def _serve(session, descriptor, body: bytes) -> None:
    artifact = descriptor.artifact_map[(Platform.LINUX, Arch.X86_64)]
    session.serve(artifact.url, body)


class TestInstall:
    def test_install_and_verify(
        self, pipeline, session, settings, make_descriptor, grdy_tarball
    ):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)

        receipt = pipeline.install(descriptor, "linux", "x86_64")

        assert receipt.binary_path == settings.bin_dir / "grdy"
        assert receipt.binary_path.exists()
        assert receipt.verified is True
        assert receipt.version == "0.4.0"
        assert receipt.platform is Platform.LINUX
        assert pipeline.receipts.get("grdy") == receipt

    def test_install_idempotent(self, pipeline, session, make_descriptor, grdy_tarball):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)

        first = pipeline.install(descriptor, "linux", "x86_64")
        content = first.binary_path.read_bytes()
        second = pipeline.install(descriptor, "linux", "x86_64")

        assert second.binary_path == first.binary_path
        assert second.binary_path.read_bytes() == content
        assert len(session.calls) == 1

    def test_unsupported_platform_before_network(
        self, pipeline, session, make_descriptor, grdy_tarball
    ):
        descriptor = make_descriptor(grdy_tarball)
        with pytest.raises(UnsupportedPlatform):
            pipeline.install(descriptor, "windows", "aarch64")
        assert session.calls == []

    def test_integrity_failure_installs_nothing(
        self, pipeline, session, settings, make_descriptor, grdy_tarball
    ):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, bytes([grdy_tarball[0] ^ 0xFF]) + grdy_tarball[1:])
        with pytest.raises(IntegrityError):
            pipeline.install(descriptor, "linux", "x86_64")
        assert not (settings.bin_dir / "grdy").exists()
        assert pipeline.receipts.list_receipts() == []

    def test_network_failure(self, pipeline, make_descriptor, grdy_tarball):
        descriptor = make_descriptor(grdy_tarball)
        with pytest.raises(NetworkError):
            pipeline.install(descriptor, "linux", "x86_64")

    def test_archive_without_binary(
        self, pipeline, session, make_descriptor, tarball_factory
    ):
        body = tarball_factory({"README.md": b"no binary here"})
        descriptor = make_descriptor(body)
        _serve(session, descriptor, body)
        with pytest.raises(InstallIOError):
            pipeline.install(descriptor, "linux", "x86_64")

    def test_wrong_version_fails_verification_without_receipt(
        self, pipeline, session, make_descriptor, tarball_factory, script_factory
    ):
        body = tarball_factory({"grdy": script_factory("grdy 0.3.0")})
        descriptor = make_descriptor(body)
        _serve(session, descriptor, body)
        with pytest.raises(VerificationError):
            pipeline.install(descriptor, "linux", "x86_64")
        assert pipeline.receipts.list_receipts() == []

    def test_skip_verification(
        self, pipeline, session, make_descriptor, tarball_factory, script_factory
    ):
        body = tarball_factory({"grdy": script_factory("grdy 0.3.0")})
        descriptor = make_descriptor(body)
        _serve(session, descriptor, body)
        receipt = pipeline.install(descriptor, "linux", "x86_64", verify=False)
        assert receipt.verified is False
        assert receipt.binary_path.exists()

    def test_bin_dir_override(
        self, settings, fetcher, receipts, session, make_descriptor, grdy_tarball, tmp_path
    ):
        pipeline = InstallPipeline(
            settings=settings, fetcher=fetcher, receipts=receipts, bin_dir=tmp_path / "alt"
        )
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)
        receipt = pipeline.install(descriptor, "linux", "x86_64")
        assert receipt.binary_path == tmp_path / "alt" / "grdy"


class TestVerifyAndUninstall:
    def test_verify_installed(self, pipeline, session, make_descriptor, grdy_tarball):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)
        pipeline.install(descriptor, "linux", "x86_64")
        assert "0.4.0" in pipeline.verify("grdy")

    def test_verify_not_installed(self, pipeline):
        with pytest.raises(FormulaNotFound):
            pipeline.verify("grdy")

    def test_uninstall(self, pipeline, session, make_descriptor, grdy_tarball):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)
        receipt = pipeline.install(descriptor, "linux", "x86_64")
        pipeline.uninstall("grdy")
        assert not receipt.binary_path.exists()
        with pytest.raises(FormulaNotFound):
            pipeline.uninstall("grdy")

    def test_verify_marks_unverified_receipt(
        self, pipeline, session, make_descriptor, grdy_tarball
    ):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)
        receipt = pipeline.install(descriptor, "linux", "x86_64", verify=False)
        assert receipt.verified is False

        pipeline.verify("grdy")

        updated = pipeline.receipts.get("grdy")
        assert updated.verified is True
        assert updated.installed_at == receipt.installed_at

    def test_corrupt_receipt_is_formulary_error(self, pipeline, settings):
        settings.receipts_dir.mkdir(parents=True)
        (settings.receipts_dir / "grdy.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(DescriptorError):
            pipeline.verify("grdy")
        with pytest.raises(DescriptorError):
            pipeline.uninstall("grdy")

    def test_uninstall_rejects_path_names(self, pipeline, settings, tmp_path):
        victim = tmp_path / "victim"
        victim.write_bytes(b"keep me")
        outside = settings.receipts_dir.parent / "evil.json"
        outside.parent.mkdir(parents=True, exist_ok=True)
        outside.write_text(
            json.dumps({
                "name": "evil",
                "version": "0.4.0",
                "platform": "linux",
                "arch": "x86_64",
                "url": "https://example.test/evil.tar.gz",
                "sha256": "0" * 64,
                "binary_path": str(victim),
            }),
            encoding="utf-8",
        )
        with pytest.raises(FormulaNotFound):
            pipeline.uninstall("../evil")
        assert victim.read_bytes() == b"keep me"


class TestPlatformNames:
    def test_system_style_names(self, pipeline, session, make_descriptor, grdy_tarball):
        descriptor = make_descriptor(grdy_tarball)
        _serve(session, descriptor, grdy_tarball)
        receipt = pipeline.install(descriptor, "Linux", "AMD64")
        assert receipt.platform is Platform.LINUX
        assert receipt.arch is Arch.X86_64
