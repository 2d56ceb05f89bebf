"""Unit tests for XAPK normalization."""

import struct
import zipfile

import pytest

from conftest import build_zip

from apklink.core.exceptions import FormatError
from apklink.core.types import LinkEventKind
from apklink.services.normalization import ArchiveNormalizer


class TestIsComposite:
    """Tests for bundle classification."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("app.xapk", True), ("App.XAPK", True), ("app.apk", False), ("xapk", False), ("app.xapk.apk", False)],
    )
    def test_classification_by_extension(self, temp_dir, name, expected):
        """Only the file extension decides, the file need not exist."""
        assert ArchiveNormalizer().is_composite(temp_dir / name) is expected


class TestExtractBase:
    """Tests for base APK extraction."""

    def test_manifest_selects_named_apk(self, temp_dir, make_xapk):
        """The manifest's package name picks the base APK, byte for byte."""
        base = b"base-apk-bytes"
        bundle = make_xapk(
            {
                "com.example.app.apk": base,
                "config.arm64_v8a.apk": b"split",
                "aaa.apk": b"other",
            },
            package_name="com.example.app",
        )
        out_dir = temp_dir / "out"

        artifact = ArchiveNormalizer().extract_base(bundle, out_dir)

        assert artifact.path == (out_dir / "com.example.app.apk").absolute()
        assert artifact.path.read_bytes() == base

    def test_missing_manifest_falls_back_to_single_apk(self, temp_dir, make_xapk):
        """Without a manifest the only non-config APK is selected."""
        bundle = make_xapk({"base.apk": b"base", "config.apk": b"cfg", "icon.png": b"png"})

        artifact = ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert artifact.path.name == "base.apk"
        assert artifact.path.read_bytes() == b"base"

    def test_manifest_naming_missing_file_falls_back(self, temp_dir, make_xapk):
        """A manifest naming an absent APK falls back to scanning."""
        bundle = make_xapk({"real.apk": b"real"}, package_name="com.example.other")

        artifact = ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert artifact.path.name == "real.apk"

    def test_unparsable_manifest_falls_back(self, temp_dir):
        """A broken manifest falls back to scanning."""
        bundle = temp_dir / "broken.xapk"
        with zipfile.ZipFile(bundle, "w") as zf:
            zf.writestr("manifest.json", "{ nope")
            zf.writestr("main.apk", b"main")

        artifact = ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert artifact.path.name == "main.apk"

    def test_fallback_is_first_by_name(self, temp_dir, make_xapk):
        """Among several candidates the first by name wins."""
        bundle = make_xapk({"b.apk": b"b", "a.apk": b"a"})

        artifact = ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert artifact.path.name == "a.apk"

    def test_no_candidate_raises_format_error(self, temp_dir, make_xapk):
        """A bundle without eligible APKs is malformed."""
        bundle = make_xapk({"config.apk": b"cfg", "readme.txt": b"hi"})

        with pytest.raises(FormatError):
            ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

    def test_not_a_zip_raises_format_error(self, temp_dir):
        """Non-zip bundles are malformed."""
        bundle = temp_dir / "fake.xapk"
        bundle.write_bytes(b"definitely not a zip")

        with pytest.raises(FormatError):
            ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

    def test_nested_entries_are_unpacked(self, temp_dir, make_xapk):
        """Nested entry paths get their parent directories created."""
        bundle = make_xapk({"Android/obb/com.example/main.obb": b"obb", "base.apk": b"base"})
        out_dir = temp_dir / "out"

        ArchiveNormalizer().extract_base(bundle, out_dir)

        assert (out_dir / "extracted" / "Android" / "obb" / "com.example" / "main.obb").read_bytes() == b"obb"

    def test_entry_escaping_destination_is_rejected(self, temp_dir):
        """Entries resolving outside the scratch directory are refused."""
        bundle = temp_dir / "evil.xapk"
        with zipfile.ZipFile(bundle, "w") as zf:
            zf.writestr("../../escaped.apk", b"evil")
            zf.writestr("base.apk", b"base")

        with pytest.raises(FormatError):
            ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert not (temp_dir / "escaped.apk").exists()

    def test_manifest_cannot_point_outside_scratch(self, temp_dir, make_xapk):
        """A path-like package name never selects a file outside the bundle."""
        (temp_dir / "secret.apk").write_bytes(b"outside")
        bundle = make_xapk({"base.apk": b"inside"}, package_name="../../secret")

        artifact = ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert artifact.path.name == "base.apk"
        assert artifact.path.read_bytes() == b"inside"

    @pytest.mark.parametrize(
        ("central_offset", "local_offset", "value"),
        [
            pytest.param(10, 8, 99, id="unsupported-compression"),
            pytest.param(8, 6, 0x1, id="encrypted-entry"),
        ],
    )
    def test_undecodable_entry_raises_format_error(self, temp_dir, central_offset, local_offset, value):
        """Entries zipfile cannot decode make the bundle malformed."""
        data = bytearray(build_zip({"base.apk": b"base"}))
        struct.pack_into("<H", data, data.find(b"PK\x01\x02") + central_offset, value)
        struct.pack_into("<H", data, data.find(b"PK\x03\x04") + local_offset, value)
        bundle = temp_dir / "odd.xapk"
        bundle.write_bytes(bytes(data))

        with pytest.raises(FormatError) as exc_info:
            ArchiveNormalizer().extract_base(bundle, temp_dir / "out")

        assert exc_info.value.cause is not None

    def test_stale_scratch_is_cleared(self, temp_dir, make_xapk):
        """Leftovers from an earlier extraction do not leak into selection."""
        out_dir = temp_dir / "out"
        stale = out_dir / "extracted" / "aaa.apk"
        stale.parent.mkdir(parents=True)
        stale.write_bytes(b"stale")
        bundle = make_xapk({"zzz.apk": b"fresh"})

        artifact = ArchiveNormalizer().extract_base(bundle, out_dir)

        assert artifact.path.name == "zzz.apk"
        assert not stale.exists()

    def test_observer_notified(self, temp_dir, make_xapk):
        """Extraction is announced to the observer."""
        events = []
        bundle = make_xapk({"base.apk": b"base"})

        ArchiveNormalizer().extract_base(bundle, temp_dir / "out", observer=events.append)

        assert [e.kind for e in events] == [LinkEventKind.NORMALIZED]
