"""Tests for the saved-recording catalog."""

from pathlib import Path
from unittest import mock

import pytest

from vpiano.core.catalog import CatalogEntry, RecordingCatalog, with_extension
from vpiano.core.errors import DuplicateNameError, InvalidInputError, RecordingIOError
from vpiano.core.renderer import RenderedAudio
from vpiano.core.wav_encoder import write_wav


def _make_wav(path: Path) -> Path:
    return write_wav(RenderedAudio(samples=(0, 1, 2)), path)


@pytest.fixture
def catalog() -> RecordingCatalog:
    return RecordingCatalog()


class TestRegister:
    def test_register_and_list(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        b = catalog.register(_make_wav(tmp_path / "b.wav"))
        assert catalog.entries() == [a, b]
        assert a.display_name == "a.wav"
        assert a.file_path == str(tmp_path / "a.wav")
        assert len(catalog) == 2

    def test_entries_returns_copy(self, catalog, tmp_path):
        catalog.register(_make_wav(tmp_path / "a.wav"))
        catalog.entries().clear()
        assert len(catalog) == 1

    def test_rejects_other_extensions(self, catalog, tmp_path):
        with pytest.raises(InvalidInputError):
            catalog.register(tmp_path / "a.mid")

    def test_get_by_name(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "a.wav"))
        assert catalog.get("a.wav") == entry
        assert catalog.get("missing.wav") is None


class TestRename:
    def test_appends_extension(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "take.wav"))
        renamed = catalog.rename(entry, "Foo")
        assert renamed.display_name == "Foo.wav"
        assert Path(renamed.file_path) == tmp_path / "Foo.wav"
        assert (tmp_path / "Foo.wav").exists()
        assert not (tmp_path / "take.wav").exists()
        assert catalog.entries() == [renamed]

    def test_keeps_existing_extension(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "take.wav"))
        assert catalog.rename(entry, "Bar.wav").display_name == "Bar.wav"

    def test_keeps_position(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        b = catalog.register(_make_wav(tmp_path / "b.wav"))
        renamed = catalog.rename(a, "z")
        assert catalog.entries() == [renamed, b]

    def test_duplicate_name(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        b = catalog.register(_make_wav(tmp_path / "b.wav"))
        with pytest.raises(DuplicateNameError):
            catalog.rename(a, "b")
        assert catalog.entries() == [a, b]
        assert (tmp_path / "a.wav").exists()
        assert (tmp_path / "b.wav").exists()

    def test_duplicate_of_uncataloged_file(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        _make_wav(tmp_path / "other.wav")
        with pytest.raises(DuplicateNameError):
            catalog.rename(a, "other")
        assert catalog.entries() == [a]

    def test_same_name_is_noop(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        assert catalog.rename(a, "a") is a

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name(self, catalog, tmp_path, name):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        with pytest.raises(InvalidInputError):
            catalog.rename(a, name)

    def test_path_separator_rejected(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        with pytest.raises(InvalidInputError):
            catalog.rename(a, "../escape")

    def test_filesystem_failure_leaves_entry(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        with mock.patch.object(Path, "rename", side_effect=PermissionError("denied")):
            with pytest.raises(RecordingIOError):
                catalog.rename(a, "b")
        assert catalog.entries() == [a]

    def test_uncataloged_entry(self, catalog, tmp_path):
        stray = CatalogEntry.for_path(_make_wav(tmp_path / "x.wav"))
        with pytest.raises(InvalidInputError):
            catalog.rename(stray, "y")


class TestDelete:
    def test_delete_removes_file_and_entry(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        b = catalog.register(_make_wav(tmp_path / "b.wav"))
        catalog.delete(a)
        assert catalog.entries() == [b]
        assert not (tmp_path / "a.wav").exists()

    def test_failure_retains_entry(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        with mock.patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            with pytest.raises(RecordingIOError):
                catalog.delete(a)
        assert catalog.entries() == [a]
        assert (tmp_path / "a.wav").exists()

    def test_missing_file_counts_as_deleted(self, catalog, tmp_path):
        a = catalog.register(_make_wav(tmp_path / "a.wav"))
        (tmp_path / "a.wav").unlink()
        catalog.delete(a)
        assert len(catalog) == 0


class TestScan:
    def test_scan_registers_valid_wavs(self, catalog, tmp_path):
        _make_wav(tmp_path / "one.wav")
        (tmp_path / "broken.wav").write_bytes(b"not a wav")
        (tmp_path / "notes.txt").write_text("x")
        added = catalog.scan(tmp_path)
        assert [e.display_name for e in added] == ["one.wav"]

    def test_scan_skips_known(self, catalog, tmp_path):
        catalog.register(_make_wav(tmp_path / "one.wav"))
        assert catalog.scan(tmp_path) == []
        assert len(catalog) == 1

    def test_scan_missing_dir(self, catalog, tmp_path):
        assert catalog.scan(tmp_path / "nope") == []


class TestWithExtension:
    def test_adds(self):
        assert with_extension("Foo") == "Foo.wav"

    def test_keeps(self):
        assert with_extension("Foo.wav") == "Foo.wav"
        assert with_extension("Foo.WAV") == "Foo.WAV"


class TestCopyTo:
    def test_copies_without_cataloging(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "a.wav"))
        out = tmp_path / "out"
        out.mkdir()
        copied = catalog.copy_to(entry, out / "b.wav")
        assert copied.read_bytes() == Path(entry.file_path).read_bytes()
        assert catalog.entries() == [entry]

    def test_same_file_is_error(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "a.wav"))
        with pytest.raises(RecordingIOError):
            catalog.copy_to(entry, entry.file_path)

    def test_missing_source(self, catalog, tmp_path):
        entry = catalog.register(_make_wav(tmp_path / "a.wav"))
        Path(entry.file_path).unlink()
        with pytest.raises(RecordingIOError):
            catalog.copy_to(entry, tmp_path / "b.wav")
