"""Saved-recording catalog — tracks rendered WAV files and renames/deletes them."""

from __future__ import annotations

import logging
import shutil
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .constants import RECORDING_EXTENSION
from .errors import DuplicateNameError, InvalidInputError, RecordingIOError
from .wav_encoder import WavFormatError, read_wav_header

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """A single saved recording."""

    display_name: str
    file_path: str

    @classmethod
    def for_path(cls, path: str | Path) -> CatalogEntry:
        path = Path(path)
        return cls(display_name=path.name, file_path=str(path))


def with_extension(name: str) -> str:
    """Append the recording extension unless ``name`` already carries it."""
    if name.lower().endswith(RECORDING_EXTENSION):
        return name
    return name + RECORDING_EXTENSION


class RecordingCatalog:
    """Ordered list of saved recordings.

    Thread-safe: ``register`` is called from the render worker while the GUI
    thread lists, renames and deletes.
    """

    def __init__(self) -> None:
        self._entries: list[CatalogEntry] = []
        self._lock = threading.Lock()

    def entries(self) -> list[CatalogEntry]:
        """Return a copy of the entries in registration order."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries())

    def get(self, display_name: str) -> CatalogEntry | None:
        with self._lock:
            for e in self._entries:
                if e.display_name == display_name:
                    return e
        return None

    def register(self, path: str | Path) -> CatalogEntry:
        entry = CatalogEntry.for_path(path)
        if not entry.display_name.lower().endswith(RECORDING_EXTENSION):
            raise InvalidInputError(f"not a {RECORDING_EXTENSION} file: {path}")
        with self._lock:
            self._entries.append(entry)
        log.info("Registered recording %s", entry.display_name)
        return entry

    def scan(self, directory: str | Path) -> list[CatalogEntry]:
        """Register every valid WAV in ``directory`` not already cataloged, oldest first."""
        directory = Path(directory)
        if not directory.is_dir():
            return []
        known = {e.file_path for e in self.entries()}
        found = sorted(
            (p for p in directory.glob(f"*{RECORDING_EXTENSION}") if p.is_file()),
            key=lambda p: (p.stat().st_mtime, p.name),
        )
        added: list[CatalogEntry] = []
        for path in found:
            if str(path) in known:
                continue
            try:
                read_wav_header(path)
            except (OSError, WavFormatError):
                log.warning("Skipping unreadable recording %s", path, exc_info=True)
                continue
            added.append(self.register(path))
        return added

    def rename(self, entry: CatalogEntry, new_name: str) -> CatalogEntry:
        """Rename ``entry`` on disk and in the catalog.

        Raises
        ------
        InvalidInputError
            ``new_name`` is blank or ``entry`` is not cataloged.
        DuplicateNameError
            Another recording already uses the name.
        RecordingIOError
            The file system rename failed. The entry is left unchanged.
        """
        new_name = new_name.strip()
        if not new_name:
            raise InvalidInputError("recording name cannot be empty")
        if "/" in new_name or "\\" in new_name:
            raise InvalidInputError("recording name cannot contain path separators")
        new_name = with_extension(new_name)
        if new_name == entry.display_name:
            return entry

        old_path = Path(entry.file_path)
        new_path = old_path.with_name(new_name)

        with self._lock:
            index = self._index_of(entry)
            if any(e.display_name == new_name for e in self._entries):
                raise DuplicateNameError(f"{new_name} already exists")
            if new_path.exists():
                raise DuplicateNameError(f"{new_path} already exists on disk")
            try:
                old_path.rename(new_path)
            except OSError as e:
                raise RecordingIOError(f"Failed to rename {old_path}: {e}") from e
            renamed = CatalogEntry.for_path(new_path)
            self._entries[index] = renamed

        log.info("Renamed %s -> %s", entry.display_name, renamed.display_name)
        return renamed

    def delete(self, entry: CatalogEntry) -> None:
        """Delete ``entry``'s file and drop it from the catalog.

        Raises
        ------
        RecordingIOError
            The file could not be removed. The entry stays cataloged.
        """
        path = Path(entry.file_path)
        with self._lock:
            index = self._index_of(entry)
            try:
                path.unlink()
            except FileNotFoundError:
                log.warning("Recording %s was already gone", path)
            except OSError as e:
                raise RecordingIOError(f"Failed to delete {path}: {e}") from e
            self._entries.pop(index)
        log.info("Deleted %s", entry.display_name)

    def copy_to(self, entry: CatalogEntry, dest: str | Path) -> Path:
        """Copy ``entry``'s file to ``dest`` (a file path or a directory).

        The copy is not cataloged. Raises ``RecordingIOError`` on failure.
        """
        try:
            copied = Path(shutil.copy2(entry.file_path, dest))
        except OSError as e:
            raise RecordingIOError(f"Failed to copy {entry.file_path}: {e}") from e
        log.info("Copied %s -> %s", entry.display_name, copied)
        return copied

    def _index_of(self, entry: CatalogEntry) -> int:
        try:
            return self._entries.index(entry)
        except ValueError:
            raise InvalidInputError(f"{entry.display_name} is not cataloged") from None
