"""Piano session — wires capture, playback, rendering and the catalog together.

Pure Python, no Qt dependency. Every user-facing operation reports a one-line
status through ``on_status``; recoverable errors never escape this layer.
``on_status`` may be called from worker threads, so GUI callers must marshal
it to their own thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from .catalog import CatalogEntry, RecordingCatalog
from .config import ConfigManager, parse_tempo
from .constants import (
    DEFAULT_HOLD_MS,
    DEFAULT_TEMPO_BPM,
    DEFAULT_VELOCITY,
    RECORDING_EXTENSION,
    RECORDING_PREFIX,
    RECORDING_TIME_FORMAT,
)
from .errors import (
    DuplicateNameError,
    InvalidInputError,
    NoDataError,
    RecordingIOError,
)
from .event_log import EventLog, PerformanceRecorder
from .keyboard_layout import note_name
from .midi_export import save_midi
from .note_sink import LiveFeedback, NoteSink
from .playback import PlaybackScheduler
from .renderer import render
from .wav_encoder import write_wav

log = logging.getLogger(__name__)


class PianoSession:
    """Capture/playback/render controller behind the piano window."""

    def __init__(
        self,
        sink: NoteSink,
        config: ConfigManager,
        catalog: RecordingCatalog | None = None,
        on_status: Callable[[str], None] | None = None,
        player: Callable[[Path], None] | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._config = config
        self._catalog = catalog if catalog is not None else RecordingCatalog()
        self._on_status = on_status
        self._on_saved: Callable[[CatalogEntry], None] | None = None
        self._player = player
        self._recorder = PerformanceRecorder(clock)
        self._on_replay_note: Callable[[int, bool], None] | None = None
        self._scheduler = PlaybackScheduler(sink, clock, on_note=self._replay_note)
        self._live = LiveFeedback(sink, config.get("live.hold_ms", DEFAULT_HOLD_MS))
        self._capture_lock = threading.Lock()
        self._save_lock = threading.Lock()
        self._status = ""

    # ── State ───────────────────────────────────────────

    @property
    def status(self) -> str:
        return self._status

    @property
    def catalog(self) -> RecordingCatalog:
        return self._catalog

    @property
    def is_capturing(self) -> bool:
        return self._recorder.is_capturing

    @property
    def last_capture(self) -> EventLog | None:
        return self._recorder.last_log

    @property
    def tempo_bpm(self) -> int:
        return self._config.get("capture.tempo_bpm", DEFAULT_TEMPO_BPM)

    @property
    def recordings_dir(self) -> Path:
        return self._config.recordings_dir

    def set_player(self, player: Callable[[Path], None] | None) -> None:
        self._player = player

    def set_status_callback(self, on_status: Callable[[str], None] | None) -> None:
        self._on_status = on_status

    def set_saved_callback(self, on_saved: Callable[[CatalogEntry], None] | None) -> None:
        self._on_saved = on_saved

    def set_replay_callback(self, on_note: Callable[[int, bool], None] | None) -> None:
        """Called with ``(pitch, on)`` for every replayed event, from the playback thread."""
        self._on_replay_note = on_note

    def _report(self, text: str) -> None:
        self._status = text
        log.info("Status: %s", text)
        if self._on_status is not None:
            self._on_status(text)

    # ── Live input ──────────────────────────────────────

    def key_pressed(self, pitch: int, velocity: int | None = None) -> None:
        if velocity is None:
            velocity = self._config.get("capture.velocity", DEFAULT_VELOCITY)
        self._live.press(pitch, velocity)
        with self._capture_lock:
            self._recorder.record_note_on(pitch, velocity)
        self._report(f"You played: {note_name(pitch)}")

    def key_released(self, pitch: int) -> None:
        self._live.release(pitch)
        with self._capture_lock:
            self._recorder.record_note_off(pitch)

    # ── Capture ─────────────────────────────────────────

    def start_capture(self) -> bool:
        """Begin a new capture. Ignored while one is already running."""
        with self._capture_lock:
            started = self._recorder.start()
        if started:
            self._report("Recording...")
        return started

    def stop_capture(self) -> threading.Thread | None:
        """End the capture and render it to a WAV on a background thread.

        Returns the render worker, or None if no capture was running.
        """
        with self._capture_lock:
            event_log = self._recorder.stop()
        if event_log is None:
            return None
        self._report("Recording stopped")
        worker = threading.Thread(
            target=self._render_worker,
            args=(event_log,),
            daemon=True,
            name="capture-render",
        )
        worker.start()
        return worker

    def toggle_capture(self) -> threading.Thread | None:
        if self.is_capturing:
            return self.stop_capture()
        self.start_capture()
        return None

    def _render_worker(self, event_log: EventLog) -> None:
        try:
            self.save_capture(event_log)
        except Exception:
            log.exception("Unexpected error while saving recording")
            self._report("Error saving recording")

    def save_capture(self, event_log: EventLog) -> CatalogEntry | None:
        """Render ``event_log``, write it as a WAV and catalog it (blocking)."""
        try:
            audio = render(event_log)
        except NoDataError:
            self._report("No notes recorded")
            return None

        # Name choice, write and registration are one step across render workers
        with self._save_lock:
            try:
                path = write_wav(audio, self.next_recording_path())
            except RecordingIOError:
                log.warning("Saving recording failed", exc_info=True)
                self._report("Error saving recording")
                return None
            entry = self._catalog.register(path)

        self._report(f"Saved: {entry.display_name}")
        if self._on_saved is not None:
            self._on_saved(entry)
        return entry

    def next_recording_path(self, now: datetime | None = None) -> Path:
        """``recording_YYYYMMDD_HHMMSS.wav``, suffixed if that name is taken."""
        stamp = (now or datetime.now()).strftime(RECORDING_TIME_FORMAT)
        directory = self.recordings_dir
        stem = f"{RECORDING_PREFIX}{stamp}"
        taken = {e.display_name for e in self._catalog.entries()}
        candidate = f"{stem}{RECORDING_EXTENSION}"
        n = 1
        while candidate in taken or (directory / candidate).exists():
            candidate = f"{stem}_{n}{RECORDING_EXTENSION}"
            n += 1
        return directory / candidate

    def load_saved(self) -> list[CatalogEntry]:
        """Catalog recordings left in the recordings directory by earlier runs."""
        return self._catalog.scan(self.recordings_dir)

    # ── Playback ────────────────────────────────────────

    def play_capture(self) -> threading.Thread | None:
        """Replay the last capture through the note sink."""
        event_log = self._recorder.last_log
        if event_log is None or event_log.is_empty():
            self._report("No recording to play")
            return None
        if self._scheduler.is_playing:
            self._report("Already playing")
            return None
        self._report("Playing recording...")
        try:
            return self._scheduler.play(
                event_log, on_finished=lambda: self._report("Playback finished"),
            )
        except RuntimeError:
            self._report("Already playing")
            return None

    def _replay_note(self, pitch: int, on: bool) -> None:
        if self._on_replay_note is not None:
            self._on_replay_note(pitch, on)

    def play_recording(self, entry: CatalogEntry | None) -> bool:
        if entry is None:
            self._report("No recording selected")
            return False
        if self._player is None:
            self._report("Error playing recording")
            return False
        self._report(f"Playing: {entry.display_name}")
        try:
            self._player(Path(entry.file_path))
        except OSError:
            log.warning("Could not play %s", entry.file_path, exc_info=True)
            self._report("Error playing recording")
            return False
        return True

    # ── Settings ────────────────────────────────────────

    def set_tempo(self, value: str | int) -> bool:
        """Validate and store a new tempo. Invalid input leaves it unchanged."""
        try:
            bpm = parse_tempo(value)
        except InvalidInputError as e:
            self._report(str(e))
            return False
        self._config.set("capture.tempo_bpm", bpm)
        self._report(f"Tempo: {bpm} BPM")
        return True

    # ── Saved recordings ────────────────────────────────

    def rename_recording(
        self, entry: CatalogEntry | None, new_name: str,
    ) -> CatalogEntry | None:
        if entry is None:
            self._report("No recording selected")
            return None
        try:
            renamed = self._catalog.rename(entry, new_name)
        except DuplicateNameError:
            self._report(f"A recording named {new_name.strip()} already exists")
            return None
        except InvalidInputError as e:
            self._report(str(e))
            return None
        except RecordingIOError:
            log.warning("Rename failed", exc_info=True)
            self._report("Error renaming file")
            return None
        self._report(f"Renamed to: {renamed.display_name}")
        return renamed

    def delete_recording(self, entry: CatalogEntry | None) -> bool:
        if entry is None:
            self._report("No recording selected")
            return False
        try:
            self._catalog.delete(entry)
        except (RecordingIOError, InvalidInputError):
            log.warning("Delete failed", exc_info=True)
            self._report("Error deleting file")
            return False
        self._report(f"Deleted: {entry.display_name}")
        return True

    def download_recording(
        self, entry: CatalogEntry | None, dest: str | Path,
    ) -> Path | None:
        """Copy a saved recording to ``dest``. The catalog is not changed."""
        if entry is None:
            self._report("No recording selected")
            return None
        try:
            copied = self._catalog.copy_to(entry, dest)
        except RecordingIOError:
            log.warning("Download failed", exc_info=True)
            self._report("Error saving copy")
            return None
        self._report(f"Saved copy: {copied.name}")
        return copied

    def export_midi(self, path: str | Path) -> Path | None:
        """Write the last capture as a .mid file at the configured tempo."""
        event_log = self._recorder.last_log
        if event_log is None:
            self._report("No notes recorded")
            return None
        try:
            written = save_midi(event_log, path, self.tempo_bpm)
        except NoDataError:
            self._report("No notes recorded")
            return None
        except RecordingIOError:
            log.warning("MIDI export failed", exc_info=True)
            self._report("Error exporting MIDI")
            return None
        self._report(f"Exported: {written.name}")
        return written

    def close(self) -> None:
        self._live.release_all()
