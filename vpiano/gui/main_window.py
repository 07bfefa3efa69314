"""Main window — keyboard, capture controls, and the saved-recordings list."""

from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, Qt, QUrl, pyqtSignal
from PyQt6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..core.catalog import CatalogEntry
from ..core.config import ConfigManager
from ..core.session import PianoSession
from .widgets.piano_keyboard import PianoKeyboard

log = logging.getLogger(__name__)


class _SessionRelay(QObject):
    """Re-emits callbacks from render and playback threads on the GUI thread."""

    status = pyqtSignal(str)
    saved = pyqtSignal(object)  # CatalogEntry
    lit = pyqtSignal(int, bool)


class MainWindow(QWidget):
    """Virtual piano with capture, playback and WAV rendering."""

    def __init__(self, session: PianoSession, config: ConfigManager, parent=None) -> None:
        super().__init__(parent)
        self._session = session
        self._config = config
        self._relay = _SessionRelay(self)
        self._sound = None

        self.setWindowTitle("Virtual Piano DAW")
        self._build_ui()

        self._relay.status.connect(self._on_status)
        self._relay.saved.connect(self._on_saved)
        self._relay.lit.connect(self._piano.light)
        self._piano.note_pressed.connect(self._session.key_pressed)
        self._piano.note_released.connect(self._session.key_released)

        self._session.set_player(self._play_file)
        self._session.set_status_callback(self._relay.status.emit)
        self._session.set_saved_callback(self._relay.saved.emit)
        self._session.set_replay_callback(self._relay.lit.emit)
        self._refresh_recordings()

    # ── UI ──────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(10)

        self._status_label = QLabel("Click a key to play a note!")
        self._status_label.setObjectName("statusLabel")
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._status_label)

        middle = QHBoxLayout()
        self._piano = PianoKeyboard(
            base_note=self._config.get("keyboard.base_note", 48),
            octaves=self._config.get("keyboard.octaves", 3),
        )
        middle.addWidget(self._piano)

        side = QVBoxLayout()
        title = QLabel("Saved Recordings")
        title.setObjectName("sectionLabel")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        side.addWidget(title)
        self._recordings = QListWidget()
        self._recordings.setMinimumWidth(200)
        side.addWidget(self._recordings)

        rec_controls = QHBoxLayout()
        self._play_saved_btn = self._button("Play", rec_controls, self._on_play_saved)
        self._rename_btn = self._button("Rename", rec_controls, self._on_rename)
        self._delete_btn = self._button("Delete", rec_controls, self._on_delete)
        self._download_btn = self._button("Download", rec_controls, self._on_download)
        side.addLayout(rec_controls)
        middle.addLayout(side)
        root.addLayout(middle)

        controls = QHBoxLayout()
        controls.addStretch()
        self._record_btn = self._button("⏺ Record", controls, self._on_record)
        self._play_btn = self._button("▶ Play", controls, self._on_play)
        self._tempo_btn = self._button(self._tempo_text(), controls, self._on_tempo)
        self._export_btn = self._button("Export MIDI", controls, self._on_export)
        controls.addStretch()
        root.addLayout(controls)

    def _button(self, text: str, layout, slot) -> QPushButton:
        btn = QPushButton(text)
        btn.clicked.connect(slot)
        layout.addWidget(btn)
        return btn

    def _tempo_text(self) -> str:
        return f"Tempo: {self._session.tempo_bpm} BPM"

    def _set_recording_look(self, recording: bool) -> None:
        self._record_btn.setText("⏹ Stop" if recording else "⏺ Record")
        self._record_btn.setProperty("recording", recording)
        self._record_btn.style().unpolish(self._record_btn)
        self._record_btn.style().polish(self._record_btn)

    # ── Recordings list ─────────────────────────────────

    def selected_entry(self) -> CatalogEntry | None:
        item = self._recordings.currentItem()
        if item is None:
            return None
        return item.data(Qt.ItemDataRole.UserRole)

    def _refresh_recordings(self, select: str | None = None) -> None:
        if select is None:
            current = self.selected_entry()
            select = current.display_name if current is not None else None
        self._recordings.clear()
        for entry in self._session.catalog.entries():
            item = QListWidgetItem(entry.display_name)
            item.setData(Qt.ItemDataRole.UserRole, entry)
            self._recordings.addItem(item)
            if entry.display_name == select:
                self._recordings.setCurrentItem(item)

    # ── Dialog seams ────────────────────────────────────

    def _ask_text(self, title: str, label: str, default: str) -> str | None:
        text, ok = QInputDialog.getText(self, title, label, text=default)
        return text if ok else None

    def _confirm(self, title: str, text: str) -> bool:
        reply = QMessageBox.question(
            self, title, text,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return reply == QMessageBox.StandardButton.Yes

    def _ask_save_path(self) -> str | None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export MIDI", str(self._session.recordings_dir / "capture.mid"),
            "MIDI files (*.mid)",
        )
        return path or None

    def _ask_download_path(self, entry: CatalogEntry) -> str | None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Download Recording", str(Path.home() / entry.display_name),
            "WAV files (*.wav)",
        )
        return path or None

    # ── Slots ───────────────────────────────────────────

    def _on_status(self, text: str) -> None:
        self._status_label.setText(text)

    def _on_saved(self, entry: CatalogEntry) -> None:
        self._refresh_recordings(select=entry.display_name)

    def _on_record(self) -> None:
        self._session.toggle_capture()
        self._set_recording_look(self._session.is_capturing)

    def _on_play(self) -> None:
        self._session.play_capture()

    def _on_tempo(self) -> None:
        value = self._ask_text("Tempo", "Enter tempo (BPM):", str(self._session.tempo_bpm))
        if value is None:
            return
        if self._session.set_tempo(value):
            self._tempo_btn.setText(self._tempo_text())

    def _on_export(self) -> None:
        path = self._ask_save_path()
        if path is not None:
            self._session.export_midi(path)

    def _on_play_saved(self) -> None:
        self._session.play_recording(self.selected_entry())

    def _on_rename(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            self._session.rename_recording(None, "")
            return
        new_name = self._ask_text("Rename", "Rename recording:", entry.display_name)
        if new_name is None or not new_name.strip():
            return
        renamed = self._session.rename_recording(entry, new_name)
        if renamed is not None:
            self._refresh_recordings(select=renamed.display_name)

    def _on_delete(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            self._session.delete_recording(None)
            return
        if not self._confirm("Confirm Delete", f"Delete {entry.display_name}?"):
            return
        if self._session.delete_recording(entry):
            self._refresh_recordings()

    def _on_download(self) -> None:
        entry = self.selected_entry()
        if entry is None:
            self._session.download_recording(None, "")
            return
        dest = self._ask_download_path(entry)
        if dest is not None:
            self._session.download_recording(entry, dest)

    # ── Audio ───────────────────────────────────────────

    def _play_file(self, path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(str(path))
        if self._sound is None:
            from PyQt6.QtMultimedia import QSoundEffect

            self._sound = QSoundEffect(self)
        self._sound.setSource(QUrl.fromLocalFile(str(path)))
        self._sound.play()

    def closeEvent(self, event) -> None:  # noqa: N802
        self._session.close()
        super().closeEvent(event)
