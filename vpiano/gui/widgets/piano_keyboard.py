"""Clickable piano keyboard widget.

Geometry and hit-testing come from ``core.keyboard_layout``; this widget only
paints the keys and turns mouse presses into note signals.
"""

from __future__ import annotations

from PyQt6.QtCore import QRectF, QSize, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QLinearGradient, QPainter, QPen
from PyQt6.QtWidgets import QWidget

from ...core.constants import KEYBOARD_BASE_NOTE, KEYBOARD_OCTAVES
from ...core.keyboard_layout import build_layout, hit_test, layout_size
from ..theme import (
    KEY_BLACK,
    KEY_BORDER,
    KEY_PRESSED,
    KEY_WHITE_BOTTOM,
    KEY_WHITE_TOP,
)


class PianoKeyboard(QWidget):
    """Interactive keyboard: press emits ``note_pressed``, release ``note_released``."""

    note_pressed = pyqtSignal(int)    # midi_note (mouse down)
    note_released = pyqtSignal(int)   # midi_note (mouse up)

    def __init__(
        self,
        base_note: int = KEYBOARD_BASE_NOTE,
        octaves: int = KEYBOARD_OCTAVES,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._keys = build_layout(base_note, octaves)
        self._pressed_note: int | None = None
        self._lit_notes: set[int] = set()
        width, height = layout_size(self._keys)
        self._natural_size = QSize(int(width), int(height))
        self.setFixedSize(self._natural_size)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    @property
    def pressed_note(self) -> int | None:
        return self._pressed_note

    @property
    def lit_notes(self) -> set[int]:
        return set(self._lit_notes)

    def sizeHint(self) -> QSize:  # noqa: N802
        return self._natural_size

    def note_at(self, x: float, y: float) -> int | None:
        return hit_test(self._keys, x, y)

    def key_center(self, pitch: int) -> tuple[float, float] | None:
        """Point inside ``pitch``'s visible area (below black keys for whites)."""
        for key in self._keys:
            if key.pitch == pitch:
                y = key.height * 0.5 if key.is_black else key.height * 0.85
                return key.x + key.width / 2, y
        return None

    def light(self, pitch: int, on: bool) -> None:
        """Highlight a key sounding in replay."""
        if on:
            self._lit_notes.add(pitch)
        else:
            self._lit_notes.discard(pitch)
        self.update()

    def mousePressEvent(self, event) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton:
            note = self.note_at(event.position().x(), event.position().y())
            if note is not None:
                self._pressed_note = note
                self.note_pressed.emit(note)
                self.update()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.LeftButton and self._pressed_note is not None:
            self.note_released.emit(self._pressed_note)
            self._pressed_note = None
            self.update()
        super().mouseReleaseEvent(event)

    def paintEvent(self, event) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        border = QPen(QColor(KEY_BORDER), 1)

        # Whites first so blacks paint over them
        for key in sorted(self._keys, key=lambda k: k.is_black):
            rect = QRectF(key.x, key.y, key.width, key.height)
            active = key.pitch == self._pressed_note or key.pitch in self._lit_notes
            if active:
                painter.fillRect(rect, QColor(KEY_PRESSED))
            elif key.is_black:
                painter.fillRect(rect, QColor(KEY_BLACK))
            else:
                grad = QLinearGradient(key.x, 0, key.x, key.height)
                grad.setColorAt(0, QColor(KEY_WHITE_TOP))
                grad.setColorAt(1, QColor(KEY_WHITE_BOTTOM))
                painter.fillRect(rect, grad)
            if not key.is_black:
                painter.setPen(border)
                painter.drawRect(rect)

        painter.end()
