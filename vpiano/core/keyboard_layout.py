"""On-screen keyboard geometry, hit-testing and note names."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import KEYBOARD_BASE_NOTE, KEYBOARD_OCTAVES

WHITE_KEY_WIDTH = 40
WHITE_KEY_HEIGHT = 200
BLACK_KEY_WIDTH = 25
BLACK_KEY_HEIGHT = 120

# Semitone offsets within one octave
_WHITE_SEMITONES = (0, 2, 4, 5, 7, 9, 11)
# White-key index each black key sits after (C#, D#, F#, G#, A#)
_BLACK_AFTER_WHITE = {0: 1, 1: 3, 3: 6, 4: 8, 5: 10}

_NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


@dataclass(frozen=True, slots=True)
class KeyRect:
    """Bounding box of one piano key."""

    pitch: int
    x: float
    y: float
    width: float
    height: float
    is_black: bool

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height


def note_name(midi_note: int) -> str:
    """MIDI note number to scientific pitch name, e.g. 60 -> "C4"."""
    return f"{_NOTE_NAMES[midi_note % 12]}{midi_note // 12 - 1}"


def build_layout(
    base_note: int = KEYBOARD_BASE_NOTE,
    octaves: int = KEYBOARD_OCTAVES,
    white_width: float = WHITE_KEY_WIDTH,
    white_height: float = WHITE_KEY_HEIGHT,
    black_width: float = BLACK_KEY_WIDTH,
    black_height: float = BLACK_KEY_HEIGHT,
) -> list[KeyRect]:
    """Lay out ``octaves`` octaves starting at ``base_note`` (a C).

    Black keys come first in the returned list so a linear hit test finds
    them before the white keys they overlap.
    """
    whites: list[KeyRect] = []
    blacks: list[KeyRect] = []
    for octave in range(octaves):
        root = base_note + octave * 12
        for i, semitone in enumerate(_WHITE_SEMITONES):
            x = (octave * 7 + i) * white_width
            whites.append(KeyRect(root + semitone, x, 0, white_width, white_height, False))
            if i in _BLACK_AFTER_WHITE:
                bx = x + white_width - black_width / 2
                blacks.append(KeyRect(
                    root + _BLACK_AFTER_WHITE[i], bx, 0, black_width, black_height, True,
                ))
    return blacks + whites


def layout_size(keys: list[KeyRect]) -> tuple[float, float]:
    """Total (width, height) covered by ``keys``."""
    if not keys:
        return 0.0, 0.0
    return (
        max(k.x + k.width for k in keys),
        max(k.y + k.height for k in keys),
    )


def hit_test(keys: list[KeyRect], x: float, y: float) -> int | None:
    """Return the pitch of the key under (x, y), or None."""
    for key in keys:
        if key.contains(x, y):
            return key.pitch
    return None
