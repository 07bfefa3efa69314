"""Render a captured EventLog into one PCM buffer.

Notes are recovered by pairing each NOTE_ON with the next NOTE_OFF of the
same pitch (FIFO per pitch). Each note is synthesized separately and the
buffers are concatenated in NOTE_ON order: a monophonic rendition where
notes queue rather than mix.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Iterable
from dataclasses import dataclass

from .constants import BITS_PER_SAMPLE, CHANNEL_COUNT, SAMPLE_RATE
from .errors import NoDataError
from .event_log import EventKind, EventLog, NoteEvent
from .synth import synthesize_tone

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PairedNote:
    """A NOTE_ON matched with its NOTE_OFF."""

    pitch: int
    velocity: int
    start_ms: float
    duration_ms: float


@dataclass(frozen=True, slots=True)
class RenderedAudio:
    """Linear PCM output of one render call."""

    samples: tuple[int, ...]
    sample_rate: int = SAMPLE_RATE
    bits_per_sample: int = BITS_PER_SAMPLE
    channel_count: int = CHANNEL_COUNT

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    @property
    def duration_ms(self) -> float:
        return self.sample_count * 1000.0 / self.sample_rate


def pair_notes(events: Iterable[NoteEvent]) -> list[PairedNote]:
    """Match NOTE_ON/NOTE_OFF events into notes with durations.

    An unmatched NOTE_ON is closed at the last event's timestamp. A NOTE_OFF
    with no open NOTE_ON for its pitch is dropped.
    """
    events = list(events)
    if not events:
        return []
    end_ms = events[-1].timestamp_ms

    # Slot per NOTE_ON in chronological order; filled once its NOTE_OFF arrives
    slots: list[tuple[NoteEvent, float | None]] = []
    open_by_pitch: dict[int, deque[int]] = defaultdict(deque)

    for evt in events:
        if evt.kind is EventKind.NOTE_ON:
            open_by_pitch[evt.pitch].append(len(slots))
            slots.append((evt, None))
        else:
            pending = open_by_pitch.get(evt.pitch)
            if not pending:
                log.debug("Dropping unmatched note_off for pitch %d at %.1fms",
                          evt.pitch, evt.timestamp_ms)
                continue
            idx = pending.popleft()
            slots[idx] = (slots[idx][0], evt.timestamp_ms)

    notes: list[PairedNote] = []
    for on, off_ms in slots:
        if off_ms is None:
            off_ms = end_ms
        notes.append(PairedNote(
            pitch=on.pitch,
            velocity=on.velocity,
            start_ms=on.timestamp_ms,
            duration_ms=off_ms - on.timestamp_ms,
        ))
    return notes


def render(event_log: EventLog) -> RenderedAudio:
    """Synthesize every note of ``event_log`` into one mono 16-bit buffer.

    Raises
    ------
    NoDataError
        If the log is empty or contains no NOTE_ON events.
    """
    if event_log.is_empty():
        raise NoDataError("No notes recorded")

    notes = pair_notes(event_log.snapshot())
    if not notes:
        raise NoDataError("No notes recorded")

    samples: list[int] = []
    for note in notes:
        samples.extend(synthesize_tone(
            note.pitch, note.velocity, note.duration_ms, SAMPLE_RATE,
        ))

    log.info("Rendered %d notes into %d samples", len(notes), len(samples))
    return RenderedAudio(samples=tuple(samples))
