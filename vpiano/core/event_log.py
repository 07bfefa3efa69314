"""Performance capture — timestamped note events in an append-only log.

Pure Python, no Qt dependency. ``PerformanceRecorder`` is driven from the GUI
thread (or the mido callback thread for an external keyboard); timestamps use
``time.perf_counter()`` relative to capture start.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .constants import MIDI_NOTE_MAX, MIDI_NOTE_MIN, MIDI_VELOCITY_MAX
from .errors import InvalidInputError


class EventKind(Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True, slots=True)
class NoteEvent:
    """A single captured note event."""

    kind: EventKind
    pitch: int             # MIDI note number (0-127)
    velocity: int          # 0-127, always 0 for NOTE_OFF
    timestamp_ms: float    # milliseconds since capture start

    def __post_init__(self) -> None:
        if not MIDI_NOTE_MIN <= self.pitch <= MIDI_NOTE_MAX:
            raise InvalidInputError(f"pitch out of range: {self.pitch}")
        if not 0 <= self.velocity <= MIDI_VELOCITY_MAX:
            raise InvalidInputError(f"velocity out of range: {self.velocity}")
        if self.timestamp_ms < 0:
            raise InvalidInputError(f"negative timestamp: {self.timestamp_ms}")
        if self.kind is EventKind.NOTE_OFF and self.velocity != 0:
            object.__setattr__(self, "velocity", 0)

    @classmethod
    def note_on(cls, pitch: int, velocity: int, timestamp_ms: float) -> NoteEvent:
        return cls(EventKind.NOTE_ON, pitch, velocity, timestamp_ms)

    @classmethod
    def note_off(cls, pitch: int, timestamp_ms: float) -> NoteEvent:
        return cls(EventKind.NOTE_OFF, pitch, 0, timestamp_ms)


class EventLog:
    """Ordered, append-only record of one capture session.

    Timestamps never decrease in insertion order. Once ``close()`` is called
    the log is read-only and may be handed to the renderer or the scheduler.
    """

    def __init__(self, events: Iterable[NoteEvent] | None = None) -> None:
        self._events: list[NoteEvent] = []
        self._closed = False
        for evt in events or ():
            self.append(evt)

    @classmethod
    def from_events(cls, events: list[NoteEvent]) -> EventLog:
        """Build a closed log from an already-ordered event list."""
        log = cls(events)
        log.close()
        return log

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_timestamp(self) -> float:
        if not self._events:
            return 0.0
        return self._events[-1].timestamp_ms

    def append(self, event: NoteEvent) -> None:
        if self._closed:
            raise RuntimeError("cannot append to a closed event log")
        if self._events and event.timestamp_ms < self._events[-1].timestamp_ms:
            raise InvalidInputError(
                f"event at {event.timestamp_ms}ms precedes last event at "
                f"{self._events[-1].timestamp_ms}ms"
            )
        self._events.append(event)

    def close(self) -> None:
        self._closed = True

    def is_empty(self) -> bool:
        return not self._events

    def snapshot(self) -> tuple[NoteEvent, ...]:
        """Return the events as an immutable tuple."""
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[NoteEvent]:
        return iter(self.snapshot())


class PerformanceRecorder:
    """Owns the capture window and stamps incoming notes.

    ``start()`` while already capturing is ignored, so only one log is ever
    being written.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._log: EventLog | None = None
        self._last_log: EventLog | None = None
        self._start_time: float = 0.0

    @property
    def is_capturing(self) -> bool:
        return self._log is not None

    @property
    def event_count(self) -> int:
        return len(self._log) if self._log is not None else 0

    @property
    def last_log(self) -> EventLog | None:
        """The most recently completed capture, if any."""
        return self._last_log

    @property
    def duration_ms(self) -> float:
        """Elapsed ms while capturing, or length of the last capture."""
        if self._log is not None:
            return self._elapsed_ms()
        if self._last_log is None:
            return 0.0
        return self._last_log.last_timestamp

    def start(self) -> bool:
        """Open a fresh log. Returns False if a capture is already running."""
        if self._log is not None:
            return False
        self._log = EventLog()
        self._start_time = self._clock()
        return True

    def stop(self) -> EventLog | None:
        """Close and return the current log, or None if not capturing."""
        log = self._log
        if log is None:
            return None
        log.close()
        self._log = None
        self._last_log = log
        return log

    def record_note_on(self, pitch: int, velocity: int) -> None:
        if self._log is None:
            return
        self._log.append(NoteEvent.note_on(pitch, velocity, self._stamp()))

    def record_note_off(self, pitch: int) -> None:
        if self._log is None:
            return
        self._log.append(NoteEvent.note_off(pitch, self._stamp()))

    def _elapsed_ms(self) -> float:
        return (self._clock() - self._start_time) * 1000.0

    def _stamp(self) -> float:
        # Clock jitter must not break the log's ordering invariant
        assert self._log is not None
        return max(self._elapsed_ms(), self._log.last_timestamp)
