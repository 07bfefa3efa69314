"""Real-time replay of a captured performance to a note sink.

Pure Python, no Qt dependency. Playback runs on a daemon
``threading.Thread`` so it never blocks the GUI thread. Every event's
deadline is measured from the playback start, not from the previous event,
so scheduling error does not accumulate.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from .event_log import EventKind, EventLog, NoteEvent
from .note_sink import NoteSink

log = logging.getLogger(__name__)


class PlaybackScheduler:
    """Replays NoteEvents against a ``NoteSink`` with the original timing.

    ``interrupt()`` cuts short the wait in progress: the pending event fires
    at once and the replay carries on, so no note is left sounding. One replay
    runs at a time. ``on_note(pitch, on)`` is called after each dispatched
    event, from the playback thread.
    """

    def __init__(
        self,
        sink: NoteSink,
        clock: Callable[[], float] = time.perf_counter,
        on_note: Callable[[int, bool], None] | None = None,
    ) -> None:
        self._sink = sink
        self._clock = clock
        self._on_note = on_note
        self._start_lock = threading.Lock()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None
        self._playing = threading.Event()

    @property
    def is_playing(self) -> bool:
        return self._playing.is_set()

    def play(
        self,
        events: EventLog | Iterable[NoteEvent],
        on_finished: Callable[[], None] | None = None,
    ) -> threading.Thread:
        """Start replay on a background thread and return it.

        Raises ``RuntimeError`` if a replay is already running.
        """
        snapshot = _as_tuple(events)
        with self._start_lock:
            if self._playing.is_set():
                raise RuntimeError("playback already running")
            self._playing.set()
            self._wake.clear()
            self._thread = threading.Thread(
                target=self._run_and_notify,
                args=(snapshot, on_finished),
                daemon=True,
                name="capture-playback",
            )
            self._thread.start()
        return self._thread

    def interrupt(self) -> None:
        """Wake the current wait so its event fires immediately."""
        self._wake.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self, events: EventLog | Iterable[NoteEvent]) -> int:
        """Blocking replay loop. Returns the number of events dispatched."""
        snapshot = _as_tuple(events)
        if not snapshot:
            return 0

        origin_ms = snapshot[0].timestamp_ms
        start = self._clock()
        fired = 0

        for evt in snapshot:
            target = start + (evt.timestamp_ms - origin_ms) / 1000.0
            wait = target - self._clock()
            if wait > 0:
                if self._wake.wait(timeout=wait):
                    # Interrupted: skip the rest of this wait only
                    self._wake.clear()
                    log.debug("Wait interrupted, firing pitch %d early", evt.pitch)
            self._dispatch(evt)
            fired += 1

        return fired

    def _dispatch(self, evt: NoteEvent) -> None:
        try:
            if evt.kind is EventKind.NOTE_ON:
                self._sink.note_on(evt.pitch, evt.velocity)
            else:
                self._sink.note_off(evt.pitch)
        except Exception:
            log.exception("Note sink failed on %s %d", evt.kind.value, evt.pitch)
        if self._on_note is not None:
            self._on_note(evt.pitch, evt.kind is EventKind.NOTE_ON)

    def _run_and_notify(
        self,
        events: tuple[NoteEvent, ...],
        on_finished: Callable[[], None] | None,
    ) -> None:
        try:
            count = self.run(events)
            log.info("Playback finished (%d events)", count)
        finally:
            self._wake.clear()
            self._playing.clear()
        if on_finished is not None:
            on_finished()


def _as_tuple(events: EventLog | Iterable[NoteEvent]) -> tuple[NoteEvent, ...]:
    if isinstance(events, EventLog):
        return events.snapshot()
    return tuple(events)
