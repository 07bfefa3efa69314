"""Note sinks — where live key presses and replayed captures make sound.

``RtMidiSink`` sends to a system MIDI synthesizer via python-rtmidi (on
Windows typically the GS Wavetable Synth). The sink is an explicit handle
shared by live feedback and the playback scheduler; it serializes sends, and
when both drive the same pitch the last message wins.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

log = logging.getLogger(__name__)

_NOTE_ON = 0x90
_NOTE_OFF = 0x80
_CONTROL_CHANGE = 0xB0
_ALL_NOTES_OFF = 123


class NoteSink(Protocol):
    def note_on(self, pitch: int, velocity: int) -> None: ...

    def note_off(self, pitch: int) -> None: ...


class NullSink:
    """Silent sink used when no MIDI output is available."""

    def note_on(self, pitch: int, velocity: int) -> None:
        log.debug("note_on %d vel=%d (no output)", pitch, velocity)

    def note_off(self, pitch: int) -> None:
        log.debug("note_off %d (no output)", pitch)

    def close(self) -> None:
        pass


class RtMidiSink:
    """Send note messages to a MIDI output port."""

    def __init__(self, port_name: str = "", channel: int = 0) -> None:
        self._midi_out = None
        self._port_name: str = ""
        self._channel = channel & 0x0F
        self._lock = threading.Lock()
        self._open_port(port_name)

    @property
    def available(self) -> bool:
        return self._midi_out is not None

    @property
    def port_name(self) -> str:
        return self._port_name

    def _open_port(self, wanted: str) -> None:
        """Open ``wanted`` if present, else the first wavetable/GS port, else port 0."""
        try:
            import rtmidi

            out = rtmidi.MidiOut()
            ports = out.get_ports()
            if not ports:
                log.warning("No MIDI output ports available")
                out.delete()
                return
            target_idx = 0
            if wanted and wanted in ports:
                target_idx = ports.index(wanted)
            else:
                for i, name in enumerate(ports):
                    if "wavetable" in name.lower() or "gs" in name.lower():
                        target_idx = i
                        break
            out.open_port(target_idx)
            self._midi_out = out
            self._port_name = ports[target_idx]
            log.info("MIDI output opened: %s", self._port_name)
        except Exception:
            log.warning("Failed to open MIDI output port", exc_info=True)

    def _send(self, message: list[int]) -> None:
        with self._lock:
            if self._midi_out is None:
                return
            self._midi_out.send_message(message)

    def note_on(self, pitch: int, velocity: int) -> None:
        self._send([_NOTE_ON | self._channel, pitch & 0x7F, velocity & 0x7F])

    def note_off(self, pitch: int) -> None:
        self._send([_NOTE_OFF | self._channel, pitch & 0x7F, 0])

    def all_notes_off(self) -> None:
        self._send([_CONTROL_CHANGE | self._channel, _ALL_NOTES_OFF, 0])

    def close(self) -> None:
        if self._midi_out is None:
            return
        try:
            self.all_notes_off()
        except Exception:
            log.debug("all-notes-off failed during close", exc_info=True)
        with self._lock:
            try:
                self._midi_out.close_port()
                self._midi_out.delete()
            except Exception:
                log.debug("Error closing MIDI output", exc_info=True)
            self._midi_out = None


def open_default_sink(port_name: str = "") -> RtMidiSink | NullSink:
    """Return an open ``RtMidiSink``, or a ``NullSink`` if no port could be opened."""
    sink = RtMidiSink(port_name)
    if sink.available:
        return sink
    return NullSink()


class LiveFeedback:
    """Immediate audible response to key presses.

    Each press sounds until the key is released or ``hold_ms`` elapses,
    whichever comes first. This timer is independent of capture and replay.
    """

    def __init__(self, sink: NoteSink, hold_ms: int = 500) -> None:
        self._sink = sink
        self._hold_ms = hold_ms
        self._timers: dict[int, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def hold_ms(self) -> int:
        return self._hold_ms

    @property
    def sounding(self) -> set[int]:
        with self._lock:
            return set(self._timers)

    def press(self, pitch: int, velocity: int) -> None:
        with self._lock:
            old = self._timers.pop(pitch, None)
            if old is not None:
                old.cancel()
            timer = threading.Timer(self._hold_ms / 1000.0, self._expire, args=(pitch,))
            timer.daemon = True
            self._timers[pitch] = timer
        self._sink.note_on(pitch, velocity)
        timer.start()

    def release(self, pitch: int) -> None:
        with self._lock:
            timer = self._timers.pop(pitch, None)
        if timer is None:
            return
        timer.cancel()
        self._sink.note_off(pitch)

    def release_all(self) -> None:
        for pitch in self.sounding:
            self.release(pitch)

    def _expire(self, pitch: int) -> None:
        with self._lock:
            timer = self._timers.get(pitch)
            if timer is None or timer is not threading.current_thread():
                return
            del self._timers[pitch]
        self._sink.note_off(pitch)
