"""Save a captured EventLog as a standard MIDI file via mido."""

from __future__ import annotations

import logging
from pathlib import Path

import mido

from .constants import DEFAULT_TEMPO_BPM, RECORDING_TICKS_PER_BEAT
from .errors import NoDataError, RecordingIOError
from .event_log import EventKind, EventLog

log = logging.getLogger(__name__)


def save_midi(
    event_log: EventLog,
    file_path: str | Path,
    tempo_bpm: float = DEFAULT_TEMPO_BPM,
) -> Path:
    """Save ``event_log`` as a Type 0 MIDI file.

    The tempo is metadata only: ticks are computed with the same tempo, so
    the file plays back at the captured speed.

    Raises
    ------
    NoDataError
        If the log is empty.
    RecordingIOError
        If the file cannot be written.
    """
    if event_log.is_empty():
        raise NoDataError("No notes recorded")

    mid = mido.MidiFile(ticks_per_beat=RECORDING_TICKS_PER_BEAT)
    track = mido.MidiTrack()
    mid.tracks.append(track)

    tempo = mido.bpm2tempo(tempo_bpm)
    track.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))

    prev_tick = 0
    for evt in event_log.snapshot():
        abs_tick = int(mido.second2tick(
            evt.timestamp_ms / 1000.0, RECORDING_TICKS_PER_BEAT, tempo,
        ))
        delta = max(0, abs_tick - prev_tick)
        if evt.kind is EventKind.NOTE_ON:
            track.append(mido.Message(
                "note_on", note=evt.pitch, velocity=evt.velocity, time=delta,
            ))
        else:
            track.append(mido.Message(
                "note_off", note=evt.pitch, velocity=0, time=delta,
            ))
        prev_tick = max(prev_tick, abs_tick)

    track.append(mido.MetaMessage("end_of_track", time=0))

    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        mid.save(str(path))
    except OSError as e:
        raise RecordingIOError(f"Failed to write {path}: {e}") from e
    log.info("Exported MIDI %s (%d events)", path, len(event_log))
    return path
