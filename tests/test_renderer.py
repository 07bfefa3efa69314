"""Tests for note pairing and full-log rendering."""

import pytest

from vpiano.core.errors import NoDataError
from vpiano.core.event_log import EventLog, NoteEvent
from vpiano.core.renderer import PairedNote, RenderedAudio, pair_notes, render
from vpiano.core.synth import synthesize_tone


def _log(*events: NoteEvent) -> EventLog:
    return EventLog.from_events(list(events))


class TestPairNotes:
    def test_simple_pair(self):
        notes = pair_notes([NoteEvent.note_on(60, 100, 0), NoteEvent.note_off(60, 300)])
        assert notes == [PairedNote(60, 100, 0, 300)]

    def test_order_follows_note_on(self):
        notes = pair_notes([
            NoteEvent.note_on(60, 100, 0),
            NoteEvent.note_on(64, 90, 100),
            NoteEvent.note_off(64, 200),
            NoteEvent.note_off(60, 400),
        ])
        assert [(n.pitch, n.duration_ms) for n in notes] == [(60, 400), (64, 100)]

    def test_fifo_per_pitch(self):
        notes = pair_notes([
            NoteEvent.note_on(60, 100, 0),
            NoteEvent.note_on(60, 80, 50),
            NoteEvent.note_off(60, 200),
            NoteEvent.note_off(60, 260),
        ])
        assert [(n.velocity, n.start_ms, n.duration_ms) for n in notes] == [
            (100, 0, 200),
            (80, 50, 210),
        ]

    def test_trailing_note_on_closed_at_last_timestamp(self):
        notes = pair_notes([
            NoteEvent.note_on(60, 100, 0),
            NoteEvent.note_on(62, 100, 100),
            NoteEvent.note_off(60, 700),
        ])
        assert notes[1] == PairedNote(62, 100, 100, 600)

    def test_lone_note_on_has_zero_duration(self):
        assert pair_notes([NoteEvent.note_on(60, 100, 40)]) == [PairedNote(60, 100, 40, 0)]

    def test_unmatched_note_off_dropped(self):
        notes = pair_notes([
            NoteEvent.note_off(61, 0),
            NoteEvent.note_on(60, 100, 10),
            NoteEvent.note_off(60, 20),
        ])
        assert [n.pitch for n in notes] == [60]

    def test_empty(self):
        assert pair_notes([]) == []


class TestRender:
    def test_empty_log_raises(self):
        with pytest.raises(NoDataError):
            render(EventLog.from_events([]))

    def test_only_note_offs_raises(self):
        with pytest.raises(NoDataError):
            render(_log(NoteEvent.note_off(60, 0)))

    def test_a4_half_second(self):
        audio = render(_log(NoteEvent.note_on(69, 127, 0), NoteEvent.note_off(69, 500)))
        assert isinstance(audio, RenderedAudio)
        assert audio.sample_count == 22050
        assert all(-32768 <= s <= 32767 for s in audio.samples)
        assert audio.samples[0] == 0
        # 2205 samples = 22 full periods of 440 Hz, where sin(...) == 0
        assert audio.samples[2205] == 0
        assert audio.duration_ms == pytest.approx(500.0)

    def test_fixed_format(self):
        audio = render(_log(NoteEvent.note_on(60, 100, 0), NoteEvent.note_off(60, 10)))
        assert (audio.sample_rate, audio.bits_per_sample, audio.channel_count) == (44100, 16, 1)

    def test_sequential_concatenation(self):
        audio = render(_log(
            NoteEvent.note_on(60, 100, 0),
            NoteEvent.note_on(67, 90, 100),
            NoteEvent.note_off(60, 200),
            NoteEvent.note_off(67, 300),
        ))
        first = synthesize_tone(60, 100, 200)
        second = synthesize_tone(67, 90, 200)
        assert list(audio.samples) == first + second

    def test_gaps_are_not_rendered(self):
        audio = render(_log(
            NoteEvent.note_on(60, 100, 0),
            NoteEvent.note_off(60, 100),
            NoteEvent.note_on(62, 100, 900),
            NoteEvent.note_off(62, 1000),
        ))
        assert audio.sample_count == 2 * 4410

    def test_samples_immutable(self):
        audio = render(_log(NoteEvent.note_on(60, 100, 0), NoteEvent.note_off(60, 10)))
        assert isinstance(audio.samples, tuple)
