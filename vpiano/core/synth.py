"""Sine-wave tone synthesis for offline rendering.

Uses only ``math`` from the standard library. Output is a pure function of
(pitch, velocity, duration, sample rate) so renders are reproducible.
"""

from __future__ import annotations

import math

from .constants import (
    A4_FREQ,
    A4_NOTE,
    MAX_AMPLITUDE,
    MIDI_VELOCITY_MAX,
    SAMPLE_MAX,
    SAMPLE_MIN,
    SAMPLE_RATE,
)


def midi_to_freq(midi_note: int) -> float:
    """Convert MIDI note number to frequency in Hz (A4 = 440 Hz)."""
    return float(A4_FREQ * (2.0 ** ((midi_note - A4_NOTE) / 12.0)))


def sample_count(duration_ms: float, sample_rate: int = SAMPLE_RATE) -> int:
    """Number of samples covering ``duration_ms``; 0 for non-positive durations."""
    if duration_ms <= 0:
        return 0
    return round(duration_ms * sample_rate / 1000.0)


def _clip(value: int) -> int:
    return max(SAMPLE_MIN, min(SAMPLE_MAX, value))


def synthesize_tone(
    pitch: int,
    velocity: int,
    duration_ms: float,
    sample_rate: int = SAMPLE_RATE,
) -> list[int]:
    """Generate a 16-bit sine tone for one note.

    Parameters
    ----------
    pitch : int
        MIDI note number.
    velocity : int
        0-127, scales the peak amplitude linearly.
    duration_ms : float
        Note length in milliseconds. Non-positive yields no samples.
    sample_rate : int
        Output sample rate in Hz.

    Returns
    -------
    list[int]
        Signed 16-bit sample values.
    """
    num_samples = sample_count(duration_ms, sample_rate)
    if num_samples == 0:
        return []

    freq = midi_to_freq(pitch)
    samples: list[int] = []
    for i in range(num_samples):
        angle = 2.0 * math.pi * i * freq / sample_rate
        val = MAX_AMPLITUDE * math.sin(angle) * velocity / MIDI_VELOCITY_MAX
        samples.append(_clip(round(val)))
    return samples
