"""Audio format, MIDI range, and capture defaults."""

# Rendered audio format (fixed regardless of input)
SAMPLE_RATE = 44100
BITS_PER_SAMPLE = 16
CHANNEL_COUNT = 1
MAX_AMPLITUDE = 32767
SAMPLE_MIN = -32768
SAMPLE_MAX = 32767

RECORDING_EXTENSION = ".wav"
RECORDING_PREFIX = "recording_"
RECORDING_TIME_FORMAT = "%Y%m%d_%H%M%S"

# MIDI
MIDI_NOTE_MIN = 0
MIDI_NOTE_MAX = 127
MIDI_VELOCITY_MAX = 127
A4_NOTE = 69
A4_FREQ = 440.0

# Keyboard (C3 upward, three octaves)
KEYBOARD_BASE_NOTE = 48
KEYBOARD_OCTAVES = 3

# Capture / live feedback
DEFAULT_VELOCITY = 100
DEFAULT_HOLD_MS = 500

# Tempo (informational only)
DEFAULT_TEMPO_BPM = 120
MIN_TEMPO_BPM = 1
MAX_TEMPO_BPM = 300
RECORDING_TICKS_PER_BEAT = 480
