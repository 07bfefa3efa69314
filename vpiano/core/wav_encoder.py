"""16-bit PCM WAV encoding and header parsing.

Headers are packed with ``struct``. Files are written to a temporary sibling
and moved into place, so a reader never sees a half-written recording.
"""

from __future__ import annotations

import logging
import os
import struct
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .errors import RecordingIOError
from .renderer import RenderedAudio

log = logging.getLogger(__name__)

HEADER_SIZE = 44
_PCM_FORMAT = 1
_FMT_CHUNK_SIZE = 16

# RIFF/WAVE header, little-endian throughout
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def _file_mode() -> int:
    """Mode a plain ``open(path, "w")`` would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class WavFormatError(ValueError):
    """Data does not start with a canonical PCM WAV header."""


@dataclass(frozen=True, slots=True)
class WavHeader:
    """Fields of the canonical 44-byte header."""

    file_size: int
    channel_count: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def sample_count(self) -> int:
        return self.data_size // self.block_align if self.block_align else 0


def _build_header(
    num_samples: int,
    sample_rate: int,
    num_channels: int,
    bits_per_sample: int,
) -> bytes:
    byte_rate = sample_rate * num_channels * bits_per_sample // 8
    block_align = num_channels * bits_per_sample // 8
    data_size = num_samples * block_align

    return _HEADER.pack(
        b"RIFF", data_size + 36, b"WAVE",
        b"fmt ", _FMT_CHUNK_SIZE, _PCM_FORMAT, num_channels,
        sample_rate, byte_rate, block_align, bits_per_sample,
        b"data", data_size,
    )


def encode_wav(audio: RenderedAudio) -> bytes:
    """Serialize ``audio`` into WAV bytes (header + little-endian samples)."""
    header = _build_header(
        audio.sample_count,
        audio.sample_rate,
        audio.channel_count,
        audio.bits_per_sample,
    )
    data = struct.pack(f"<{audio.sample_count}h", *audio.samples)
    return header + data


def write_wav(audio: RenderedAudio, output_path: str | Path) -> Path:
    """Write ``audio`` to ``output_path`` atomically.

    Raises
    ------
    RecordingIOError
        If the directory or file cannot be created or written. No file is
        left at ``output_path`` in that case.
    """
    output_path = Path(output_path)
    payload = encode_wav(audio)
    tmp_name: str | None = None
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_path.stem}-", suffix=".tmp", dir=output_path.parent,
        )
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600
        os.chmod(tmp_name, _file_mode())
        os.replace(tmp_name, output_path)
    except OSError as e:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            except OSError:
                log.warning("Could not remove temp file %s", tmp_name, exc_info=True)
        raise RecordingIOError(f"Failed to write {output_path}: {e}") from e

    log.info("Wrote %s (%d bytes)", output_path, len(payload))
    return output_path


def read_wav_header(source: bytes | str | Path) -> WavHeader:
    """Parse the 44-byte header from raw bytes or a file path."""
    if isinstance(source, (bytes, bytearray)):
        raw = bytes(source[:HEADER_SIZE])
    else:
        with open(source, "rb") as f:
            raw = f.read(HEADER_SIZE)

    if len(raw) < HEADER_SIZE:
        raise WavFormatError(f"header too short: {len(raw)} bytes")

    (riff, file_size, wave, fmt, fmt_size, audio_format, channels,
     sample_rate, byte_rate, block_align, bits, data_id, data_size) = _HEADER.unpack(raw)

    if riff != b"RIFF" or wave != b"WAVE":
        raise WavFormatError("not a RIFF/WAVE file")
    if fmt != b"fmt " or fmt_size != _FMT_CHUNK_SIZE or audio_format != _PCM_FORMAT:
        raise WavFormatError("unsupported fmt chunk")
    if data_id != b"data":
        raise WavFormatError("missing data chunk")

    return WavHeader(
        file_size=file_size,
        channel_count=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_size=data_size,
    )
