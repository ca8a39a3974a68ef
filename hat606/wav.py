from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Any, BinaryIO, Sequence

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray

from .errors import InvalidParamsError, OutputOpenError, WavWriteError

_LOGGER = logging.getLogger("hat606.wav")

AudioNumbers = NDArray[np.floating[Any]] | Sequence[float]

CHANNELS = 1
BITS_PER_SAMPLE = 24
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
BLOCK_ALIGN = CHANNELS * BYTES_PER_SAMPLE
PCM_FORMAT = 1
FMT_CHUNK_SIZE = 16
HEADER_SIZE = 44
PCM_MAX = 8_388_607  # 2**23 - 1
PCM_MIN = -8_388_608

# RIFF size and byte rate are unsigned 32-bit fields.
_UINT32_MAX = 2**32 - 1
MAX_SAMPLE_RATE = _UINT32_MAX // BLOCK_ALIGN
MAX_SAMPLES = (_UINT32_MAX - 36) // BLOCK_ALIGN

# RIFF size, "WAVE", "fmt " chunk, "data" size; all little-endian.
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def wav_header(num_samples: int, sample_rate: int) -> bytes:
    """Canonical 44-byte header for mono 24-bit PCM."""

    if not 0 <= num_samples <= MAX_SAMPLES:
        raise InvalidParamsError(
            f"num_samples must be in 0..{MAX_SAMPLES}, got {num_samples}"
        )
    if not 0 < sample_rate <= MAX_SAMPLE_RATE:
        raise InvalidParamsError(
            f"sample_rate must be in 1..{MAX_SAMPLE_RATE}, got {sample_rate}"
        )
    data_size = num_samples * BLOCK_ALIGN
    return _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        FMT_CHUNK_SIZE,
        PCM_FORMAT,
        CHANNELS,
        sample_rate,
        sample_rate * BLOCK_ALIGN,
        BLOCK_ALIGN,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


def quantize(audio: AudioNumbers) -> NDArray[np.int32]:
    """Clip to [-1, 1], scale to 24-bit and round half away from zero. NaN encodes as 0."""

    raw = np.nan_to_num(np.asarray(audio, dtype=np.float64).reshape(-1), nan=0.0)
    samples = np.clip(raw, -1.0, 1.0)
    scaled = samples * PCM_MAX
    rounded = np.sign(scaled) * np.floor(np.abs(scaled) + 0.5)
    return np.clip(rounded, PCM_MIN, PCM_MAX).astype(np.int32)


def encode_samples(audio: AudioNumbers) -> bytes:
    """Pack samples as 3-byte little-endian two's complement, low byte first."""

    ints = quantize(audio)
    # Low three bytes of each little-endian int32 are the 24-bit sample.
    as_bytes = ints.astype("<i4").view(np.uint8).reshape(-1, 4)
    return as_bytes[:, :BYTES_PER_SAMPLE].tobytes()


def write_wav24(sink: BinaryIO, audio: AudioNumbers, sample_rate: int) -> int:
    """Write header and samples sequentially to ``sink``; return bytes written.

    A failing write raises :class:`WavWriteError` straight away. Whatever was
    already written stays in the sink.
    """

    payload = encode_samples(audio)
    num_samples = len(payload) // BYTES_PER_SAMPLE
    written = 0
    for chunk in (wav_header(num_samples, sample_rate), payload):
        try:
            sink.write(chunk)
        except OSError as exc:
            raise WavWriteError(f"failed after {written} bytes: {exc}") from exc
        written += len(chunk)
    try:
        sink.flush()
    except OSError as exc:
        raise WavWriteError(f"failed to flush after {written} bytes: {exc}") from exc
    _LOGGER.debug("Wrote %s samples (%s bytes) @ %s Hz", num_samples, written, sample_rate)
    return written


def open_output(path: str | Path) -> BinaryIO:
    target = Path(path)
    try:
        return target.open("wb")
    except OSError as exc:
        raise OutputOpenError(f"Error opening file '{target}': {exc}") from exc


def save_wav24(path: str | Path, audio: AudioNumbers, sample_rate: int) -> Path:
    target = Path(path)
    with open_output(target) as handle:
        write_wav24(handle, audio, sample_rate)
    return target


def read_wav(path: str | Path) -> tuple[NDArray[np.float64], int]:
    """Decode a wav file to float64 mono samples in [-1, 1)."""

    # soundfile stubs are incomplete.
    data, sample_rate = sf.read(str(path), dtype="float64")  # type: ignore[reportUnknownMemberType]
    samples: NDArray[np.float64] = np.asarray(data, dtype=np.float64).reshape(-1)
    return samples, int(sample_rate)
