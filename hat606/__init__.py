from __future__ import annotations

from .config import DURATION, SAMPLE_RATE, HatParams, RenderSettings, parse_knob
from .errors import (
    BufferAllocationError,
    Hat606Error,
    InvalidParamsError,
    OutputOpenError,
    WavWriteError,
)
from .logging_utils import configure_logging as _configure_logging
from .synth import (
    BASE_FREQS,
    amplitude_envelope,
    decay_samples,
    freq_scale,
    generate_hat,
    oscillator_freqs,
    square_cluster,
    synthesize,
)
from .wav import encode_samples, read_wav, save_wav24, wav_header, write_wav24

__all__ = [
    "BASE_FREQS",
    "DURATION",
    "SAMPLE_RATE",
    "BufferAllocationError",
    "Hat606Error",
    "HatParams",
    "InvalidParamsError",
    "OutputOpenError",
    "RenderSettings",
    "WavWriteError",
    "amplitude_envelope",
    "decay_samples",
    "encode_samples",
    "freq_scale",
    "generate_hat",
    "oscillator_freqs",
    "parse_knob",
    "read_wav",
    "save_wav24",
    "square_cluster",
    "synthesize",
    "wav_header",
    "write_wav24",
]

_configure_logging()
del _configure_logging
