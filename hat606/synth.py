"""
Six-oscillator square "swarm" hi-hat, in the style of the 606.

1. Envelope: instant attack, linear decay over ``decay_samples``, then silence
2. Oscillators: six detuned square waves, averaged
3. Voice: oscillators x envelope x level
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

from .config import HatParams
from .errors import BufferAllocationError, InvalidParamsError

_LOGGER = logging.getLogger("hat606.synth")

FloatArray: TypeAlias = NDArray[np.float64]

TWO_PI = 2.0 * math.pi

# Close-together cluster; each is scaled by the tune knob.
BASE_FREQS: tuple[float, ...] = (452.0, 539.0, 645.0, 750.0, 851.0, 946.0)

MIN_DECAY = 0.04  # seconds, closed hat at decay=0
MAX_DECAY = 0.4  # seconds, at decay=1
OPEN_EXTENSION = 1.5  # open=1 stretches the decay 2.5x


# =============================================================================
# PARAMETER MAPPINGS
# =============================================================================


def decay_time(params: HatParams) -> float:
    """Base decay time in seconds (linear, unclamped)."""
    return MIN_DECAY + (MAX_DECAY - MIN_DECAY) * params.decay


def final_decay_time(params: HatParams) -> float:
    return decay_time(params) * (1.0 + params.open * OPEN_EXTENSION)


def decay_samples(params: HatParams, sample_rate: float) -> int:
    """Envelope length in whole samples. Negative decay times collapse to 0."""
    total = final_decay_time(params) * sample_rate
    if not math.isfinite(total):
        raise InvalidParamsError(f"decay/open produce a non-finite decay length: {total}")
    return max(0, math.floor(total))


def freq_scale(params: HatParams) -> float:
    """0.8x at tune=0, unity at tune=0.5, 1.2x at tune=1."""
    return 0.8 + 0.4 * params.tune


def oscillator_freqs(params: HatParams) -> tuple[float, ...]:
    scale = freq_scale(params)
    return tuple(base * scale for base in BASE_FREQS)


# =============================================================================
# PRIMITIVES
# =============================================================================


def _allocate(num_samples: int) -> FloatArray:
    try:
        return np.zeros(num_samples, dtype=np.float64)
    except MemoryError as exc:
        raise BufferAllocationError(f"cannot allocate {num_samples} samples") from exc


def amplitude_envelope(decay_len: int, num_samples: int) -> FloatArray:
    """Envelope value applied at each sample index.

    Starts at 1.0 and steps down by ``1/decay_len`` per sample while the index
    is inside the decay window, floored at 0. From index ``decay_len`` onward
    it is exactly 0. With ``decay_len == 0`` only the first sample is audible.
    """

    envelope = _allocate(num_samples)
    rate = 1.0 / decay_len if decay_len > 0 else 1.0
    amp = 1.0
    for n in range(num_samples):
        envelope[n] = amp
        if n + 1 == decay_len:
            # The window always ends on exact silence.
            amp = 0.0
        elif n < decay_len:
            amp -= rate
            if amp < 0.0:
                amp = 0.0
        else:
            amp = 0.0
    return envelope


def square_cluster(freqs: Sequence[float], sample_rate: float, num_samples: int) -> FloatArray:
    """Average of one square oscillator per frequency, all starting at phase 0.

    Each phase is advanced before it is sampled and wrapped by subtracting
    2*pi once. That single subtraction only keeps the phase in range while the
    per-sample increment stays below 2*pi.
    """

    increments = [TWO_PI * freq / sample_rate for freq in freqs]
    too_fast = [freq for freq, inc in zip(freqs, increments) if inc >= TWO_PI]
    if too_fast:
        _LOGGER.warning(
            "Oscillator frequencies %s are at or above the sample rate %s; "
            "phase wrap will drift",
            too_fast,
            sample_rate,
        )

    out = _allocate(num_samples)
    if not increments:
        return out
    phases = [0.0] * len(increments)
    count = float(len(increments))
    for n in range(num_samples):
        total = 0.0
        for i, inc in enumerate(increments):
            phase = phases[i] + inc
            if phase > TWO_PI:
                phase -= TWO_PI
            phases[i] = phase
            total += 1.0 if math.sin(phase) >= 0.0 else -1.0
        out[n] = total / count
    return out


# =============================================================================
# VOICE
# =============================================================================


def generate_hat(params: HatParams, sample_rate: float, num_samples: int) -> FloatArray:
    """Render one hi-hat hit into a fresh buffer of ``num_samples`` floats."""

    if sample_rate <= 0:
        raise InvalidParamsError(f"sample_rate must be positive, got {sample_rate}")
    if num_samples < 0:
        raise InvalidParamsError(f"num_samples must be >= 0, got {num_samples}")

    decay_len = decay_samples(params, sample_rate)
    freqs = oscillator_freqs(params)
    if not all(math.isfinite(freq) for freq in freqs):
        raise InvalidParamsError(f"tune={params.tune} gives non-finite oscillator frequencies")
    _LOGGER.debug(
        "Rendering hat: %s samples @ %s Hz, decay=%s samples, freqs=%s",
        num_samples,
        sample_rate,
        decay_len,
        [round(freq, 2) for freq in freqs],
    )

    cluster = square_cluster(freqs, sample_rate, num_samples)
    envelope = amplitude_envelope(decay_len, num_samples)
    return cluster * (envelope * params.level)


synthesize = generate_hat
