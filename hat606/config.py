from __future__ import annotations

import logging
import re

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .wav import MAX_SAMPLE_RATE, MAX_SAMPLES

_LOGGER = logging.getLogger("hat606.config")

SAMPLE_RATE = 48_000
DURATION = 2.0

# Prefix grammar strtod/atof accept: hex floats, then decimal, inf and nan.
_HEX_PREFIX = re.compile(
    r"[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?\d+)?",
    re.IGNORECASE,
)
_FLOAT_PREFIX = re.compile(
    r"""
    [+-]?
    (?:
        (?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?
      | inf(?:inity)?
      | nan
    )
    """,
    re.VERBOSE | re.IGNORECASE,
)


def parse_knob(text: str) -> float:
    """Parse a knob value the way C ``atof`` does.

    Leading whitespace is skipped and the longest numeric prefix wins; text
    with no numeric prefix parses to ``0.0`` instead of raising.
    """

    stripped = text.lstrip()
    hex_match = _HEX_PREFIX.match(stripped)
    if hex_match is not None:
        return float.fromhex(hex_match.group(0))
    match = _FLOAT_PREFIX.match(stripped)
    if match is None:
        _LOGGER.debug("No numeric prefix in %r; using 0.0", text)
        return 0.0
    return float(match.group(0))


class HatParams(BaseModel):
    """The four hi-hat knobs. Values outside 0..1 extrapolate, they are not errors."""

    tune: float = 0.5
    decay: float = 0.5
    level: float = 1.0
    open: float = 0.0

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def from_strings(cls, tune: str, decay: str, level: str, open: str) -> "HatParams":
        return cls(
            tune=parse_knob(tune),
            decay=parse_knob(decay),
            level=parse_knob(level),
            open=parse_knob(open),
        )


class RenderSettings(BaseModel):
    sample_rate: int = Field(default=SAMPLE_RATE, gt=0, le=MAX_SAMPLE_RATE)
    duration: float = Field(default=DURATION, gt=0, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _fits_wav_container(self) -> "RenderSettings":
        if self.num_samples > MAX_SAMPLES:
            raise ValueError(
                f"{self.num_samples} samples exceed the {MAX_SAMPLES}-sample limit of a wav file"
            )
        return self

    @property
    def num_samples(self) -> int:
        return int(self.sample_rate * self.duration)
