from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from hat606.config import DURATION, SAMPLE_RATE, HatParams, RenderSettings, parse_knob


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0.5", 0.5),
        ("  0.25", 0.25),
        ("0.5abc", 0.5),
        ("abc", 0.0),
        ("", 0.0),
        ("-1.5", -1.5),
        ("+2", 2.0),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e-1x", 0.1),
        ("1e", 1.0),
        ("-", 0.0),
    ],
)
def test_parse_knob_matches_atof(text: str, expected: float) -> None:
    assert parse_knob(text) == pytest.approx(expected)


def test_parse_knob_special_values() -> None:
    assert parse_knob("inf") == math.inf
    assert parse_knob("-Infinity") == -math.inf
    assert math.isnan(parse_knob("nan"))


def test_hat_params_defaults() -> None:
    params = HatParams()
    assert (params.tune, params.decay, params.level, params.open) == (0.5, 0.5, 1.0, 0.0)


def test_hat_params_are_frozen() -> None:
    params = HatParams()
    with pytest.raises(ValidationError):
        params.tune = 0.1  # type: ignore[misc]


def test_hat_params_accept_out_of_range_values() -> None:
    params = HatParams(tune=-1.0, decay=3.0, level=2.0, open=-0.5)
    assert params.decay == 3.0
    assert params.level == 2.0


def test_hat_params_reject_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        HatParams.model_validate({"tune": 0.5, "resonance": 1.0})


def test_hat_params_from_strings_degrades_to_zero() -> None:
    params = HatParams.from_strings("0.7", "junk", "1", "0.3x")
    assert params.tune == pytest.approx(0.7)
    assert params.decay == 0.0
    assert params.level == 1.0
    assert params.open == pytest.approx(0.3)


def test_render_settings_default_length() -> None:
    settings = RenderSettings()
    assert settings.sample_rate == SAMPLE_RATE == 48_000
    assert settings.duration == DURATION == 2.0
    assert settings.num_samples == 96_000


def test_render_settings_reject_non_positive_rate() -> None:
    with pytest.raises(ValidationError):
        RenderSettings(sample_rate=0)
    with pytest.raises(ValidationError):
        RenderSettings(duration=-1.0)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0x10", 16.0),
        ("0x1p-1", 0.5),
        ("-0x.8", -0.5),
        ("0X1.8P1junk", 3.0),
        ("0x", 0.0),
        ("0xg", 0.0),
    ],
)
def test_parse_knob_accepts_hex_floats(text: str, expected: float) -> None:
    assert parse_knob(text) == expected


def test_render_settings_reject_lengths_beyond_wav_limits() -> None:
    with pytest.raises(ValidationError):
        RenderSettings(duration=1e6)
    with pytest.raises(ValidationError):
        RenderSettings(sample_rate=2**31)
    with pytest.raises(ValidationError):
        RenderSettings(duration=float("inf"))
