from __future__ import annotations

import math
import random
import sys

import pytest

from streamer.services import waveforms
from streamer.services.waveforms import MathFunction, evaluate

BOUNDED = [f for f in MathFunction if f is not MathFunction.IDENTITY]

EDGE_TIMES = [
    0.0,
    -0.0,
    -1e6,
    1e6,
    1e-300,
    sys.float_info.max,
    -sys.float_info.max,
    math.nan,
    math.inf,
    -math.inf,
]

BOUNDS = {
    MathFunction.SIN: (-1.0, 1.0),
    MathFunction.NOISE_SIN: (-1.0, 1.0 + waveforms.NOISE_AMPLITUDE),
    MathFunction.RANDOM_SPIKES_SIN: (
        -1.0,
        1.0 + waveforms.NOISE_AMPLITUDE + waveforms.SPIKE_AMPLITUDE,
    ),
    MathFunction.SAW: (-1.0, 1.0),
    MathFunction.RECT: (0.0, 1.0),
    MathFunction.SINC: (-0.22, 1.0),
    MathFunction.RANDOM: (waveforms.RANDOM_LOW, waveforms.RANDOM_HIGH),
    MathFunction.DEFAULT: (-1.2, 1.2),
}


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


@pytest.mark.parametrize("function", BOUNDED)
@pytest.mark.parametrize("t", EDGE_TIMES)
def test_bounded_functions_are_total(function: MathFunction, t: float) -> None:
    value = evaluate(function, t, random.Random(1))
    assert math.isfinite(value)
    low, high = BOUNDS[function]
    assert low <= value <= high


@pytest.mark.parametrize("function", BOUNDED)
def test_bounds_over_a_sweep(function: MathFunction) -> None:
    rng = random.Random(7)
    low, high = BOUNDS[function]
    for i in range(-2000, 2000):
        value = evaluate(function, i * 0.037, rng)
        assert low <= value <= high


def test_identity_is_unbounded_passthrough() -> None:
    assert evaluate(MathFunction.IDENTITY, 0.0) == 0.0
    assert evaluate(MathFunction.IDENTITY, -1e6) == -1e6
    assert evaluate(MathFunction.IDENTITY, 1e6) == 1e6
    assert evaluate(MathFunction.IDENTITY, math.inf) == math.inf


def test_sin() -> None:
    assert evaluate(MathFunction.SIN, math.pi / 2) == pytest.approx(1.0)


def test_saw_ramps_within_period() -> None:
    assert evaluate(MathFunction.SAW, 0.0) == pytest.approx(-1.0)
    assert evaluate(MathFunction.SAW, math.pi) == pytest.approx(0.0)
    assert evaluate(MathFunction.SAW, 2 * math.pi + math.pi / 2) == pytest.approx(-0.5)
    assert evaluate(MathFunction.SAW, -math.pi / 2) == pytest.approx(0.5)


def test_rect_alternates_between_two_levels() -> None:
    assert evaluate(MathFunction.RECT, math.pi / 2) == 0.0
    assert evaluate(MathFunction.RECT, 3 * math.pi / 2) == 1.0
    assert evaluate(MathFunction.RECT, -math.pi / 2) == 1.0


def test_sinc_peak_at_zero() -> None:
    assert evaluate(MathFunction.SINC, 0.0) == 1.0
    assert evaluate(MathFunction.SINC, 1.0) == pytest.approx(0.0, abs=1e-12)
    assert evaluate(MathFunction.SINC, 0.5) == pytest.approx(2 / math.pi)
    assert evaluate(MathFunction.SINC, 20.0) == 1.0


def test_default_is_square_wave_approximation() -> None:
    expected = 4 / math.pi * (1 - 1 / 3 + 1 / 5 - 1 / 7)
    assert evaluate(MathFunction.DEFAULT, math.pi / 2) == pytest.approx(expected)
    assert evaluate(MathFunction.DEFAULT, -math.pi / 2) == pytest.approx(-expected)


@pytest.mark.parametrize("t", [3e307, 1e308, -1e308, sys.float_info.max])
def test_default_survives_huge_times(t: float) -> None:
    value = evaluate(MathFunction.DEFAULT, t)
    assert math.isfinite(value)
    assert -1.2 <= value <= 1.2
    assert value == pytest.approx(evaluate(MathFunction.DEFAULT, math.fmod(t, 2 * math.pi)))


@pytest.mark.parametrize(
    "function",
    [MathFunction.NOISE_SIN, MathFunction.RANDOM_SPIKES_SIN, MathFunction.RANDOM],
)
def test_random_variants_reproducible_with_seed(function: MathFunction) -> None:
    a = [evaluate(function, t * 0.1, random.Random(42)) for t in range(50)]
    b = [evaluate(function, t * 0.1, random.Random(42)) for t in range(50)]
    assert a == b


def test_noise_sin_adds_bounded_noise() -> None:
    assert evaluate(MathFunction.NOISE_SIN, 0.0, FixedRandom(0.5)) == pytest.approx(
        0.5 * waveforms.NOISE_AMPLITUDE
    )


def test_random_spikes() -> None:
    t = math.pi / 2
    spike = evaluate(MathFunction.RANDOM_SPIKES_SIN, t, FixedRandom(0.0))
    assert spike == pytest.approx(1.0 + waveforms.SPIKE_AMPLITUDE)
    calm = evaluate(MathFunction.RANDOM_SPIKES_SIN, t, FixedRandom(0.5))
    assert calm == pytest.approx(1.0 + 0.5 * waveforms.NOISE_AMPLITUDE)


def test_random_in_range() -> None:
    rng = random.Random(3)
    values = [evaluate(MathFunction.RANDOM, 0.0, rng) for _ in range(1000)]
    assert all(waveforms.RANDOM_LOW <= v < waveforms.RANDOM_HIGH for v in values)
    assert len(set(values)) > 900


@pytest.mark.parametrize(
    "text, expected",
    [
        ("sin", MathFunction.SIN),
        ("NoiseSin", MathFunction.NOISE_SIN),
        ("random-spikes-sin", MathFunction.RANDOM_SPIKES_SIN),
        ("x", MathFunction.IDENTITY),
        ("DEFAULT", MathFunction.DEFAULT),
    ],
)
def test_parse(text: str, expected: MathFunction) -> None:
    assert MathFunction.parse(text) is expected


def test_parse_unknown() -> None:
    with pytest.raises(ValueError):
        MathFunction.parse("cosine")
