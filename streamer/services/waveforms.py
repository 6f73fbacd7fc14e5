"""Waveforms used to synthesize sample values.

Every function maps an elapsed time ``t`` (seconds) to a float. The random
variants draw from an injectable ``random.Random`` so tests can seed them.

All variants except ``x`` (identity) are bounded:

=================  ===========================================
sin                [-1, 1]
noisesin           [-1, 1 + NOISE_AMPLITUDE)
randomspikessin    [-1, 1 + NOISE_AMPLITUDE + SPIKE_AMPLITUDE)
saw                [-1, 1]
rect               {0, 1}
sinc               [-0.22, 1]
random             [RANDOM_LOW, RANDOM_HIGH)
default            [-1.2, 1.2]
=================  ===========================================
"""

from __future__ import annotations

import math
import random
from enum import Enum
from typing import Callable

NOISE_AMPLITUDE = 1.0
SPIKE_PROBABILITY = 0.001
SPIKE_AMPLITUDE = 100.0
RANDOM_LOW = 0.0
RANDOM_HIGH = 1.0
SINC_HALF_WIDTH = 10.0

TWO_PI = 2.0 * math.pi

_default_rng = random.Random()


class MathFunction(str, Enum):
    SIN = "sin"
    NOISE_SIN = "noisesin"
    RANDOM_SPIKES_SIN = "randomspikessin"
    SAW = "saw"
    RECT = "rect"
    SINC = "sinc"
    RANDOM = "random"
    IDENTITY = "x"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: str) -> MathFunction:
        normalized = value.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
        return cls(normalized)


def _sin(t: float, rng: random.Random) -> float:
    return math.sin(t)


def _noise_sin(t: float, rng: random.Random) -> float:
    return math.sin(t) + rng.random() * NOISE_AMPLITUDE


def _random_spikes_sin(t: float, rng: random.Random) -> float:
    value = _noise_sin(t, rng)
    if rng.random() < SPIKE_PROBABILITY:
        return value + SPIKE_AMPLITUDE
    return value


def _saw(t: float, rng: random.Random) -> float:
    return (t % TWO_PI - math.pi) / math.pi


def _rect(t: float, rng: random.Random) -> float:
    return 1.0 if t % TWO_PI > math.pi else 0.0


def _sinc(t: float, rng: random.Random) -> float:
    period = 2.0 * SINC_HALF_WIDTH
    x = (t + SINC_HALF_WIDTH) % period - SINC_HALF_WIDTH
    if x == 0.0:
        return 1.0
    return math.sin(math.pi * x) / (math.pi * x)


def _random(t: float, rng: random.Random) -> float:
    return rng.uniform(RANDOM_LOW, RANDOM_HIGH)


def _default(t: float, rng: random.Random) -> float:
    # Square wave, first four odd harmonics. Reduce first so k * t cannot overflow.
    t = math.fmod(t, TWO_PI)
    return 4.0 / math.pi * sum(math.sin(k * t) / k for k in (1, 3, 5, 7))


_FUNCTIONS: dict[MathFunction, Callable[[float, random.Random], float]] = {
    MathFunction.SIN: _sin,
    MathFunction.NOISE_SIN: _noise_sin,
    MathFunction.RANDOM_SPIKES_SIN: _random_spikes_sin,
    MathFunction.SAW: _saw,
    MathFunction.RECT: _rect,
    MathFunction.SINC: _sinc,
    MathFunction.RANDOM: _random,
    MathFunction.DEFAULT: _default,
}


def evaluate(function: MathFunction, t: float, rng: random.Random | None = None) -> float:
    if function is MathFunction.IDENTITY:
        return t
    if not math.isfinite(t):
        t = 0.0
    return _FUNCTIONS[function](t, rng or _default_rng)
