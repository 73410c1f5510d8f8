"""Poisson variate generation using Knuth's multiplicative method.

The random source is always injected. Anything exposing numpy's
``Generator.random(size=None)`` signature works; ``make_rng`` builds a
seeded numpy generator.
"""

import math
from typing import Protocol

import numpy as np

# exp(-rate) underflows to 0.0 just above 745. Larger rates are drawn as a
# sum of independent Poisson variates, each with a rate no larger than this.
KNUTH_CHUNK_RATE = 500.0


class RandomSource(Protocol):
    """Uniform [0, 1) source."""

    def random(self, size=None): ...


def make_rng(seed=None) -> np.random.Generator:
    """Create a numpy generator. ``seed`` may be an int, a sequence of ints or None."""
    return np.random.default_rng(seed)


def _check_rate(rate: float) -> None:
    if not math.isfinite(rate) or rate < 0:
        raise ValueError(f"Poisson rate must be finite and >= 0, got {rate}")


def _chunks(rate: float) -> list[float]:
    """Split rate into equal parts no larger than KNUTH_CHUNK_RATE."""
    parts = max(1, math.ceil(rate / KNUTH_CHUNK_RATE))
    return [rate / parts] * parts


def _knuth(rate: float, rng: RandomSource) -> int:
    threshold = math.exp(-rate)
    accumulator = 1.0
    k = 0
    while True:
        k += 1
        accumulator *= rng.random()
        if accumulator <= threshold:
            return k - 1


def _knuth_array(rate: float, size: int, rng: RandomSource) -> np.ndarray:
    threshold = math.exp(-rate)
    counts = np.zeros(size, dtype=np.int64)
    accumulator = np.ones(size, dtype=np.float64)
    active = np.arange(size)

    while active.size:
        accumulator[active] *= rng.random(active.size)
        counts[active] += 1
        active = active[accumulator[active] > threshold]

    return counts - 1


def sample_poisson(rate: float, rng: RandomSource) -> int:
    """Draw one Poisson(rate) variate.

    Multiplies uniform draws into an accumulator until it falls to
    exp(-rate) or below; the variate is the number of multiplications
    minus one. A zero rate returns 0 without touching ``rng``.

    Raises:
        ValueError: If rate is negative or non-finite
    """
    _check_rate(rate)
    if rate == 0:
        return 0
    return sum(_knuth(part, rng) for part in _chunks(rate))


def sample_poisson_array(rate: float, size: int, rng: RandomSource) -> np.ndarray:
    """Draw ``size`` independent Poisson(rate) variates with Knuth's method.

    Each slot runs its own accumulator; on every round only the slots still
    above the threshold consume a fresh uniform.

    Args:
        rate: Poisson mean (>= 0)
        size: Number of variates
        rng: Uniform source

    Returns:
        Integer array of shape (size,)
    """
    _check_rate(rate)
    if size < 0:
        raise ValueError(f"size must be >= 0, got {size}")

    if rate == 0 or size == 0:
        return np.zeros(size, dtype=np.int64)

    counts = np.zeros(size, dtype=np.int64)
    for part in _chunks(rate):
        counts += _knuth_array(part, size, rng)
    return counts
