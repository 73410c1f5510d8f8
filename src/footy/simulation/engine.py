"""Monte Carlo kernel for the compound half-market.

The market settles as a win when, in the same match:
- the first half has fewer than 3.5 goals,
- the second half has fewer than 3.5 goals,
- the designated team outscores its opponent in at least one half,
- the match has more than 5.5 corners.
"""

import math
import numbers
from dataclasses import dataclass
from enum import Enum

import numpy as np

from footy.errors import InvalidParameterError
from footy.simulation.sampler import RandomSource, make_rng, sample_poisson_array

DEFAULT_ITERATIONS = 20000


class Orientation(str, Enum):
    """Which side is evaluated for the wins-a-half leg."""

    DESIGNATED_IS_HOME = "home"
    DESIGNATED_IS_AWAY = "away"


@dataclass(frozen=True)
class MatchParameters:
    """Full-match expected counts for both sides (not per half)."""

    home_expected_goals: float
    away_expected_goals: float
    home_expected_corners: float
    away_expected_corners: float

    def __post_init__(self):
        for name in (
            "home_expected_goals",
            "away_expected_goals",
            "home_expected_corners",
            "away_expected_corners",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameterError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise InvalidParameterError(f"{name} must be finite and > 0, got {value}")


@dataclass(frozen=True)
class SimulationResult:
    """Probability estimate for one (parameters, orientation) pair."""

    probability: float
    iterations: int


@dataclass(frozen=True)
class SimulationSettings:
    """Tunable constants of the simulator."""

    iterations: int = DEFAULT_ITERATIONS
    first_half_share: float = 0.45  # first halves produce fewer goals
    goals_line: float = 3.5
    corners_line: float = 5.5

    @property
    def second_half_share(self) -> float:
        return 1.0 - self.first_half_share

    @classmethod
    def from_config(cls, config) -> "SimulationSettings":
        return cls(
            iterations=config.sim_iterations,
            first_half_share=config.first_half_goal_share,
            goals_line=config.under_goals_line,
            corners_line=config.over_corners_line,
        )


@dataclass
class HalfScores:
    """Sampled goals per half, one slot per iteration."""

    home_h1: np.ndarray
    away_h1: np.ndarray
    home_h2: np.ndarray
    away_h2: np.ndarray
    corners: np.ndarray


def _draw(
    params: MatchParameters,
    settings: SimulationSettings,
    iterations: int,
    rng: RandomSource,
) -> HalfScores:
    """Sample goals per half and total corners for every iteration."""
    first = settings.first_half_share
    second = settings.second_half_share

    home_h1 = sample_poisson_array(params.home_expected_goals * first, iterations, rng)
    away_h1 = sample_poisson_array(params.away_expected_goals * first, iterations, rng)
    home_h2 = sample_poisson_array(params.home_expected_goals * second, iterations, rng)
    away_h2 = sample_poisson_array(params.away_expected_goals * second, iterations, rng)

    # Corners use the full-match rates directly
    corners = sample_poisson_array(
        params.home_expected_corners, iterations, rng
    ) + sample_poisson_array(params.away_expected_corners, iterations, rng)

    return HalfScores(
        home_h1=home_h1,
        away_h1=away_h1,
        home_h2=home_h2,
        away_h2=away_h2,
        corners=corners,
    )


def _successes(
    scores: HalfScores,
    orientation: Orientation,
    settings: SimulationSettings,
) -> np.ndarray:
    """Boolean mask of iterations where all four legs hold."""
    under_h1 = (scores.home_h1 + scores.away_h1) < settings.goals_line
    under_h2 = (scores.home_h2 + scores.away_h2) < settings.goals_line

    if orientation is Orientation.DESIGNATED_IS_HOME:
        wins_half = (scores.home_h1 > scores.away_h1) | (scores.home_h2 > scores.away_h2)
    else:
        wins_half = (scores.away_h1 > scores.home_h1) | (scores.away_h2 > scores.home_h2)

    over_corners = scores.corners > settings.corners_line

    return under_h1 & under_h2 & wins_half & over_corners


def simulate(
    params: MatchParameters,
    orientation: Orientation,
    iterations: int | None = None,
    rng: RandomSource | None = None,
    settings: SimulationSettings | None = None,
) -> SimulationResult:
    """Estimate the compound-market probability for one orientation.

    Args:
        params: Full-match expected goals and corners
        orientation: Designated side for the wins-a-half leg
        iterations: Number of trials (None = settings.iterations)
        rng: Uniform source; pass a seeded generator for reproducible output
        settings: Simulator constants (None = defaults)

    Returns:
        SimulationResult with successes / iterations

    Raises:
        InvalidParameterError: If iterations is not a positive integer
    """
    if settings is None:
        settings = SimulationSettings()
    if iterations is None:
        iterations = settings.iterations
    if (
        isinstance(iterations, bool)
        or not isinstance(iterations, numbers.Integral)
        or iterations <= 0
    ):
        raise InvalidParameterError(f"iterations must be a positive integer, got {iterations!r}")
    if rng is None:
        rng = make_rng()

    iterations = int(iterations)
    orientation = Orientation(orientation)
    scores = _draw(params, settings, iterations, rng)
    success_count = int(np.count_nonzero(_successes(scores, orientation, settings)))

    return SimulationResult(
        probability=success_count / iterations,
        iterations=iterations,
    )
