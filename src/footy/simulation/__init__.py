"""Monte Carlo simulation of the compound half-market.

Consumes MatchParameters from a rate generator and produces SimulationResult
per designated-team orientation.
"""

from footy.simulation.engine import (
    DEFAULT_ITERATIONS,
    MatchParameters,
    Orientation,
    SimulationResult,
    SimulationSettings,
    simulate,
)
from footy.simulation.exact import exact_probability
from footy.simulation.sampler import (
    RandomSource,
    make_rng,
    sample_poisson,
    sample_poisson_array,
)

__all__ = [
    "DEFAULT_ITERATIONS",
    "MatchParameters",
    "Orientation",
    "SimulationResult",
    "SimulationSettings",
    "simulate",
    "exact_probability",
    "RandomSource",
    "make_rng",
    "sample_poisson",
    "sample_poisson_array",
]
