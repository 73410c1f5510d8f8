"""Per-match rate generation: expected goals and corners for both sides.

Downstream code only depends on the RateGenerator interface, so the
heuristic below can be swapped for a fitted model without touching the
simulator or the value evaluator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from footy.simulation.engine import MatchParameters
from footy.simulation.sampler import RandomSource, make_rng


@dataclass
class MatchContext:
    """Fixture metadata handed to a rate generator."""

    match_id: int
    kickoff: datetime | None
    home_team: str
    away_team: str
    league: str
    home_team_id: int | None = None
    away_team_id: int | None = None
    league_id: int | None = None


class RateGenerator(ABC):
    """Abstract producer of MatchParameters."""

    @abstractmethod
    def generate(self, context: MatchContext) -> MatchParameters:
        """
        Produce expected goals and corners for a fixture.

        Args:
            context: Fixture metadata

        Returns:
            MatchParameters with full-match rates
        """
        pass


class HeuristicRateGenerator(RateGenerator):
    """
    Placeholder generator: league-average baselines plus uniform jitter.

    Each rate is ``base + U[0, 1) * spread``. With a seed, the jitter for a
    match is derived from (seed, match_id) and is therefore reproducible
    regardless of the order matches are processed in.
    """

    HOME_GOALS = (1.2, 0.8)
    AWAY_GOALS = (1.0, 0.8)
    HOME_CORNERS = (4.5, 2.0)
    AWAY_CORNERS = (4.0, 2.0)

    def __init__(self, seed: int | None = None):
        self.seed = seed

    def _rng_for(self, match_id: int) -> RandomSource:
        if self.seed is None:
            return make_rng()
        return make_rng([self.seed, match_id])

    def generate(self, context: MatchContext) -> MatchParameters:
        rng = self._rng_for(context.match_id)
        jitter = rng.random(4)

        return MatchParameters(
            home_expected_goals=self.HOME_GOALS[0] + jitter[0] * self.HOME_GOALS[1],
            away_expected_goals=self.AWAY_GOALS[0] + jitter[1] * self.AWAY_GOALS[1],
            home_expected_corners=self.HOME_CORNERS[0] + jitter[2] * self.HOME_CORNERS[1],
            away_expected_corners=self.AWAY_CORNERS[0] + jitter[3] * self.AWAY_CORNERS[1],
        )
