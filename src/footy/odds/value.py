"""Value evaluation: orientation selection, implied probability, edge and EV."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from footy.odds.pricing import PriceProvider, SyntheticPriceProvider, validate_odds
from footy.simulation.engine import (
    MatchParameters,
    Orientation,
    SimulationSettings,
    simulate,
)
from footy.simulation.sampler import RandomSource, make_rng

logger = logging.getLogger(__name__)


class ConfidenceTier(str, Enum):
    """Coarse confidence label; there is no LOW tier."""

    HIGH = "High"
    MEDIUM = "Medium"


@dataclass(frozen=True)
class ValueSettings:
    """Constants of the value evaluator."""

    high_confidence_threshold: float = 0.15

    @classmethod
    def from_config(cls, config) -> "ValueSettings":
        return cls(high_confidence_threshold=config.high_confidence_threshold)


@dataclass(frozen=True)
class ValueAssessment:
    """Model-vs-market comparison for one match. Computed fresh, never persisted."""

    match_id: int
    model_probability: float
    orientation: Orientation
    market_odds: float  # best available European decimal price
    implied_probability: float  # 1 / market_odds
    edge: float  # model_probability - implied_probability
    expected_value: float  # model_probability * market_odds - 1
    confidence_tier: ConfidenceTier
    average_odds: float | None = None  # None when real odds were supplied
    kickoff: datetime | None = None
    home_team: str | None = None
    away_team: str | None = None
    league: str | None = None

    @property
    def designated_is_home(self) -> bool:
        return self.orientation is Orientation.DESIGNATED_IS_HOME


def confidence_tier(model_probability: float, threshold: float = 0.15) -> ConfidenceTier:
    """HIGH when the model probability exceeds the threshold, MEDIUM otherwise."""
    return ConfidenceTier.HIGH if model_probability > threshold else ConfidenceTier.MEDIUM


def compute_edge(model_probability: float, market_odds: float) -> tuple[float, float, float]:
    """Return (implied_probability, edge, expected_value) for a price.

    Raises:
        InvalidOddsError: If market_odds is not a finite price above 1.0
    """
    market_odds = validate_odds(market_odds)
    implied_probability = 1.0 / market_odds
    edge = model_probability - implied_probability
    expected_value = model_probability * market_odds - 1.0
    return implied_probability, edge, expected_value


def select_orientation(
    params: MatchParameters,
    rng: RandomSource,
    settings: SimulationSettings,
) -> tuple[Orientation, float]:
    """Simulate both orientations and keep the likelier one.

    Home is simulated first, then away, from the same source. Ties go to
    DESIGNATED_IS_HOME.
    """
    home = simulate(params, Orientation.DESIGNATED_IS_HOME, rng=rng, settings=settings)
    away = simulate(params, Orientation.DESIGNATED_IS_AWAY, rng=rng, settings=settings)

    if home.probability >= away.probability:
        return Orientation.DESIGNATED_IS_HOME, home.probability
    return Orientation.DESIGNATED_IS_AWAY, away.probability


def generate_assessment(
    match_id: int,
    params: MatchParameters,
    market_odds: float | None = None,
    *,
    rng: RandomSource | None = None,
    simulation_settings: SimulationSettings | None = None,
    value_settings: ValueSettings | None = None,
    price_provider: PriceProvider | None = None,
    kickoff: datetime | None = None,
    home_team: str | None = None,
    away_team: str | None = None,
    league: str | None = None,
) -> ValueAssessment:
    """Evaluate the compound market for one match.

    Args:
        match_id: Match identifier
        params: Full-match expected goals and corners
        market_odds: Real price for the market; None = ask price_provider
        rng: Uniform source shared by both simulations (None = fresh entropy)
        simulation_settings: Simulator constants
        value_settings: Evaluator constants
        price_provider: Price source used when market_odds is None
            (None = SyntheticPriceProvider with default constants)
        kickoff, home_team, away_team, league: Reporting fields

    Returns:
        ValueAssessment for the better orientation

    Raises:
        InvalidOddsError: If supplied odds are invalid, or no synthetic price
            can be derived (zero model probability)
    """
    if market_odds is not None:
        # Fail before spending any simulation time
        market_odds = validate_odds(market_odds)
    if rng is None:
        rng = make_rng()
    if simulation_settings is None:
        simulation_settings = SimulationSettings()
    if value_settings is None:
        value_settings = ValueSettings()

    orientation, model_probability = select_orientation(params, rng, simulation_settings)

    average_odds = None
    if market_odds is None:
        if price_provider is None:
            price_provider = SyntheticPriceProvider()
        quote = price_provider.quote(match_id, model_probability)
        market_odds = quote.best_odds
        average_odds = quote.average_odds

    implied_probability, edge, expected_value = compute_edge(model_probability, market_odds)

    logger.debug(
        f"Match {match_id}: p={model_probability:.4f} ({orientation.value}), "
        f"odds={market_odds:.2f}, edge={edge:.4f}, ev={expected_value:.4f}"
    )

    return ValueAssessment(
        match_id=match_id,
        model_probability=model_probability,
        orientation=orientation,
        market_odds=market_odds,
        implied_probability=implied_probability,
        edge=edge,
        expected_value=expected_value,
        confidence_tier=confidence_tier(
            model_probability, value_settings.high_confidence_threshold
        ),
        average_odds=average_odds,
        kickoff=kickoff,
        home_team=home_team,
        away_team=away_team,
        league=league,
    )


evaluate = generate_assessment
