"""Pricing, value evaluation and ranking for the compound half-market."""

from footy.odds.pricing import (
    MarketQuote,
    PriceProvider,
    SyntheticPriceProvider,
    validate_odds,
)
from footy.odds.ranking import SortKey, filter_positive_ev, rank_value_bets, sort_assessments
from footy.odds.value import (
    ConfidenceTier,
    ValueAssessment,
    ValueSettings,
    compute_edge,
    confidence_tier,
    evaluate,
    generate_assessment,
    select_orientation,
)

__all__ = [
    "MarketQuote",
    "PriceProvider",
    "SyntheticPriceProvider",
    "validate_odds",
    "SortKey",
    "filter_positive_ev",
    "rank_value_bets",
    "sort_assessments",
    "ConfidenceTier",
    "ValueAssessment",
    "ValueSettings",
    "compute_edge",
    "confidence_tier",
    "evaluate",
    "generate_assessment",
    "select_orientation",
]
