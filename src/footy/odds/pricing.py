"""Market price sources for the compound half-market.

Implements the synthetic-price placeholder used until real odds for this
market are available. Real prices plug in through PriceProvider without
changing any edge or EV arithmetic.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

from footy.errors import InvalidOddsError


@dataclass(frozen=True)
class MarketQuote:
    """Price offered for the compound market."""

    best_odds: float  # European decimal, > 1.0
    average_odds: float | None = None  # market-average price, if known
    bookmaker: str | None = None


def validate_odds(odds: float) -> float:
    """Return odds as float, or raise if they are not a finite price above 1.0.

    Raises:
        InvalidOddsError: If odds are non-numeric, non-finite or <= 1.0
    """
    try:
        value = float(odds)
    except (TypeError, ValueError) as e:
        raise InvalidOddsError(f"Market odds must be numeric, got {odds!r}") from e

    if not math.isfinite(value) or value <= 1.0:
        raise InvalidOddsError(f"Market odds must be finite and > 1.0, got {odds}")
    return value


class PriceProvider(ABC):
    """Abstract source of market prices."""

    @abstractmethod
    def quote(self, match_id: int, model_probability: float) -> MarketQuote:
        """
        Price the compound market for a match.

        Args:
            match_id: Match identifier
            model_probability: Model estimate, available to synthetic providers

        Returns:
            MarketQuote with the best available price
        """
        pass


class SyntheticPriceProvider(PriceProvider):
    """
    Derive a price from the model probability (placeholder).

    average = 1 / (p * (1 - margin)); best = average * markup. Neither
    constant is calibrated; both are replaceable.
    """

    def __init__(self, margin: float = 0.20, markup: float = 1.10):
        if not 0.0 <= margin < 1.0:
            raise ValueError(f"margin must be in [0, 1), got {margin}")
        if markup < 1.0:
            raise ValueError(f"markup must be >= 1.0, got {markup}")
        self.margin = margin
        self.markup = markup

    @classmethod
    def from_config(cls, config) -> "SyntheticPriceProvider":
        return cls(margin=config.bookmaker_margin, markup=config.best_price_markup)

    def quote(self, match_id: int, model_probability: float) -> MarketQuote:
        if model_probability <= 0:
            raise InvalidOddsError(
                f"Cannot derive a synthetic price for match {match_id}: model probability is 0"
            )

        average_odds = 1.0 / (model_probability * (1.0 - self.margin))
        best_odds = average_odds * self.markup
        return MarketQuote(
            best_odds=validate_odds(best_odds),
            average_odds=average_odds,
            bookmaker="synthetic",
        )
