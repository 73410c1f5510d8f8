"""Rate generation for the simulator."""

from footy.models.rates import HeuristicRateGenerator, MatchContext, RateGenerator

__all__ = ["RateGenerator", "HeuristicRateGenerator", "MatchContext"]
