"""Closed-form probability of the compound half-market.

Halves are independent given the rates, and corners are independent of
goals, so the compound probability factorises:

    P = [P(U1) P(U2) - P(U1, no win H1) P(U2, no win H2)] * P(corners > line)

where Ui is "half i under the goals line". Used to validate the Monte
Carlo kernel and for diagnostics.
"""

import math

import numpy as np
from scipy import stats

from footy.simulation.engine import MatchParameters, Orientation, SimulationSettings


def _half_terms(
    home_rate: float,
    away_rate: float,
    orientation: Orientation,
    goals_line: float,
) -> tuple[float, float]:
    """Return (P(under), P(under and designated side does not win the half))."""
    max_total = math.ceil(goals_line) - 1
    if max_total < 0:
        return 0.0, 0.0

    goals = np.arange(max_total + 1)
    home_pmf = stats.poisson.pmf(goals, home_rate)
    away_pmf = stats.poisson.pmf(goals, away_rate)
    joint = np.outer(home_pmf, away_pmf)  # [home_goals, away_goals]

    home_goals = goals[:, None]
    away_goals = goals[None, :]
    under = (home_goals + away_goals) < goals_line

    if orientation is Orientation.DESIGNATED_IS_HOME:
        wins = home_goals > away_goals
    else:
        wins = away_goals > home_goals

    p_under = float(joint[under].sum())
    p_under_no_win = float(joint[under & ~wins].sum())
    return p_under, p_under_no_win


def exact_probability(
    params: MatchParameters,
    orientation: Orientation,
    settings: SimulationSettings | None = None,
) -> float:
    """Analytic value the simulator converges to for the same inputs."""
    if settings is None:
        settings = SimulationSettings()
    orientation = Orientation(orientation)

    first = settings.first_half_share
    second = settings.second_half_share

    p_under_1, p_no_win_1 = _half_terms(
        params.home_expected_goals * first,
        params.away_expected_goals * first,
        orientation,
        settings.goals_line,
    )
    p_under_2, p_no_win_2 = _half_terms(
        params.home_expected_goals * second,
        params.away_expected_goals * second,
        orientation,
        settings.goals_line,
    )
    p_goals = p_under_1 * p_under_2 - p_no_win_1 * p_no_win_2

    # Sum of independent Poissons is Poisson; "> line" means ">= floor(line) + 1"
    corner_rate = params.home_expected_corners + params.away_expected_corners
    p_corners = float(stats.poisson.sf(math.floor(settings.corners_line), corner_rate))

    return max(0.0, p_goals * p_corners)
