"""Filtering and ordering of value assessments."""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from footy.odds.value import ValueAssessment

DEFAULT_LIMIT = 50


class SortKey(str, Enum):
    """Caller-selectable ordering."""

    EV = "ev"  # expected value, descending
    EDGE = "edge"  # edge, descending
    DATE = "date"  # kickoff, ascending


_NO_KICKOFF = datetime.max.replace(tzinfo=timezone.utc)


def _kickoff_key(assessment: ValueAssessment) -> datetime:
    kickoff = assessment.kickoff
    if kickoff is None:
        return _NO_KICKOFF
    if kickoff.tzinfo is None:
        return kickoff.replace(tzinfo=timezone.utc)
    return kickoff


def sort_assessments(
    assessments: Iterable[ValueAssessment],
    sort_key: SortKey,
) -> list[ValueAssessment]:
    """Return a new list ordered by sort_key. Matches without kickoff sort last by date."""
    sort_key = SortKey(sort_key)
    if sort_key is SortKey.EV:
        return sorted(assessments, key=lambda a: a.expected_value, reverse=True)
    if sort_key is SortKey.EDGE:
        return sorted(assessments, key=lambda a: a.edge, reverse=True)
    return sorted(assessments, key=_kickoff_key)


def filter_positive_ev(assessments: Iterable[ValueAssessment]) -> list[ValueAssessment]:
    """Keep assessments with expected_value > 0, preserving input order."""
    return [a for a in assessments if a.expected_value > 0]


def rank_value_bets(
    assessments: Iterable[ValueAssessment],
    sort_key: SortKey | None = None,
    limit: int = DEFAULT_LIMIT,
    league: str | None = None,
    min_edge: float | None = None,
) -> list[ValueAssessment]:
    """Select positive-EV bets for reporting.

    Steps:
        1. Optional sort by sort_key (None keeps input order)
        2. Optional league / minimum-edge filters
        3. Keep expected_value > 0
        4. Truncate to limit

    Args:
        assessments: Candidate assessments
        sort_key: Ordering policy, or None
        limit: Maximum number of results
        league: Keep only this league name
        min_edge: Keep only edge >= min_edge

    Returns:
        Filtered, ordered, truncated list
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    selected = list(assessments)
    if sort_key is not None:
        selected = sort_assessments(selected, sort_key)
    if league is not None:
        selected = [a for a in selected if a.league == league]
    if min_edge is not None:
        selected = [a for a in selected if a.edge >= min_edge]

    return filter_positive_ev(selected)[:limit]
