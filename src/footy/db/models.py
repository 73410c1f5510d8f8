"""Lightweight table-name constants and column-name enums."""

from enum import Enum


class Table:
    """Database table names."""

    LEAGUES = "leagues"
    TEAMS = "teams"
    MATCHES = "matches"
    ODDS = "odds"
    SCHEMA_MIGRATIONS = "schema_migrations"


class MatchStatus(str, Enum):
    """Match status as reported by football-data.org."""

    SCHEDULED = "SCHEDULED"
    TIMED = "TIMED"
    IN_PLAY = "IN_PLAY"
    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    POSTPONED = "POSTPONED"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"
    AWARDED = "AWARDED"


# Statuses eligible for pre-match analysis
UPCOMING_STATUSES = (MatchStatus.TIMED.value, MatchStatus.SCHEDULED.value)
