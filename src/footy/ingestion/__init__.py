"""League and fixture ingestion."""

from footy.ingestion.base import (
    FixtureBatch,
    FixtureProvider,
    FixtureRow,
    LeagueRow,
    TeamRow,
)
from footy.ingestion.cache import Cache, CacheEntry, get_cache
from footy.ingestion.fixtures import FootballDataProvider, parse_match

__all__ = [
    "FixtureProvider",
    "FixtureBatch",
    "FixtureRow",
    "LeagueRow",
    "TeamRow",
    "Cache",
    "CacheEntry",
    "get_cache",
    "FootballDataProvider",
    "parse_match",
]
