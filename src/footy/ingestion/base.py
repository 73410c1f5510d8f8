"""Abstract fixture provider and canonical row schemas."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class LeagueRow:
    """Canonical league (competition) row."""

    league_id: int
    name: str
    code: str | None = None


@dataclass
class TeamRow:
    """Canonical team row."""

    team_id: int
    name: str
    league_id: int | None = None


@dataclass
class FixtureRow:
    """Canonical match row. Scores are populated once known."""

    match_id: int
    utc_date: datetime  # UTC
    status: str  # football-data.org status, e.g. 'TIMED'
    league_id: int
    home_team_id: int
    away_team_id: int
    home_score_full: int | None = None
    away_score_full: int | None = None
    home_score_h1: int | None = None
    away_score_h1: int | None = None
    home_score_h2: int | None = None
    away_score_h2: int | None = None
    corners: int | None = None  # not supplied by football-data.org


@dataclass
class FixtureBatch:
    """Leagues, teams and matches parsed from one fixtures response."""

    leagues: list[LeagueRow]
    teams: list[TeamRow]
    fixtures: list[FixtureRow]

    def __len__(self) -> int:
        return len(self.fixtures)


class FixtureProvider(ABC):
    """Abstract league/fixture provider interface."""

    @abstractmethod
    async def fetch_leagues(self) -> list[LeagueRow]:
        """
        Fetch all competitions visible to the API key.

        Returns:
            List of LeagueRow objects
        """
        pass

    @abstractmethod
    async def fetch_fixtures(self, date_from: date, date_to: date) -> FixtureBatch:
        """
        Fetch fixtures in a date window (inclusive).

        Args:
            date_from: First date
            date_to: Last date

        Returns:
            FixtureBatch with the teams and matches found
        """
        pass
