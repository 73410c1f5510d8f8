"""football-data.org v4 league and fixture provider."""

import logging
from datetime import date, datetime, timezone

import aiohttp

from footy.config.settings import get_config
from footy.db.models import Table
from footy.db.pool import get_pool
from footy.ingestion.base import (
    FixtureBatch,
    FixtureProvider,
    FixtureRow,
    LeagueRow,
    TeamRow,
)
from footy.ingestion.cache import get_cache

logger = logging.getLogger(__name__)

COMPETITIONS_CACHE_KEY = "football-data:competitions"


def _parse_utc(value: str) -> datetime:
    """Parse '2026-10-17T14:00:00Z' into an aware UTC datetime."""
    return datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)


def _second_half(full: int | None, half: int | None) -> int | None:
    if full is None or half is None:
        return None
    return full - half


def parse_match(match: dict) -> tuple[LeagueRow, TeamRow, TeamRow, FixtureRow]:
    """Map one football-data.org match object to canonical rows.

    Raises:
        KeyError: If a required field is missing
    """
    competition = match["competition"]
    league = LeagueRow(
        league_id=competition["id"],
        name=competition.get("name") or f"Competition {competition['id']}",
        code=competition.get("code"),
    )
    home = TeamRow(
        team_id=match["homeTeam"]["id"],
        name=match["homeTeam"].get("name") or f"Team {match['homeTeam']['id']}",
        league_id=league.league_id,
    )
    away = TeamRow(
        team_id=match["awayTeam"]["id"],
        name=match["awayTeam"].get("name") or f"Team {match['awayTeam']['id']}",
        league_id=league.league_id,
    )

    score = match.get("score") or {}
    full_time = score.get("fullTime") or {}
    half_time = score.get("halfTime") or {}

    fixture = FixtureRow(
        match_id=match["id"],
        utc_date=_parse_utc(match["utcDate"]),
        status=match["status"],
        league_id=league.league_id,
        home_team_id=home.team_id,
        away_team_id=away.team_id,
        home_score_full=full_time.get("home"),
        away_score_full=full_time.get("away"),
        home_score_h1=half_time.get("home"),
        away_score_h1=half_time.get("away"),
        home_score_h2=_second_half(full_time.get("home"), half_time.get("home")),
        away_score_h2=_second_half(full_time.get("away"), half_time.get("away")),
    )
    return league, home, away, fixture


class FootballDataProvider(FixtureProvider):
    """
    football-data.org provider.

    Fetch methods never raise: on any error they log a warning and return
    an empty result, leaving retries to the caller.
    """

    def _headers(self) -> dict[str, str]:
        config = get_config()
        return {"X-Auth-Token": config.api_key_football_data.get_secret_value()}

    async def _get_json(self, path: str, params: dict | None = None) -> dict:
        config = get_config()
        url = f"{config.football_data_base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=10)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers=self._headers(), params=params) as response:
                response.raise_for_status()
                return await response.json()

    async def fetch_leagues(self) -> list[LeagueRow]:
        """Fetch competitions, served from cache while fresh."""
        cache = get_cache()
        cached = cache.get(COMPETITIONS_CACHE_KEY)
        if cached is not None:
            return list(cached)

        try:
            data = await self._get_json("/competitions")
            rows = [
                LeagueRow(league_id=c["id"], name=c["name"], code=c.get("code"))
                for c in data.get("competitions", [])
            ]
        except Exception as e:
            logger.warning(f"Failed to fetch competitions: {e}", exc_info=True)
            return []

        if rows:
            cache.set(
                COMPETITIONS_CACHE_KEY,
                rows,
                get_config().competitions_cache_ttl_seconds,
            )
        logger.info(f"Fetched {len(rows)} competitions")
        return rows

    async def fetch_fixtures(self, date_from: date, date_to: date) -> FixtureBatch:
        """Fetch fixtures across all available competitions in a date window."""
        empty = FixtureBatch(leagues=[], teams=[], fixtures=[])
        params = {
            "dateFrom": date_from.strftime("%Y-%m-%d"),
            "dateTo": date_to.strftime("%Y-%m-%d"),
        }

        try:
            data = await self._get_json("/matches", params=params)
        except Exception as e:
            logger.warning(
                f"Failed to fetch fixtures {date_from}..{date_to}: {e}",
                exc_info=True,
            )
            return empty

        leagues: dict[int, LeagueRow] = {}
        teams: dict[int, TeamRow] = {}
        fixtures: list[FixtureRow] = []

        for match in data.get("matches", []):
            try:
                league, home, away, fixture = parse_match(match)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed match {match.get('id')}: {e}")
                continue
            leagues.setdefault(league.league_id, league)
            teams.setdefault(home.team_id, home)
            teams.setdefault(away.team_id, away)
            fixtures.append(fixture)

        logger.info(f"Fetched {len(fixtures)} fixtures for {date_from}..{date_to}")
        return FixtureBatch(
            leagues=list(leagues.values()),
            teams=list(teams.values()),
            fixtures=fixtures,
        )

    async def write_leagues(self, rows: list[LeagueRow]) -> None:
        """Upsert leagues on id."""
        if not rows:
            return

        pool = await get_pool()
        async with pool.acquire() as conn:
            await conn.executemany(
                f"""
                INSERT INTO {Table.LEAGUES} (id, name, code)
                VALUES ($1, $2, $3)
                ON CONFLICT (id)
                DO UPDATE SET name = EXCLUDED.name, code = EXCLUDED.code
                """,
                [(row.league_id, row.name, row.code) for row in rows],
            )

        logger.info(f"Upserted {len(rows)} leagues")

    async def write_fixtures(self, batch: FixtureBatch) -> None:
        """
        Persist a fixture batch in one transaction.

        Leagues and teams already present are left untouched; matches are
        fully replaced on id so status and score changes land.
        """
        if not batch.fixtures:
            return

        pool = await get_pool()
        async with pool.acquire() as conn:
            async with conn.transaction():
                await conn.executemany(
                    f"""
                    INSERT INTO {Table.LEAGUES} (id, name, code)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (id) DO NOTHING
                    """,
                    [(row.league_id, row.name, row.code) for row in batch.leagues],
                )
                await conn.executemany(
                    f"""
                    INSERT INTO {Table.TEAMS} (id, name, league_id)
                    VALUES ($1, $2, $3)
                    ON CONFLICT (id) DO NOTHING
                    """,
                    [(row.team_id, row.name, row.league_id) for row in batch.teams],
                )
                await conn.executemany(
                    f"""
                    INSERT INTO {Table.MATCHES}
                    (id, utc_date, status, league_id, home_team_id, away_team_id,
                     home_score_full, away_score_full, home_score_h1, away_score_h1,
                     home_score_h2, away_score_h2, corners, updated_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, now())
                    ON CONFLICT (id)
                    DO UPDATE SET
                        utc_date = EXCLUDED.utc_date,
                        status = EXCLUDED.status,
                        league_id = EXCLUDED.league_id,
                        home_team_id = EXCLUDED.home_team_id,
                        away_team_id = EXCLUDED.away_team_id,
                        home_score_full = EXCLUDED.home_score_full,
                        away_score_full = EXCLUDED.away_score_full,
                        home_score_h1 = EXCLUDED.home_score_h1,
                        away_score_h1 = EXCLUDED.away_score_h1,
                        home_score_h2 = EXCLUDED.home_score_h2,
                        away_score_h2 = EXCLUDED.away_score_h2,
                        corners = COALESCE(EXCLUDED.corners, {Table.MATCHES}.corners),
                        updated_at = now()
                    """,
                    [
                        (
                            row.match_id,
                            row.utc_date,
                            row.status,
                            row.league_id,
                            row.home_team_id,
                            row.away_team_id,
                            row.home_score_full,
                            row.away_score_full,
                            row.home_score_h1,
                            row.away_score_h1,
                            row.home_score_h2,
                            row.away_score_h2,
                            row.corners,
                        )
                        for row in batch.fixtures
                    ],
                )

        logger.info(
            f"Upserted {len(batch.fixtures)} fixtures, {len(batch.teams)} teams"
        )
