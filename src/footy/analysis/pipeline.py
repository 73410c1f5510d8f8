"""Pipeline orchestration: fixture sync and batch value analysis.

Implements:
- analyze_match() for one fixture: rates -> two simulations -> assessment
- analyze_matches() for a cancellable, bounded-concurrency batch
- run_analysis() for the full DB -> ranked value bets flow
- run_sync() for league and fixture ingestion
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import asyncpg

from footy.config.settings import get_config
from footy.db.models import UPCOMING_STATUSES, Table
from footy.db.pool import get_pool
from footy.errors import FootyError
from footy.ingestion.fixtures import FootballDataProvider
from footy.models.rates import HeuristicRateGenerator, MatchContext, RateGenerator
from footy.odds.pricing import PriceProvider, SyntheticPriceProvider
from footy.odds.ranking import SortKey, rank_value_bets
from footy.odds.value import ValueAssessment, ValueSettings, generate_assessment
from footy.simulation.engine import SimulationSettings
from footy.simulation.sampler import make_rng

logger = logging.getLogger(__name__)

# Keeps the simulation stream apart from the rate generator's (seed, match_id) stream
_SIMULATION_STREAM = 1


@dataclass
class MatchFailure:
    """A match whose analysis raised; the rest of the batch is unaffected."""

    match_id: int
    error: str
    error_type: str


@dataclass
class BatchResult:
    """Outcome of analyze_matches()."""

    assessments: list[ValueAssessment] = field(default_factory=list)
    failures: list[MatchFailure] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)  # never started (cancelled)
    cancelled: bool = False


def analyze_match(
    context: MatchContext,
    rate_generator: RateGenerator,
    *,
    seed: int | None = None,
    simulation_settings: SimulationSettings | None = None,
    value_settings: ValueSettings | None = None,
    price_provider: PriceProvider | None = None,
    market_odds: float | None = None,
) -> ValueAssessment:
    """Analyse one fixture end to end.

    Raises:
        InvalidParameterError: If the generated rates are invalid
        InvalidOddsError: If the market cannot be priced
    """
    params = rate_generator.generate(context)

    if seed is None:
        rng = make_rng()
    else:
        rng = make_rng([seed, context.match_id, _SIMULATION_STREAM])

    return generate_assessment(
        context.match_id,
        params,
        market_odds,
        rng=rng,
        simulation_settings=simulation_settings,
        value_settings=value_settings,
        price_provider=price_provider,
        kickoff=context.kickoff,
        home_team=context.home_team,
        away_team=context.away_team,
        league=context.league,
    )


async def analyze_matches(
    contexts: list[MatchContext],
    rate_generator: RateGenerator,
    *,
    seed: int | None = None,
    concurrency: int = 4,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
    simulation_settings: SimulationSettings | None = None,
    value_settings: ValueSettings | None = None,
    price_provider: PriceProvider | None = None,
) -> BatchResult:
    """Analyse fixtures concurrently in worker threads.

    Args:
        contexts: Fixtures to analyse
        rate_generator: Source of MatchParameters
        seed: Base seed; each match derives its own generator from (seed, match_id)
        concurrency: Maximum matches in flight
        cancel_event: Once set, no further matches start
        timeout: Seconds after which no further matches start
        simulation_settings, value_settings, price_provider: Passed to analyze_match

    Returns:
        BatchResult; assessments keep the input order

    Notes:
        - A failing match is logged and recorded, never aborts the batch
        - Matches already running when the batch is cancelled finish normally
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None
    semaphore = asyncio.Semaphore(concurrency)
    slots: list[ValueAssessment | None] = [None] * len(contexts)
    result = BatchResult()

    def _stopped() -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and loop.time() >= deadline

    async def _run(index: int, context: MatchContext) -> None:
        async with semaphore:
            if _stopped():
                result.cancelled = True
                result.skipped.append(context.match_id)
                return
            try:
                slots[index] = await asyncio.to_thread(
                    analyze_match,
                    context,
                    rate_generator,
                    seed=seed,
                    simulation_settings=simulation_settings,
                    value_settings=value_settings,
                    price_provider=price_provider,
                )
            except FootyError as e:
                logger.warning(f"Skipping match {context.match_id}: {e}")
                result.failures.append(
                    MatchFailure(context.match_id, str(e), type(e).__name__)
                )
            except Exception as e:
                logger.error(f"Analysis failed for match {context.match_id}: {e}", exc_info=True)
                result.failures.append(
                    MatchFailure(context.match_id, str(e), type(e).__name__)
                )

    await asyncio.gather(*(_run(i, c) for i, c in enumerate(contexts)))

    result.assessments = [a for a in slots if a is not None]
    result.skipped.sort()

    logger.info(
        f"Analysed {len(result.assessments)}/{len(contexts)} matches "
        f"({len(result.failures)} failed, {len(result.skipped)} skipped)"
    )
    return result


async def load_candidate_matches(conn: asyncpg.Connection) -> list[MatchContext]:
    """Upcoming matches with team and league names, earliest kickoff first."""
    rows = await conn.fetch(
        f"""
        SELECT
            m.id, m.utc_date, m.league_id, m.home_team_id, m.away_team_id,
            h.name AS home_name, a.name AS away_name, l.name AS league_name
        FROM {Table.MATCHES} m
        JOIN {Table.TEAMS} h ON m.home_team_id = h.id
        JOIN {Table.TEAMS} a ON m.away_team_id = a.id
        JOIN {Table.LEAGUES} l ON m.league_id = l.id
        WHERE m.status = ANY($1::text[])
        ORDER BY m.utc_date ASC
        """,
        list(UPCOMING_STATUSES),
    )

    return [
        MatchContext(
            match_id=row["id"],
            kickoff=row["utc_date"],
            home_team=row["home_name"],
            away_team=row["away_name"],
            league=row["league_name"],
            home_team_id=row["home_team_id"],
            away_team_id=row["away_team_id"],
            league_id=row["league_id"],
        )
        for row in rows
    ]


async def run_analysis(
    sort_key: SortKey | None = SortKey.DATE,
    league: str | None = None,
    min_edge: float | None = None,
    rate_generator: RateGenerator | None = None,
    cancel_event: asyncio.Event | None = None,
) -> list[ValueAssessment]:
    """Analyse all upcoming matches and return ranked positive-EV bets.

    Args:
        sort_key: Ordering applied before truncation
        league: Optional league-name filter
        min_edge: Optional minimum edge
        rate_generator: Defaults to HeuristicRateGenerator(config.analysis_seed)
        cancel_event: Optional batch cancellation signal

    Returns:
        At most config.max_value_bets assessments with expected_value > 0
    """
    config = get_config()
    if rate_generator is None:
        rate_generator = HeuristicRateGenerator(seed=config.analysis_seed)

    pool = await get_pool()
    async with pool.acquire() as conn:
        contexts = await load_candidate_matches(conn)

    logger.info(f"Starting analysis of {len(contexts)} upcoming matches")

    batch = await analyze_matches(
        contexts,
        rate_generator,
        seed=config.analysis_seed,
        concurrency=config.analysis_concurrency,
        cancel_event=cancel_event,
        simulation_settings=SimulationSettings.from_config(config),
        value_settings=ValueSettings.from_config(config),
        price_provider=SyntheticPriceProvider.from_config(config),
    )

    return rank_value_bets(
        batch.assessments,
        sort_key=sort_key,
        limit=config.max_value_bets,
        league=league,
        min_edge=min_edge,
    )


async def run_sync() -> tuple[int, int]:
    """Sync competitions and the upcoming fixture window.

    Returns:
        (leagues written, fixtures written)

    Notes:
        - Conservative: a source that stays empty after retries is logged and skipped
    """
    config = get_config()
    provider = FootballDataProvider()

    leagues = await _retry_ingestion(provider.fetch_leagues, "competitions")
    if leagues:
        await provider.write_leagues(leagues)

    date_from = datetime.now(timezone.utc).date()
    date_to = date_from + timedelta(days=config.sync_days_ahead)
    batch = await _retry_ingestion(
        lambda: provider.fetch_fixtures(date_from, date_to),
        f"fixtures-{date_from}",
    )
    if batch:
        await provider.write_fixtures(batch)

    fixtures_written = len(batch) if batch else 0
    logger.info(f"Sync complete: {len(leagues or [])} leagues, {fixtures_written} fixtures")
    return len(leagues or []), fixtures_written


async def _retry_ingestion(coro_func, label: str):
    """Retry an ingestion call with exponential backoff.

    Args:
        coro_func: Async callable returning the ingestion result
        label: Label for logging

    Returns:
        Ingestion result, or None once all attempts fail or stay empty

    Notes:
        - Retries up to max_retry_attempts (from config)
        - Backoff: 1s, 2s, 4s, ...
        - An empty result counts as a failure
    """
    config = get_config()
    max_attempts = config.max_retry_attempts + 1

    for attempt in range(max_attempts):
        last_attempt = attempt == max_attempts - 1
        try:
            result = await coro_func()
        except Exception as e:
            if last_attempt:
                logger.error(
                    f"Ingestion failed for {label} after {max_attempts} attempts: {e}",
                    exc_info=True,
                )
                return None
            logger.warning(
                f"Ingestion error for {label}: {e}, retrying ({attempt + 1}/{max_attempts})"
            )
            await asyncio.sleep(2 ** attempt)
            continue

        if result:
            return result
        if last_attempt:
            logger.warning(f"Ingestion returned nothing for {label} after {max_attempts} attempts")
            return None
        logger.warning(
            f"Ingestion returned empty for {label}, retrying ({attempt + 1}/{max_attempts})"
        )
        await asyncio.sleep(2 ** attempt)

    return None
