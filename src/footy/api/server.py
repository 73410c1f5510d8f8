"""aiohttp JSON API over the analysis pipeline."""

import asyncio
import logging
from typing import Optional

from aiohttp import web

from footy.analysis.pipeline import run_analysis, run_sync
from footy.config.settings import get_config
from footy.odds.ranking import SortKey
from footy.odds.value import ValueAssessment

logger = logging.getLogger(__name__)


def assessment_to_json(assessment: ValueAssessment) -> dict:
    """Serialize an assessment with the field names the web client expects."""
    kickoff = assessment.kickoff.isoformat() if assessment.kickoff else None
    return {
        "id": assessment.match_id,
        "homeTeam": assessment.home_team,
        "awayTeam": assessment.away_team,
        "league": assessment.league,
        "date": kickoff,
        "probModel": assessment.model_probability,
        "oddAvg": assessment.average_odds,
        "bestOdd": assessment.market_odds,
        "probImplied": assessment.implied_probability,
        "edge": assessment.edge,
        "ev": assessment.expected_value,
        "confidence": assessment.confidence_tier.value,
        "isTeamYHome": assessment.designated_is_home,
    }


def _parse_query(request: web.Request) -> tuple[SortKey, Optional[str], Optional[float]]:
    """Read sort/league/min_edge query params.

    Raises:
        web.HTTPBadRequest: On unknown sort key or non-numeric min_edge
    """
    sort_raw = request.query.get("sort", SortKey.DATE.value)
    try:
        sort_key = SortKey(sort_raw)
    except ValueError:
        raise web.HTTPBadRequest(
            text=f"Unknown sort key: {sort_raw}", content_type="text/plain"
        )

    league = request.query.get("league")
    if league in (None, "", "All"):
        league = None

    min_edge = None
    min_edge_raw = request.query.get("min_edge")
    if min_edge_raw:
        try:
            min_edge = float(min_edge_raw)
        except ValueError:
            raise web.HTTPBadRequest(
                text=f"min_edge must be a number, got {min_edge_raw}",
                content_type="text/plain",
            )

    return sort_key, league, min_edge


async def analysis_endpoint(request: web.Request) -> web.Response:
    """Handle GET /api/analysis."""
    sort_key, league, min_edge = _parse_query(request)

    try:
        assessments = await run_analysis(sort_key=sort_key, league=league, min_edge=min_edge)
    except Exception as e:
        logger.error(f"Analysis error: {e}", exc_info=True)
        return web.json_response({"error": "Failed to analyze matches"}, status=500)

    return web.json_response([assessment_to_json(a) for a in assessments])


async def sync_endpoint(request: web.Request) -> web.Response:
    """Handle POST /api/sync."""
    try:
        leagues, fixtures = await run_sync()
    except Exception as e:
        logger.error(f"Sync error: {e}", exc_info=True)
        return web.json_response({"error": "Failed to sync fixtures"}, status=500)

    return web.json_response(
        {"status": "Worldwide sync completed", "leagues": leagues, "fixtures": fixtures}
    )


def create_app() -> web.Application:
    """Create the aiohttp application with API routes."""
    app = web.Application()
    app.router.add_get("/api/analysis", analysis_endpoint)
    app.router.add_post("/api/sync", sync_endpoint)
    return app


async def run_server(shutdown_event: Optional[asyncio.Event] = None) -> None:
    """Serve the API until shutdown_event is set (or forever)."""
    config = get_config()
    runner = web.AppRunner(create_app())
    await runner.setup()

    site = web.TCPSite(runner, config.server_host, config.server_port)
    await site.start()
    logger.info(f"Server running on http://{config.server_host}:{config.server_port}")

    try:
        if shutdown_event:
            await shutdown_event.wait()
        else:
            await asyncio.Event().wait()
    finally:
        logger.info("Shutting down server...")
        await runner.cleanup()
