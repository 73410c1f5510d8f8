"""asyncpg connection pool singleton."""

import asyncio
import logging
from typing import Optional

import asyncpg

from footy.config import get_config

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 5.0

_pool: Optional[asyncpg.Pool] = None


async def _create_pool() -> asyncpg.Pool:
    config = get_config()
    try:
        pool = await asyncio.wait_for(
            asyncpg.create_pool(
                str(config.db_dsn),
                min_size=config.db_pool_min,
                max_size=config.db_pool_max,
            ),
            timeout=CONNECT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        raise asyncio.TimeoutError(
            f"Could not reach PostgreSQL within {CONNECT_TIMEOUT_SECONDS:.0f} seconds"
        )

    if pool is None:
        raise RuntimeError("asyncpg returned no pool")
    return pool


async def _check(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as conn:
        result = await conn.fetchval("SELECT 1")
    if result != 1:
        raise RuntimeError(f"Health check returned {result!r}, expected 1")


async def get_pool() -> asyncpg.Pool:
    """
    Return the shared pool, creating and health-checking it on first use.

    Raises:
        asyncio.TimeoutError: If the database does not answer in time
        RuntimeError: If the health check fails
    """
    global _pool

    if _pool is not None:
        return _pool

    pool = await _create_pool()
    try:
        await _check(pool)
    except Exception as e:
        await pool.close()
        raise RuntimeError(f"Database health check failed: {e}") from e

    _pool = pool
    logger.info("Database pool ready")
    return _pool


async def close_pool() -> None:
    """Close the shared pool; terminate it if graceful close stalls."""
    global _pool
    if _pool is None:
        return

    pool, _pool = _pool, None
    try:
        await asyncio.wait_for(pool.close(), timeout=CONNECT_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.warning("Pool close timed out, terminating remaining connections")
        pool.terminate()
