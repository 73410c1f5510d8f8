"""Forward-only SQL migrations.

Files in ``migrations/`` are named ``NNN_description.sql`` and applied in
version order, each in its own transaction, under a Postgres advisory lock.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import asyncpg

from footy.db.models import Table
from footy.db.pool import close_pool, get_pool

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
ADVISORY_LOCK_ID = 815_235


def discover_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> list[tuple[int, Path]]:
    """Return (version, path) pairs sorted by version; files without a numeric prefix are ignored."""
    found = []
    for sql_file in migrations_dir.glob("*.sql"):
        prefix = sql_file.stem.split("_", 1)[0]
        if prefix.isdigit():
            found.append((int(prefix), sql_file))
    return sorted(found)


async def _ensure_migrations_table(conn: asyncpg.Connection) -> None:
    await conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {Table.SCHEMA_MIGRATIONS} (
            version INTEGER PRIMARY KEY,
            filename TEXT NOT NULL DEFAULT '',
            applied_at TIMESTAMPTZ DEFAULT now()
        )
        """
    )


async def _applied_versions(conn: asyncpg.Connection) -> set[int]:
    rows = await conn.fetch(f"SELECT version FROM {Table.SCHEMA_MIGRATIONS}")
    return {row["version"] for row in rows}


async def migrate(migrations_dir: Path = MIGRATIONS_DIR) -> int:
    """
    Apply all pending migrations. Idempotent.

    Returns:
        int: Number of migrations applied in this run

    Raises:
        FileNotFoundError: If the migrations directory is missing
        RuntimeError: If another migration run holds the lock
    """
    if not migrations_dir.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {migrations_dir}")

    pool = await get_pool()
    applied_count = 0

    async with pool.acquire() as conn:
        if not await conn.fetchval("SELECT pg_try_advisory_lock($1)", ADVISORY_LOCK_ID):
            raise RuntimeError("Another migration run is in progress")

        try:
            await _ensure_migrations_table(conn)
            applied = await _applied_versions(conn)

            for version, sql_path in discover_migrations(migrations_dir):
                if version in applied:
                    continue
                async with conn.transaction():
                    # Without bind args asyncpg runs the whole script at once
                    await conn.execute(sql_path.read_text(encoding="utf-8"))
                    await conn.execute(
                        f"INSERT INTO {Table.SCHEMA_MIGRATIONS} (version, filename) VALUES ($1, $2)",
                        version,
                        sql_path.name,
                    )
                applied_count += 1
                logger.info(f"Applied migration {version:03d}: {sql_path.name}")
        finally:
            await conn.execute("SELECT pg_advisory_unlock($1)", ADVISORY_LOCK_ID)

    return applied_count


async def schema_version() -> Optional[int]:
    """Highest applied migration version, or None if none applied."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await _ensure_migrations_table(conn)
        return await conn.fetchval(f"SELECT MAX(version) FROM {Table.SCHEMA_MIGRATIONS}")


def main() -> None:
    """CLI entry point for running migrations."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    async def _run():
        try:
            applied = await migrate()
            version = await schema_version()
        finally:
            await close_pool()
        logger.info(f"Applied {applied} migration(s); schema version {version}")

    asyncio.run(_run())


if __name__ == "__main__":
    main()
