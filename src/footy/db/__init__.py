"""Database access: connection pool, table names and migrations."""

from footy.db.pool import close_pool, get_pool

__all__ = ["get_pool", "close_pool"]
