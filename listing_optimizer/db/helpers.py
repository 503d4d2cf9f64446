# listing_optimizer/db/helpers.py
"""
Query helpers used by the quota ledger and the health probe.

Each helper borrows one pooled connection for one statement. Driver and
pool failures surface as DatabaseError so callers handle a single type.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg

from listing_optimizer.db.pool import get_db_connection
from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


@asynccontextmanager
async def _cursor(operation: str, query: str) -> AsyncGenerator[psycopg.AsyncCursor, None]:
    # RuntimeError covers an uninitialized or closed pool
    try:
        async with await get_db_connection() as conn:
            async with conn.cursor() as cur:
                yield cur
    except (psycopg.Error, RuntimeError) as e:
        logger.error("Database query failed", operation=operation, query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation=operation) from e


async def fetch_one(query: str, params: tuple = ()) -> dict[str, Any] | None:
    """Return the first row as a dict, or None when the query matches nothing."""
    async with _cursor("fetch_one", query) as cur:
        await cur.execute(query, params)
        return await cur.fetchone()


async def fetch_val(query: str, params: tuple = ()) -> Any:
    """Return the first column of the first row (counts, mostly)."""
    async with _cursor("fetch_val", query) as cur:
        await cur.execute(query, params)
        row = await cur.fetchone()
    return next(iter(row.values())) if row else None


async def execute_query(query: str, params: tuple = ()) -> int:
    """Run a write statement and return the affected row count."""
    async with _cursor("execute", query) as cur:
        await cur.execute(query, params)
        return cur.rowcount
