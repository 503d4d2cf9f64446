"""
Idempotent DDL for the two tables the service owns.

emails          - one identity row per self-reported email address
optimizations   - one immutable row per successful optimization run
"""

from listing_optimizer.db.pool import get_db_transaction
from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS emails (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        CONSTRAINT emails_email_unique UNIQUE (email)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS optimizations (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        email TEXT NOT NULL,
        listing_url TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS optimizations_email_idx ON optimizations (email)",
    "CREATE INDEX IF NOT EXISTS optimizations_created_at_idx ON optimizations (created_at)",
]


async def ensure_schema() -> None:
    """Create tables and indexes if they are missing."""
    async with await get_db_transaction() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)

    logger.info("Database schema ensured", statements=len(SCHEMA_STATEMENTS))
