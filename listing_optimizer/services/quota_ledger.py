# listing_optimizer/services/quota_ledger.py
"""
Quota Ledger Service
Persists identity records and optimization events, and answers
"how many optimizations has this email run since midnight".

The daily limit is enforced by counting rows, not by a separate counter:
events are never deleted and the quota resets purely by the time window.
"""

from datetime import datetime
from typing import Any

from listing_optimizer.db.helpers import DatabaseError, execute_query, fetch_one, fetch_val
from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def start_of_day(now: datetime | None = None) -> datetime:
    """Server-local midnight of the current day as an aware datetime."""
    now = (now or datetime.now()).astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


class QuotaLedger:
    """Storage operations backing the daily optimization quota."""

    async def count_since(self, email: str, since: datetime) -> int:
        """
        Count optimization events for ``email`` created at or after ``since``.

        Raises:
            DatabaseError: If the storage layer is unavailable
        """
        count = await fetch_val(
            "SELECT count(*) FROM optimizations WHERE email = %s AND created_at >= %s",
            (email, since),
        )
        return int(count or 0)

    async def record_optimization(self, email: str, listing_url: str | None = None) -> None:
        """
        Record one successful optimization.

        Raises:
            DatabaseError: If the row was not written
        """
        rows = await execute_query(
            "INSERT INTO optimizations (email, listing_url) VALUES (%s, %s)",
            (email, listing_url),
        )
        if rows != 1:
            raise DatabaseError(
                f"Expected to insert 1 optimization row, inserted {rows}",
                operation="record_optimization",
            )

        logger.info("Optimization recorded", email=email, listing_url=listing_url)

    async def upsert_identity(self, email: str, name: str) -> bool:
        """
        Create the identity row for ``email`` unless it already exists.

        Returns:
            True if a new row was created, False if the email was already known
        """
        rows = await execute_query(
            "INSERT INTO emails (email, name) VALUES (%s, %s) ON CONFLICT (email) DO NOTHING",
            (email, name),
        )
        created = rows == 1
        logger.debug("Identity upserted", email=email, created=created)
        return created

    async def register_identity(self, email: str, name: str) -> dict[str, Any]:
        """
        Create or fetch the identity row for ``email``.

        Returns:
            The stored row (id, name, email). For a known email the existing
            row is returned unchanged.
        """
        row = await fetch_one(
            """
            INSERT INTO emails (email, name) VALUES (%s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING id, name, email
            """,
            (email, name),
        )
        if row is None:
            row = await fetch_one("SELECT id, name, email FROM emails WHERE email = %s", (email,))
        if row is None:
            raise DatabaseError("Identity row missing after upsert", operation="register_identity")

        return {"id": str(row["id"]), "name": row["name"], "email": row["email"]}

    async def total_optimizations(self) -> int:
        """Count all optimization events ever recorded."""
        count = await fetch_val("SELECT count(*) FROM optimizations")
        return int(count or 0)


# Singleton instance for application use
quota_ledger = QuotaLedger()
