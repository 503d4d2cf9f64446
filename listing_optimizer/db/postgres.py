"""
Database connectivity check used by the health endpoints.
"""

from listing_optimizer.db.helpers import fetch_one
from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


async def check_db():
    """
    Returns True if SELECT 1 succeeds, otherwise the error string.
    """
    try:
        row = await fetch_one("SELECT 1")

        if row and list(row.values())[0] == 1:
            return True
        else:
            return "Unexpected result from database check"

    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return str(e)
