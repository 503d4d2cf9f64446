from fastapi import APIRouter
from fastapi.responses import JSONResponse

from listing_optimizer.db.helpers import DatabaseError
from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.api.optimizer_response import AnalyticsResponse, ErrorResponse
from listing_optimizer.services.quota_ledger import quota_ledger

router = APIRouter(prefix="/api", tags=["analytics"])
logger = get_logger(__name__)


@router.get("/analytics", response_model=AnalyticsResponse, responses={500: {"model": ErrorResponse}})
async def analytics():
    """Total number of optimizations run, for the landing page counter."""
    try:
        total = await quota_ledger.total_optimizations()
    except DatabaseError as e:
        logger.error("Error fetching analytics", error=str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to fetch analytics"})

    return AnalyticsResponse(total_optimizations=total)
