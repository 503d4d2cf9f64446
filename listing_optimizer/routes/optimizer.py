"""
optimizer.py
------------
Purpose:
    API endpoint for Etsy listing optimization.

Architecture:
    - API layer: Parses the request body and maps failures to JSON error bodies
    - Service layer: optimizer_service runs the pipeline and raises OptimizerError

Usage:
    POST /api/optimizer  {"url": ..., "email": ..., "name": ...}
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.api.optimizer_request import OptimizeListingRequest
from listing_optimizer.models.api.optimizer_response import ErrorResponse, OptimizationResponse
from listing_optimizer.services.optimizer_service import (
    UNEXPECTED_ERROR_MESSAGE,
    OptimizerError,
    optimize_listing,
)

router = APIRouter(prefix="/api", tags=["optimizer"])
logger = get_logger(__name__)


@router.post(
    "/optimizer",
    response_model=OptimizationResponse,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def optimize(request: OptimizeListingRequest):
    """
    Generate optimized titles, descriptions, tags and keywords for a listing.

    Returns:
        OptimizationResponse: Generated content with remaining daily quota

    Raises:
        400: Missing field, invalid URL or listing could not be extracted
        429: Daily optimization limit reached
        500: Generation, storage or unexpected failure
    """
    try:
        return await optimize_listing(request.url, request.email, request.name)

    except OptimizerError as e:
        if e.status_code >= 500:
            logger.error("Optimization failed", status_code=e.status_code, error=e.message)
        else:
            logger.info("Optimization rejected", status_code=e.status_code, error=e.message)
        return JSONResponse(status_code=e.status_code, content=e.to_body())

    except Exception:
        logger.exception("Unexpected error during optimization")
        return JSONResponse(status_code=500, content={"error": UNEXPECTED_ERROR_MESSAGE})
