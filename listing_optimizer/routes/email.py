"""
Identity capture endpoint for first-time users.

Stores name and email without running an optimization. Validation is
deliberately light: the email only has to contain "@".
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from listing_optimizer.db.helpers import DatabaseError
from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.api.optimizer_request import EmailRegistrationRequest
from listing_optimizer.models.api.optimizer_response import (
    EmailRegistrationResponse,
    ErrorResponse,
)
from listing_optimizer.services.quota_ledger import quota_ledger

router = APIRouter(prefix="/api", tags=["identity"])
logger = get_logger(__name__)


@router.post(
    "/email",
    response_model=EmailRegistrationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def register_email(request: EmailRegistrationRequest):
    """Store a name/email pair. Submitting a known email returns the existing record."""
    name = (request.name or "").strip()
    if not name:
        return JSONResponse(status_code=400, content={"error": "Name is required"})

    if not request.email or "@" not in request.email:
        return JSONResponse(status_code=400, content={"error": "Valid email is required"})

    try:
        record = await quota_ledger.register_identity(request.email, name)
    except DatabaseError as e:
        logger.error("Error storing email", email=request.email, error=str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to store email"})

    logger.info("Email registered", email=record["email"])
    return EmailRegistrationResponse(**record)
