# listing_optimizer/services/optimizer_service.py
"""
Optimizer Service
Runs one listing optimization request end to end:

    validate -> check quota -> capture identity -> extract -> generate
    -> record event -> respond

Stages run strictly in sequence. Each failure raises OptimizerError carrying
the HTTP status and user-facing message; messages coming from the extraction
and generation steps are passed through unchanged.

The quota is checked once, before the AI calls, and the event is written
after them with no lock in between. Two concurrent requests from the same
email can therefore both pass the check and record max + 1 events for the day.
"""

from typing import Any

from listing_optimizer.config import settings
from listing_optimizer.db.helpers import DatabaseError
from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.api.optimizer_response import OptimizationResponse
from listing_optimizer.models.domain.listing_domain import RateLimitInfo
from listing_optimizer.services.extract_service import (
    ProductExtractionError,
    extract_product_details,
)
from listing_optimizer.services.listing_generator import (
    ListingGenerationError,
    generate_optimized_listing,
)
from listing_optimizer.services.quota_ledger import quota_ledger, start_of_day
from listing_optimizer.services.url_validator import validate_listing_url

logger = get_logger(__name__)

DAILY_LIMIT_MESSAGE = "Daily limit reached. Request more access:"
EXTRACTION_EMPTY_MESSAGE = "Could not extract product details from the URL."
RECORD_FAILED_MESSAGE = "Failed to record optimization. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class OptimizerError(Exception):
    """A terminal pipeline failure with its HTTP status and response extras."""

    def __init__(self, message: str, status_code: int, extra: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.extra = extra or {}

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class QuotaExceededError(OptimizerError):
    """Raised when the email has used its daily optimizations."""

    def __init__(self, max_per_day: int, contact_email: str):
        super().__init__(
            DAILY_LIMIT_MESSAGE,
            status_code=429,
            extra={
                "rateLimitExceeded": True,
                "contactEmail": contact_email,
                "remaining": 0,
                "maxPerDay": max_per_day,
            },
        )


async def optimize_listing(url: str | None, email: str | None, name: str | None) -> OptimizationResponse:
    """
    Optimize an Etsy listing for a self-reported user.

    Args:
        url: Etsy listing URL
        email: Quota key, not verified
        name: Display name stored with the identity record

    Returns:
        OptimizationResponse: generated content plus remaining quota

    Raises:
        OptimizerError: Any terminal failure, see module docstring
    """
    # Validated; the trimmed URL is what gets extracted and recorded
    url = url.strip() if isinstance(url, str) else url
    if not url:
        raise OptimizerError("URL is required", 400)
    if not email:
        raise OptimizerError("Email is required", 400)
    if not name or not name.strip():
        raise OptimizerError("Name is required", 400)

    validation = validate_listing_url(url)
    if not validation.is_valid:
        logger.info("Rejected listing URL", url=url, error=validation.error)
        raise OptimizerError(validation.error, 400)

    # QuotaChecked
    max_per_day = settings.MAX_OPTIMIZATIONS_PER_DAY
    try:
        used_today = await quota_ledger.count_since(email, start_of_day())
    except DatabaseError as e:
        logger.error("Quota check failed", email=email, error=str(e))
        raise OptimizerError(UNEXPECTED_ERROR_MESSAGE, 500) from e

    remaining = max_per_day - used_today
    if used_today >= max_per_day:
        logger.warning(
            "Daily optimization limit reached",
            email=email,
            used_today=used_today,
            max_per_day=max_per_day,
        )
        raise QuotaExceededError(max_per_day, settings.contact_email())

    # IdentityRecorded: never affects the outcome
    try:
        await quota_ledger.upsert_identity(email, name.strip())
    except DatabaseError as e:
        logger.warning("Identity capture failed, continuing", email=email, error=str(e))

    # Extracted
    try:
        details = await extract_product_details(url)
    except ProductExtractionError as e:
        raise OptimizerError(e.message, 400) from e

    if not details.title or not details.description:
        raise OptimizerError(EXTRACTION_EMPTY_MESSAGE, 400)

    # Generated
    try:
        result = await generate_optimized_listing(details.description)
    except ListingGenerationError as e:
        raise OptimizerError(e.message, 500) from e

    # QuotaRecorded
    try:
        await quota_ledger.record_optimization(email, url)
    except DatabaseError as e:
        logger.error(
            "Optimization succeeded but was not recorded against quota",
            email=email,
            url=url,
            error=str(e),
        )
        raise OptimizerError(RECORD_FAILED_MESSAGE, 500) from e

    logger.info(
        "Listing optimized",
        email=email,
        url=url,
        remaining=remaining - 1,
        max_per_day=max_per_day,
    )

    # Responded: remaining is derived from the pre-call count
    return OptimizationResponse(
        **result.model_dump(),
        rate_limit=RateLimitInfo(remaining=remaining - 1, max_per_day=max_per_day),
    )
