"""
Product extraction: turns an Etsy listing URL into title, description and tags.

One AI call per request, no retries. Every failure is translated into one of
a fixed set of user-facing messages that the optimizer passes through as-is.
"""

import json

import openai
from pydantic import ValidationError

from listing_optimizer.config import settings
from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.domain.listing_domain import ProductDetails
from listing_optimizer.services.openai_service import (
    OpenAIServiceError,
    openai_service,
    parse_json_payload,
)

logger = get_logger(__name__)

EXTRACT_NETWORK_ERROR = (
    "Couldn't fetch the listing. Please check your internet connection and try again."
)
EXTRACT_TIMEOUT_ERROR = "The request timed out. Please try again in a moment."
EXTRACT_CONFIGURATION_ERROR = "Configuration error. Please contact support if this persists."
EXTRACT_FORMAT_ERROR = "Couldn't fetch the listing. The page format may have changed."
EXTRACT_MISSING_FIELDS_ERROR = "Missing required fields: title and description are required"
EXTRACT_DEFAULT_ERROR = "Couldn't fetch the listing. Please check the URL and try again."

EXTRACTION_PROMPT = (
    "Extract the product details from this Etsy listing page. "
    "Include the complete title, full description, and all tags. "
    "Return only a JSON object."
)

PRODUCT_DETAILS_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {
            "type": "string",
            "description": (
                "The complete and full product title exactly as it appears on the page. "
                "Do NOT truncate, summarize, or shorten the title in any way. Include ALL "
                "words, characters, and punctuation from the original title."
            ),
        },
        "description": {
            "type": "string",
            "description": (
                "A comprehensive description of the product, focusing on its function, "
                "material, size, customization options (if any), and intended "
                "audience/occasion. Include all relevant product details and specifications."
            ),
        },
        "tags": {
            "type": "array",
            "items": {"type": "string"},
            "description": (
                "All tags/keywords that are associated with the product listing. Include "
                "all tags exactly as they appear, without modification."
            ),
        },
    },
    "required": ["title", "description"],
}


class ProductExtractionError(Exception):
    """Raised when product details cannot be extracted from a listing URL."""

    def __init__(self, message: str, reason: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.reason = reason


async def extract_product_details(url: str) -> ProductDetails:
    """
    Extract product details from an Etsy listing.

    Args:
        url: A listing URL that already passed validation

    Returns:
        ProductDetails with non-empty title and description

    Raises:
        ProductExtractionError: With a user-facing message and a reason of
            network, timeout, configuration, parse, missing_fields or unknown
    """
    try:
        raw = await openai_service.generate_json(
            system_message=EXTRACTION_PROMPT,
            user_message=url,
            model=settings.OPENAI_EXTRACTION_MODEL,
            response_schema=PRODUCT_DETAILS_SCHEMA,
            schema_name="product_details",
            web_search=settings.OPENAI_EXTRACTION_WEB_SEARCH,
        )
        details = _parse_product_details(raw)

    except ProductExtractionError as e:
        logger.warning("Product extraction rejected", url=url, reason=e.reason)
        raise
    except Exception as e:
        error = _classify_extraction_error(e)
        logger.error(
            "Error extracting product details",
            url=url,
            reason=error.reason,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise error from e

    logger.info(
        "Product details extracted",
        url=url,
        title_length=len(details.title),
        description_length=len(details.description),
        tag_count=len(details.tags),
    )
    return details


def _parse_product_details(raw: str) -> ProductDetails:
    """Decode the AI response and enforce the required fields."""
    try:
        data = parse_json_payload(raw)
    except json.JSONDecodeError as e:
        raise ProductExtractionError(EXTRACT_FORMAT_ERROR, reason="parse") from e

    # Some responses wrap the object in a single-element list
    if isinstance(data, list):
        data = data[0] if data else None

    if not isinstance(data, dict):
        raise ProductExtractionError(EXTRACT_FORMAT_ERROR, reason="parse")

    # Tags are informational only; malformed entries never fail extraction
    tags = data.get("tags")
    tags = [tag for tag in tags if isinstance(tag, str)] if isinstance(tags, list) else []

    try:
        details = ProductDetails(
            title=data.get("title") or "",
            description=data.get("description") or "",
            tags=tags,
        )
    except ValidationError as e:
        raise ProductExtractionError(EXTRACT_FORMAT_ERROR, reason="parse") from e

    if not details.title.strip() or not details.description.strip():
        raise ProductExtractionError(EXTRACT_MISSING_FIELDS_ERROR, reason="missing_fields")

    return details


def _classify_extraction_error(error: Exception) -> ProductExtractionError:
    # APITimeoutError subclasses APIConnectionError, check it first
    if isinstance(error, openai.APITimeoutError):
        return ProductExtractionError(EXTRACT_TIMEOUT_ERROR, reason="timeout")
    if isinstance(error, openai.APIConnectionError):
        return ProductExtractionError(EXTRACT_NETWORK_ERROR, reason="network")
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ProductExtractionError(EXTRACT_CONFIGURATION_ERROR, reason="configuration")
    if isinstance(error, OpenAIServiceError) and not error.recoverable:
        return ProductExtractionError(EXTRACT_CONFIGURATION_ERROR, reason="configuration")
    return ProductExtractionError(EXTRACT_DEFAULT_ERROR, reason="unknown")
