"""
Listing generation: turns an extracted product description into optimized
titles, descriptions, tags and keyword categories.
"""

import json

import openai
from pydantic import ValidationError

from listing_optimizer.config import settings
from listing_optimizer.infrastructure.observability.logging import get_logger
from listing_optimizer.models.domain.listing_domain import OptimizationResult
from listing_optimizer.services.openai_service import openai_service, parse_json_payload
from listing_optimizer.services.prompts import OPTIMIZE_SYSTEM_PROMPT

logger = get_logger(__name__)

GENERATE_NETWORK_ERROR = "Optimization failed due to network issues. Please retry."
GENERATE_FORMAT_ERROR = "Optimization failed. The AI returned an unexpected format. Please retry."
GENERATE_RATE_LIMIT_ERROR = (
    "Optimization failed due to high demand. Please try again in a few moments."
)
GENERATE_DEFAULT_ERROR = "Optimization failed. Please retry in a few moments."

KEYWORD_CATEGORIES = ["anchor", "descriptive", "who", "what", "where", "when", "why"]


def _rated_items_schema(description: str, item_description: str) -> dict:
    return {
        "type": "array",
        "description": description,
        "items": {
            "type": "object",
            "properties": {
                "text": {"type": "string"},
                "score": {"type": "number", "description": item_description},
            },
            "required": ["text", "score"],
        },
    }


OPTIMIZATION_SCHEMA = {
    "type": "object",
    "properties": {
        "productType": {
            "type": "string",
            "description": (
                "A simple name for the product type, e.g. 'Custom Journal' or "
                "'Wooden Chopping Board'."
            ),
        },
        "keywords": {
            "type": "object",
            "properties": {
                category: {"type": "array", "items": {"type": "string"}}
                for category in KEYWORD_CATEGORIES
            },
            "required": KEYWORD_CATEGORIES,
        },
        "titles": _rated_items_schema(
            "An array of 5 distinct, fully constructed, comma-separated product titles. "
            "Each must be 140 characters or less.",
            "A score from 1-100 for the title's quality.",
        ),
        "descriptions": _rated_items_schema(
            "An array of 5 distinct product descriptions of 150-300 words each.",
            "A score from 1-100 for the description's quality.",
        ),
        "tags": _rated_items_schema(
            "An array of 30 distinct tag strings. Each must be 20 characters or less.",
            "A score from 1-100 for the tag's quality.",
        ),
    },
    # descriptions is recommended but not required
    "required": ["productType", "keywords", "titles", "tags"],
}


class ListingGenerationError(Exception):
    """Raised when the optimized listing cannot be generated."""

    def __init__(self, message: str, reason: str = "unknown"):
        super().__init__(message)
        self.message = message
        self.reason = reason


async def generate_optimized_listing(product_description: str) -> OptimizationResult:
    """
    Generate optimized listing content from a product description.

    Args:
        product_description: Description extracted from the listing

    Returns:
        OptimizationResult exactly as scored by the model (counts and
        score ranges are not enforced locally)

    Raises:
        ListingGenerationError: With a user-facing message and a reason of
            network, parse, rate_limited or unknown
    """
    try:
        raw = await openai_service.generate_json(
            system_message=OPTIMIZE_SYSTEM_PROMPT,
            user_message=product_description,
            model=settings.OPENAI_MODEL,
            response_schema=OPTIMIZATION_SCHEMA,
            schema_name="optimized_listing",
            temperature=settings.OPENAI_TEMPERATURE,
        )
        result = OptimizationResult.model_validate(parse_json_payload(raw))

    except Exception as e:
        error = _classify_generation_error(e)
        logger.error(
            "Error generating optimized listing",
            reason=error.reason,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise error from e

    logger.info(
        "Optimized listing generated",
        product_type=result.product_type,
        title_count=len(result.titles),
        description_count=len(result.descriptions),
        tag_count=len(result.tags),
    )
    if len(result.titles) != 5 or len(result.tags) != 30:
        logger.warning(
            "Generated listing has unexpected item counts",
            title_count=len(result.titles),
            tag_count=len(result.tags),
        )

    out_of_range = [
        item.score
        for item in (*result.titles, *result.descriptions, *result.tags)
        if not 1 <= item.score <= 100
    ]
    if out_of_range:
        logger.warning("Generated listing has scores outside 1-100", scores=out_of_range)

    return result


def _classify_generation_error(error: Exception) -> ListingGenerationError:
    # APITimeoutError is an APIConnectionError and reported as a network issue
    if isinstance(error, openai.APIConnectionError):
        return ListingGenerationError(GENERATE_NETWORK_ERROR, reason="network")
    if isinstance(error, (json.JSONDecodeError, ValidationError)):
        return ListingGenerationError(GENERATE_FORMAT_ERROR, reason="parse")
    if isinstance(error, openai.RateLimitError):
        return ListingGenerationError(GENERATE_RATE_LIMIT_ERROR, reason="rate_limited")
    return ListingGenerationError(GENERATE_DEFAULT_ERROR, reason="unknown")
