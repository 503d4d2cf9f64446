# listing_optimizer/services/openai_service.py
"""
OpenAI Service for listing extraction and optimization.
Thin async wrapper around the chat completions API: one request in, raw
response text out. Callers own parsing and failure classification.
"""

import json
from typing import Any

from openai import AsyncOpenAI

from listing_optimizer.config import settings
from listing_optimizer.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

JSON_FENCE = "```json"
FENCE = "```"


class OpenAIServiceError(Exception):
    """Base exception for OpenAI service errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.recoverable = recoverable


class OpenAIService:
    """
    Service for OpenAI API integration.

    The client is created on first use so the application can start (and be
    tested) without an API key. Retries are disabled: a failed call is
    reported to the user, who decides whether to resubmit.
    """

    def __init__(self):
        self.client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Create the async client lazily from settings."""
        if self.client is not None:
            return self.client

        if not settings.OPENAI_API_KEY:
            raise OpenAIServiceError("OPENAI_API_KEY not configured in settings", recoverable=False)

        self.client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            max_retries=0,
        )

        logger.info(
            "OpenAI client initialized",
            model=settings.OPENAI_MODEL,
            extraction_model=settings.OPENAI_EXTRACTION_MODEL,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )
        return self.client

    async def generate_json(
        self,
        *,
        system_message: str,
        user_message: str,
        model: str,
        response_schema: dict[str, Any] | None = None,
        schema_name: str = "response",
        web_search: bool = False,
        temperature: float | None = None,
    ) -> str:
        """
        Run a single chat completion expected to produce JSON text.

        Args:
            system_message: Fixed instruction for the model
            user_message: Request-specific input
            model: Model name
            response_schema: JSON schema enforced through structured outputs
            schema_name: Name reported to the API for the schema
            web_search: Let the model browse (search models only); structured
                outputs are not available in this mode, so the schema is
                appended to the instruction instead
            temperature: Sampling temperature, omitted when None

        Returns:
            Raw response text, possibly wrapped in a markdown code fence

        Raises:
            OpenAIServiceError: Client not configured or empty response
            openai.OpenAIError: Transport and API errors, unmodified
        """
        client = self._get_client()

        request: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            "max_tokens": settings.OPENAI_MAX_TOKENS,
        }

        if web_search:
            request["web_search_options"] = {}
            if response_schema:
                request["messages"][0]["content"] = (
                    f"{system_message}\n\nRespond with JSON matching this schema:\n"
                    f"{json.dumps(response_schema)}"
                )
        elif response_schema:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": response_schema, "strict": False},
            }
        else:
            request["response_format"] = {"type": "json_object"}

        if temperature is not None:
            request["temperature"] = temperature

        logger.debug("Calling OpenAI API", model=model, schema=schema_name, web_search=web_search)

        response = await client.chat.completions.create(**request)

        if not response.choices or not response.choices[0].message.content:
            raise OpenAIServiceError("Empty response from OpenAI API")

        result = response.choices[0].message.content.strip()

        logger.info(
            "OpenAI API call successful",
            model=model,
            schema=schema_name,
            response_length=len(result),
            usage_tokens=response.usage.total_tokens if response.usage else 0,
        )

        return result

    async def health_check(self) -> dict[str, Any]:
        """Configuration-only health check, no API call is made."""
        return {
            "healthy": bool(settings.OPENAI_API_KEY),
            "service": "openai_service",
            "client_initialized": self.client is not None,
            "configuration": {
                "model": settings.OPENAI_MODEL,
                "extraction_model": settings.OPENAI_EXTRACTION_MODEL,
                "max_tokens": settings.OPENAI_MAX_TOKENS,
                "timeout_seconds": settings.OPENAI_TIMEOUT_SECONDS,
            },
        }


def strip_code_fence(raw: str) -> str:
    """
    Remove one markdown code fence around a JSON payload.

    "```json\\n{...}\\n```" and "```\\n{...}\\n```" both become "{...}";
    unwrapped text is returned trimmed.
    """
    text = raw.strip()
    if text.startswith(JSON_FENCE):
        text = text[len(JSON_FENCE) :]
    elif text.startswith(FENCE):
        text = text[len(FENCE) :]
    else:
        return text

    if text.endswith(FENCE):
        text = text[: -len(FENCE)]
    return text.strip()


def parse_json_payload(raw: str) -> Any:
    """Strip an optional code fence and decode JSON. Raises json.JSONDecodeError."""
    return json.loads(strip_code_fence(raw))


# Singleton instance for application use
openai_service = OpenAIService()
