import copy
from datetime import datetime, timedelta
from types import SimpleNamespace

import httpx
import openai
import pytest

from listing_optimizer.models.domain.listing_domain import ProductDetails

LISTING_URL = "https://www.etsy.com/listing/1234567890/test-product"

OPTIMIZATION_PAYLOAD = {
    "productType": "Wooden Chopping Board",
    "keywords": {
        "anchor": ["Chopping Board", "Cutting Board", "Serving Board"],
        "descriptive": ["Personalized", "Wood", "Oak", "Engraved", "Thick", "Handmade"],
        "who": ["Mom", "Chef", "Couple"],
        "what": ["Cutting", "Food Prep", "Serving"],
        "where": ["Kitchen", "Dining Room"],
        "when": ["Housewarming", "Wedding", "Christmas"],
        "why": ["Gift", "Keepsake"],
    },
    "titles": [{"text": f"Personalized Oak Chopping Board, Title {i}", "score": 90 - i} for i in range(5)],
    "descriptions": [{"text": f"Description variant {i}", "score": 80 + i} for i in range(5)],
    "tags": [{"text": f"oak board gift {i}", "score": 70 + i} for i in range(30)],
}


class FakeQuotaLedger:
    """In-memory stand-in for QuotaLedger with the same async interface."""

    def __init__(self):
        self.identities: dict[str, dict] = {}
        self.events: list[dict] = []

    def seed_events(self, email: str, count: int, *, days_ago: int = 0) -> None:
        created_at = datetime.now().astimezone() - timedelta(days=days_ago)
        for _ in range(count):
            self.events.append({"email": email, "listing_url": None, "created_at": created_at})

    def events_for(self, email: str) -> list[dict]:
        return [event for event in self.events if event["email"] == email]

    async def count_since(self, email: str, since: datetime) -> int:
        return sum(
            1 for event in self.events if event["email"] == email and event["created_at"] >= since
        )

    async def record_optimization(self, email: str, listing_url: str | None = None) -> None:
        self.events.append(
            {
                "email": email,
                "listing_url": listing_url,
                "created_at": datetime.now().astimezone(),
            }
        )

    async def upsert_identity(self, email: str, name: str) -> bool:
        if email in self.identities:
            return False
        self.identities[email] = {"id": f"id-{len(self.identities) + 1}", "name": name, "email": email}
        return True

    async def register_identity(self, email: str, name: str) -> dict:
        await self.upsert_identity(email, name)
        return dict(self.identities[email])

    async def total_optimizations(self) -> int:
        return len(self.events)


class FakeOpenAIService:
    """Returns queued responses (or raises queued exceptions) from generate_json."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    async def generate_json(self, **kwargs) -> str:
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def optimization_payload():
    return copy.deepcopy(OPTIMIZATION_PAYLOAD)


@pytest.fixture
def product_details():
    return ProductDetails(
        title="Personalized Oak Chopping Board",
        description="A thick oak chopping board engraved with your family name.",
        tags=["chopping board", "oak"],
    )


@pytest.fixture
def fake_ledger(monkeypatch):
    ledger = FakeQuotaLedger()
    monkeypatch.setattr("listing_optimizer.services.optimizer_service.quota_ledger", ledger)
    monkeypatch.setattr("listing_optimizer.routes.email.quota_ledger", ledger)
    monkeypatch.setattr("listing_optimizer.routes.analytics.quota_ledger", ledger)
    return ledger


@pytest.fixture
def fake_openai_service():
    return FakeOpenAIService


@pytest.fixture
def openai_error():
    """Build openai exceptions the way the SDK raises them."""
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")

    def _build(kind: str) -> Exception:
        if kind == "connection":
            return openai.APIConnectionError(request=request)
        if kind == "timeout":
            return openai.APITimeoutError(request=request)
        if kind == "rate_limit":
            return openai.RateLimitError(
                "You exceeded your current quota",
                response=httpx.Response(429, request=request),
                body=None,
            )
        if kind == "authentication":
            return openai.AuthenticationError(
                "Incorrect API key provided",
                response=httpx.Response(401, request=request),
                body=None,
            )
        if kind == "server":
            return openai.InternalServerError(
                "The server had an error",
                response=httpx.Response(500, request=request),
                body=None,
            )
        raise ValueError(f"Unknown error kind: {kind}")

    return _build


@pytest.fixture
def fake_chat_completion():
    """Build a minimal chat completion response object."""

    def _build(content: str | None, total_tokens: int = 42):
        message = SimpleNamespace(content=content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(total_tokens=total_tokens),
        )

    return _build
