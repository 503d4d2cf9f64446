from unittest.mock import AsyncMock

import pytest
import structlog
from fastapi.testclient import TestClient

from listing_optimizer.main import app
from listing_optimizer.models.domain.listing_domain import OptimizationResult
from listing_optimizer.services.listing_generator import (
    GENERATE_NETWORK_ERROR,
    ListingGenerationError,
)
from listing_optimizer.services.optimizer_service import DAILY_LIMIT_MESSAGE

LISTING_URL = "https://www.etsy.com/listing/1234567890/test-product"
BODY = {"url": LISTING_URL, "email": "test@example.com", "name": "Test User"}


@pytest.fixture
def client(monkeypatch, fake_ledger, product_details, optimization_payload):
    monkeypatch.setattr(
        "listing_optimizer.services.optimizer_service.extract_product_details",
        AsyncMock(return_value=product_details),
    )
    monkeypatch.setattr(
        "listing_optimizer.services.optimizer_service.generate_optimized_listing",
        AsyncMock(return_value=OptimizationResult.model_validate(optimization_payload)),
    )
    monkeypatch.setattr(
        "listing_optimizer.services.optimizer_service.settings.MAX_OPTIMIZATIONS_PER_DAY", 5
    )
    monkeypatch.setattr(
        "listing_optimizer.services.optimizer_service.settings.CONTACT_EMAIL", "help@example.com"
    )
    return TestClient(app)


def test_optimize_returns_camel_case_body(client, fake_ledger):
    response = client.post("/api/optimizer", json=BODY)

    assert response.status_code == 200
    data = response.json()
    assert data["productType"] == "Wooden Chopping Board"
    assert data["rateLimit"] == {"remaining": 4, "maxPerDay": 5}
    assert set(data["keywords"]) == {"anchor", "descriptive", "who", "what", "where", "when", "why"}
    assert len(data["titles"]) == 5
    assert len(data["tags"]) == 30
    assert data["titles"][0] == {"text": "Personalized Oak Chopping Board, Title 0", "score": 90}
    assert "product_type" not in data
    assert len(fake_ledger.events_for("test@example.com")) == 1


def test_limit_reached_returns_429_body(client, fake_ledger):
    fake_ledger.seed_events("test@example.com", 5)

    response = client.post("/api/optimizer", json=BODY)

    assert response.status_code == 429
    assert response.json() == {
        "error": DAILY_LIMIT_MESSAGE,
        "rateLimitExceeded": True,
        "contactEmail": "help@example.com",
        "remaining": 0,
        "maxPerDay": 5,
    }


def test_missing_name_returns_400(client):
    response = client.post("/api/optimizer", json={"url": LISTING_URL, "email": "test@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Name is required"}


def test_non_listing_url_returns_400(client):
    response = client.post("/api/optimizer", json={**BODY, "url": "https://www.etsy.com/shop/MyShop"})

    assert response.status_code == 400
    assert "listing" in response.json()["error"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"content": "not json", "headers": {"Content-Type": "application/json"}},
        {"json": {"url": 123, "email": "test@example.com", "name": "Test User"}},
        {"json": ["a", "list"]},
    ],
)
def test_malformed_body_returns_400(client, kwargs):
    response = client.post("/api/optimizer", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_generation_failure_returns_500(client, monkeypatch, fake_ledger):
    monkeypatch.setattr(
        "listing_optimizer.services.optimizer_service.generate_optimized_listing",
        AsyncMock(side_effect=ListingGenerationError(GENERATE_NETWORK_ERROR, reason="network")),
    )

    response = client.post("/api/optimizer", json=BODY)

    assert response.status_code == 500
    assert response.json() == {"error": GENERATE_NETWORK_ERROR}
    assert fake_ledger.events_for("test@example.com") == []


def test_unexpected_exception_returns_generic_500(client, monkeypatch):
    monkeypatch.setattr(
        "listing_optimizer.routes.optimizer.optimize_listing",
        AsyncMock(side_effect=RuntimeError("boom")),
    )

    response = client.post("/api/optimizer", json=BODY)

    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred. Please try again."}


def test_request_id_is_echoed(client):
    response = client.post("/api/optimizer", json=BODY, headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_log_line_carries_request_id(client, monkeypatch):
    logged = []

    def record_request(**fields):
        logged.append({**structlog.contextvars.get_contextvars(), **fields})

    monkeypatch.setattr("listing_optimizer.main.log_request", record_request)

    client.post("/api/optimizer", json=BODY, headers={"X-Request-ID": "req-456"})

    assert len(logged) == 1
    assert logged[0]["request_id"] == "req-456"
    assert logged[0]["path"] == "/api/optimizer"
    assert logged[0]["status_code"] == 200


def test_request_id_is_generated(client):
    response = client.get("/healthz")

    assert response.headers["X-Request-ID"]


def test_cors_preflight_for_allowed_origin(client):
    response = client.options(
        "/api/optimizer",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


def test_cors_preflight_for_unknown_origin(client):
    response = client.options(
        "/api/optimizer",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 403
