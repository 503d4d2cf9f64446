# listing_optimizer/models/api/optimizer_request.py
from pydantic import BaseModel, Field


# Fields are optional here so the route can answer with its own
# "X is required" messages instead of a generic validation error.
class OptimizeListingRequest(BaseModel):
    """Request body for POST /api/optimizer."""

    url: str | None = Field(None, description="Etsy listing URL")
    email: str | None = Field(None, description="Self-reported email, used as the quota key")
    name: str | None = Field(None, description="Display name")


class EmailRegistrationRequest(BaseModel):
    """Request body for POST /api/email (first-time user capture)."""

    name: str | None = None
    email: str | None = None
