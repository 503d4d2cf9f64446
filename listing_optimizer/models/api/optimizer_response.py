# listing_optimizer/models/api/optimizer_response.py
from pydantic import BaseModel, ConfigDict, Field

from listing_optimizer.models.domain.listing_domain import OptimizationResult, RateLimitInfo


class OptimizationResponse(OptimizationResult):
    """Response for POST /api/optimizer"""

    rate_limit: RateLimitInfo = Field(..., alias="rateLimit")


class EmailRegistrationResponse(BaseModel):
    """Response for POST /api/email"""

    id: str
    name: str
    email: str


class AnalyticsResponse(BaseModel):
    """Response for GET /api/analytics"""

    model_config = ConfigDict(populate_by_name=True)

    total_optimizations: int = Field(..., alias="totalOptimizations")


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint. Extra keys carry structured detail."""

    model_config = ConfigDict(extra="allow")

    error: str
