from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductDetails(BaseModel):
    """Product details extracted from a listing page. Never persisted."""

    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class RatedItem(BaseModel):
    """A generated title, description or tag with its AI-assigned score (1-100)."""

    text: str
    # Kept exactly as returned by the model, no clamping
    score: int | float


class KeywordCategories(BaseModel):
    """The seven keyword buckets used to brainstorm search terms."""

    anchor: list[str]
    descriptive: list[str]
    who: list[str]
    what: list[str]
    where: list[str]
    when: list[str]
    why: list[str]


class OptimizationResult(BaseModel):
    """Optimized listing content returned by the generation step."""

    model_config = ConfigDict(populate_by_name=True)

    product_type: str = Field(..., alias="productType")
    keywords: KeywordCategories
    titles: list[RatedItem]
    descriptions: list[RatedItem] = Field(default_factory=list)
    tags: list[RatedItem]

    @field_validator("descriptions", mode="before")
    @classmethod
    def null_descriptions_to_empty(cls, value):
        # Optional in the generation contract; the model sometimes sends null
        return [] if value is None else value


class RateLimitInfo(BaseModel):
    """Remaining daily quota for an email address."""

    model_config = ConfigDict(populate_by_name=True)

    remaining: int
    max_per_day: int = Field(..., alias="maxPerDay")
