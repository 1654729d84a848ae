"""Data models for product scoring.

All models are immutable once constructed. Request-facing models accept
camelCase keys (``profitWeight``) as well as snake_case, and serialize
camelCase when dumped ``by_alias``.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shopscore.scoring import parsing


class FrozenModel(BaseModel):
    """Base for immutable, camelCase-aliased models."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PriceTier(FrozenModel):
    """Markup band over cost price. ``max=None`` means open-ended."""

    min: float = Field(..., description="Lower bound (inclusive)")
    max: Optional[float] = Field(None, description="Upper bound (inclusive), None for top band")
    markup: float = Field(..., description="Markup fraction (0.20 = 20%)")

    def contains(self, cost_price: float) -> bool:
        if self.max is None:
            return cost_price >= self.min
        return self.min <= cost_price <= self.max


DEFAULT_PRICE_TIERS: tuple[PriceTier, ...] = (
    PriceTier(min=1, max=50, markup=0.20),
    PriceTier(min=51, max=200, markup=0.30),
    PriceTier(min=201, max=None, markup=0.40),
)


class FeeModel(FrozenModel):
    """Storefront transaction fees applied to the selling price."""

    transaction_fee_rate: float = Field(0.029, description="Percentage fee (default 2.9%)")
    fixed_fee: float = Field(0.30, description="Fixed fee per transaction")


class ScoringWeights(FrozenModel):
    """Weights for the final score. Not renormalized; need not sum to 1."""

    profit_weight: float = 0.60
    review_weight: float = 0.40
    trend_weight: float = 0.00


class ScoringThresholds(FrozenModel):
    """Qualification thresholds."""

    min_review_score: float = Field(2.0, description="Minimum rating (0-5)")
    min_review_count: int = Field(10, description="Reviews needed for full review credit")
    min_profit_margin: float = Field(0.20, description="Minimum margin as fraction (0.20 = 20%)")
    min_final_score: float = Field(0.50, description="Minimum final score")


class ScoringConfig(FrozenModel):
    """Configuration for scoring calculations."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    thresholds: ScoringThresholds = Field(default_factory=ScoringThresholds)
    price_tiers: tuple[PriceTier, ...] = DEFAULT_PRICE_TIERS
    fee_model: FeeModel = Field(default_factory=FeeModel)

    default_markup: float = Field(0.20, description="Markup when cost falls in no tier")
    target_profit_margin: float = Field(
        40.0, description="Margin (percent) at which the profit score saturates"
    )
    candidate_limit: int = Field(20, ge=0, description="Top-N handed to AI re-ranking")


# --- Per-request overrides ---


class WeightsOverride(FrozenModel):
    """Partial weights; unset fields fall back to the configured default."""

    profit_weight: Optional[float] = None
    review_weight: Optional[float] = None
    trend_weight: Optional[float] = None


class ThresholdsOverride(FrozenModel):
    """Partial thresholds; unset fields fall back to the configured default."""

    min_review_score: Optional[float] = None
    min_review_count: Optional[int] = None
    min_profit_margin: Optional[float] = None
    min_final_score: Optional[float] = None


class ScoringCriteria(FrozenModel):
    """Caller-supplied override of the configured weights and thresholds."""

    weights: Optional[WeightsOverride] = None
    thresholds: Optional[ThresholdsOverride] = None


def _overlay(default: BaseModel, override: Optional[BaseModel]) -> Any:
    if override is None:
        return default
    updates = {k: v for k, v in override.model_dump().items() if v is not None}
    if not updates:
        return default
    # Re-validate so the result is a fresh, fully typed instance
    return type(default).model_validate({**default.model_dump(), **updates})


def merge_criteria(
    config: ScoringConfig,
    criteria: Optional[ScoringCriteria] = None,
) -> ScoringConfig:
    """Apply a per-request override on top of the configured defaults.

    Each non-null override field replaces the matching default field;
    everything else keeps its configured value. Weight sums and negative
    thresholds are not validated: the caller owns that policy.

    Args:
        config: Configured defaults
        criteria: Optional per-request override

    Returns:
        New ScoringConfig (``config`` is left untouched)
    """
    if criteria is None:
        return config

    weights = _overlay(config.weights, criteria.weights)
    thresholds = _overlay(config.thresholds, criteria.thresholds)
    if weights is config.weights and thresholds is config.thresholds:
        return config
    return config.model_copy(update={"weights": weights, "thresholds": thresholds})


# --- Engine input ---


class RawProduct(FrozenModel):
    """Canonical product record handed to the scorer.

    Marketplace-specific field names are mapped onto this shape by the
    normalizers; values are coerced permissively so malformed scraped
    data never raises.
    """

    id: Optional[str] = Field(None, description="Source product id")
    name: Optional[str] = Field(None, description="Display name")
    title: Optional[str] = Field(None, description="Alternate display name")
    url: Optional[str] = Field(None, description="Product page URL")

    cost_price: float = Field(0.0, description="Cost price in source currency")
    shipping_fee: float = Field(0.0, description="Shipping cost borne by the seller")
    rating: float = Field(0.0, description="Average rating (0-5), 0 if unknown")
    review_count: int = Field(0, description="Number of reviews/ratings")
    discount_rate: float = Field(0.0, description="Discount percentage (0-100)")
    units_sold: int = Field(0, description="Units sold")
    badges: tuple[str, ...] = Field(default=(), description="Marketplace badge codes")

    source: Optional[str] = Field(None, description="Marketplace the record came from")

    @field_validator("id", "name", "title", "url", "source", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return parsing.to_text(value)

    @field_validator("cost_price", "shipping_fee", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return parsing.parse_price(value)

    @field_validator("rating", "discount_rate", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float:
        return parsing.to_float(value)

    @field_validator("review_count", "units_sold", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return parsing.parse_count(value)

    @field_validator("badges", mode="before")
    @classmethod
    def _coerce_badges(cls, value: Any) -> tuple[str, ...]:
        return parsing.parse_badges(value)


# --- Engine output ---


class ProfitBreakdown(FrozenModel):
    """Result of the profit calculation for one selling price."""

    selling_price: float
    shopify_fee: float
    shipping_fee: float
    total_cost: float
    net_profit: float
    profit_margin: float = Field(..., description="Percentage of selling price, can be negative")


class ScoreBreakdown(FrozenModel):
    """Sub-scores in [0, 1] and their weighted sum."""

    profit_score: float
    review_score: float
    trend_score: float
    final_score: float


class ScoredProduct(FrozenModel):
    """Calculated score for a product."""

    # Product reference
    product_id: str
    product_name: str

    # Calculated financials
    cost_price: float
    selling_price: float
    net_profit: float
    profit_margin: float = Field(..., description="Net profit as percentage of selling price")

    scores: ScoreBreakdown

    # Gate result
    meets_thresholds: bool
    rejection_reasons: tuple[str, ...] = Field(
        default=(), description="Why the product failed the threshold gate"
    )

    # Carried through for display
    rating: float
    review_count: int
    source: Optional[str] = None
