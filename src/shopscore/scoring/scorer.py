"""Sub-score calculators and the single-product scorer.

Sub-scores (each in [0, 1]):
| Score   | Driven by                                  |
|---------|--------------------------------------------|
| Profit  | Linear ramp from min margin to 40% margin  |
| Review  | Rating, with leniency for few reviews      |
| Trend   | Discount, units sold, badges               |

Final Score = Profit × profit_weight + Review × review_weight + Trend × trend_weight
"""

import math

from shopscore.scoring.calculator import calculate_profit, calculate_selling_price
from shopscore.scoring.filters import apply_threshold_gate
from shopscore.scoring.identity import IdFactory, resolve_product_id, resolve_product_name
from shopscore.scoring.models import (
    RawProduct,
    ScoreBreakdown,
    ScoredProduct,
    ScoringConfig,
    ScoringThresholds,
    ScoringWeights,
)

# Score given to products without any reviews
NO_REVIEWS_SCORE = 0.3

# Cap on review score while review count is below the minimum
FEW_REVIEWS_MAX_SCORE = 0.6

BEST_SELLER_BADGE = "best_seller"
NEW_ARRIVAL_BADGE = "new_arrival"


def calculate_profit_score(
    profit_margin: float,
    thresholds: ScoringThresholds,
    target_margin: float = 40.0,
) -> float:
    """Calculate profit score (0-1).

    0 below the minimum margin, 1 at or above the target margin, linear
    in between.

    Args:
        profit_margin: Profit margin as percentage
        thresholds: Provides the minimum margin (as fraction)
        target_margin: Margin (percentage) that earns full score

    Returns:
        Profit score in [0, 1]
    """
    min_margin = thresholds.min_profit_margin * 100

    if profit_margin < min_margin:
        return 0.0
    if profit_margin >= target_margin:
        return 1.0

    return (profit_margin - min_margin) / (target_margin - min_margin)


def calculate_review_score(
    rating: float,
    review_count: int,
    thresholds: ScoringThresholds,
) -> float:
    """Calculate review score (0-1).

    Marketplaces differ a lot in review density, so thin review data is
    scored leniently:
    - No reviews: fixed 0.3
    - Below minimum count: rating share of 0.6, scaled from half to full
      as the count approaches the minimum
    - Enough reviews: rating / 5 plus a log-scaled popularity bonus
      (capped at 0.2), capped at 1

    A rating below the minimum review score gives 0 whenever reviews exist.
    """
    if review_count <= 0:
        return NO_REVIEWS_SCORE

    if rating < thresholds.min_review_score:
        return 0.0

    if review_count < thresholds.min_review_count:
        rating_score = (rating / 5) * FEW_REVIEWS_MAX_SCORE
        review_ratio = review_count / thresholds.min_review_count
        return rating_score * (0.5 + review_ratio * 0.5)

    rating_score = rating / 5
    review_bonus = min(math.log10(review_count) / 2, 0.2)
    return min(rating_score + review_bonus, 1.0)


def calculate_trend_score(product: RawProduct) -> float:
    """Calculate trend/demand score (0-1).

    Discount and sales volume each contribute their highest matching tier;
    badges add on top. The sum is capped at 1.
    """
    contributions: list[float] = []

    # --- Discount (0.3 max) ---
    discount = product.discount_rate
    if discount >= 30:
        contributions.append(0.3)
    elif discount >= 20:
        contributions.append(0.2)
    elif discount >= 10:
        contributions.append(0.1)

    # --- Sales volume (0.4 max) ---
    sold = product.units_sold
    if sold >= 1000:
        contributions.append(0.4)
    elif sold >= 500:
        contributions.append(0.3)
    elif sold >= 100:
        contributions.append(0.2)

    # --- Badges ---
    if BEST_SELLER_BADGE in product.badges:
        contributions.append(0.2)
    if NEW_ARRIVAL_BADGE in product.badges:
        contributions.append(0.1)

    # fsum keeps 0.3 + 0.4 + 0.2 + 0.1 at exactly 1.0
    return min(math.fsum(contributions), 1.0)


def calculate_final_score(
    profit_score: float,
    review_score: float,
    trend_score: float,
    weights: ScoringWeights,
) -> float:
    """Weighted sum of sub-scores. Not clamped; weights are not renormalized."""
    final_score = (
        profit_score * weights.profit_weight
        + review_score * weights.review_weight
        + trend_score * weights.trend_weight
    )
    # NaN/inf weights must not reach the ranking sort
    return final_score if math.isfinite(final_score) else 0.0


def score_product(
    product: RawProduct,
    config: ScoringConfig | None = None,
    id_factory: IdFactory | None = None,
) -> ScoredProduct:
    """Calculate complete score for a product.

    This is the main entry point for scoring a product.
    It prices the product, computes sub-scores and the final score, and
    applies the threshold gate.

    Args:
        product: Normalized product to score
        config: Scoring configuration, already merged with any
            per-request criteria (uses defaults if None)
        id_factory: Id generator for products without id or URL

    Returns:
        Complete ScoredProduct
    """
    if config is None:
        config = ScoringConfig()

    thresholds = config.thresholds

    # Calculate pricing
    cost_price = product.cost_price
    selling_price = calculate_selling_price(cost_price, config)
    profit = calculate_profit(
        cost_price,
        selling_price,
        shipping_fee=product.shipping_fee,
        fee_model=config.fee_model,
    )

    # Calculate scores
    profit_score = calculate_profit_score(
        profit.profit_margin, thresholds, config.target_profit_margin
    )
    review_score = calculate_review_score(product.rating, product.review_count, thresholds)
    trend_score = calculate_trend_score(product)
    final_score = calculate_final_score(profit_score, review_score, trend_score, config.weights)

    gate = apply_threshold_gate(
        rating=product.rating,
        review_count=product.review_count,
        profit_margin=profit.profit_margin,
        final_score=final_score,
        thresholds=thresholds,
    )

    return ScoredProduct(
        product_id=resolve_product_id(product, id_factory),
        product_name=resolve_product_name(product),
        cost_price=cost_price,
        selling_price=profit.selling_price,
        net_profit=profit.net_profit,
        profit_margin=profit.profit_margin,
        scores=ScoreBreakdown(
            profit_score=profit_score,
            review_score=review_score,
            trend_score=trend_score,
            final_score=final_score,
        ),
        meets_thresholds=gate.passed,
        rejection_reasons=tuple(gate.reasons),
        rating=product.rating,
        review_count=product.review_count,
        source=product.source,
    )
