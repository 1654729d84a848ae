"""Threshold gate for product qualification.

A product qualifies when all three conditions hold:
- Review condition (lenient for thin review data, see below)
- Profit margin >= minimum profit margin
- Final score >= minimum final score

Review condition:
- No reviews at all: passes (profit and final score carry the product)
- Fewer reviews than the minimum: rating >= 3.0, a fixed floor
- Enough reviews: rating >= configured minimum review score
"""

from dataclasses import dataclass, field

from shopscore.scoring.models import ScoringThresholds

# Rating floor for products with some, but not enough, reviews
FEW_REVIEWS_MIN_RATING = 3.0


@dataclass
class GateResult:
    """Result of applying the threshold gate to a product."""

    passed: bool
    reasons: list[str] = field(default_factory=list)

    def add_rejection(self, reason: str) -> None:
        """Add a rejection reason."""
        self.passed = False
        self.reasons.append(reason)


def meets_review_threshold(
    rating: float,
    review_count: int,
    thresholds: ScoringThresholds,
) -> bool:
    """Check the review condition of the gate."""
    if review_count <= 0:
        return True
    if review_count < thresholds.min_review_count:
        return rating >= FEW_REVIEWS_MIN_RATING
    return rating >= thresholds.min_review_score


def apply_threshold_gate(
    rating: float,
    review_count: int,
    profit_margin: float,
    final_score: float,
    thresholds: ScoringThresholds,
) -> GateResult:
    """Apply the qualification gate to one scored product.

    Args:
        rating: Product rating (0-5)
        review_count: Number of reviews
        profit_margin: Profit margin as percentage
        final_score: Weighted final score
        thresholds: Qualification thresholds

    Returns:
        GateResult with pass/fail and rejection reasons
    """
    result = GateResult(passed=True)

    if not meets_review_threshold(rating, review_count, thresholds):
        if review_count < thresholds.min_review_count:
            result.add_rejection(
                f"Rating {rating:.1f} < {FEW_REVIEWS_MIN_RATING:.1f} "
                f"with only {review_count} reviews"
            )
        else:
            result.add_rejection(
                f"Rating {rating:.1f} < minimum {thresholds.min_review_score:.1f}"
            )

    min_margin_pct = thresholds.min_profit_margin * 100
    if profit_margin < min_margin_pct:
        result.add_rejection(
            f"Profit margin {profit_margin:.2f}% < minimum {min_margin_pct:.2f}%"
        )

    if final_score < thresholds.min_final_score:
        result.add_rejection(
            f"Final score {final_score:.2f} < minimum {thresholds.min_final_score:.2f}"
        )

    return result
