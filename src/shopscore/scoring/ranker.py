"""Batch scoring and ranking.

Scores every product, keeps those that pass the threshold gate and
sorts them by final score, highest first. Ties keep input order.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from shopscore.scoring.identity import IdFactory
from shopscore.scoring.models import (
    RawProduct,
    ScoredProduct,
    ScoringConfig,
    ScoringCriteria,
    merge_criteria,
)
from shopscore.scoring.scorer import score_product

logger = logging.getLogger(__name__)

# Number of rejected products explained when nothing qualifies
EXPLAIN_LIMIT = 3


@dataclass
class RankingResult:
    """Result of scoring a batch."""

    scored: list[ScoredProduct] = field(default_factory=list)
    ranked: list[ScoredProduct] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.scored)

    @property
    def qualified_count(self) -> int:
        return len(self.ranked)

    @property
    def rejected(self) -> list[ScoredProduct]:
        """Products that failed the gate, in input order."""
        return [s for s in self.scored if not s.meets_thresholds]

    @property
    def pass_rate(self) -> float:
        """Share of products that qualified."""
        if not self.scored:
            return 0.0
        return self.qualified_count / self.total_count


def rank_scored(scored: Iterable[ScoredProduct]) -> list[ScoredProduct]:
    """Keep qualified products, sorted by final score descending.

    ``sorted`` is stable, so equal scores keep their input order.
    """
    qualified = [s for s in scored if s.meets_thresholds]
    return sorted(qualified, key=lambda s: s.scores.final_score, reverse=True)


def explain_rejection(scored: ScoredProduct, config: ScoringConfig) -> str:
    """One-line summary of a product against the thresholds."""
    thresholds = config.thresholds
    reasons = "; ".join(scored.rejection_reasons) or "passed"
    return (
        f"{scored.product_name[:40]} | "
        f"rating {scored.rating:.1f} (need >= {thresholds.min_review_score}), "
        f"reviews {scored.review_count} (need >= {thresholds.min_review_count}), "
        f"margin {scored.profit_margin:.2f}% (need >= {thresholds.min_profit_margin * 100:.0f}%), "
        f"final {scored.scores.final_score:.2f} (need >= {thresholds.min_final_score}) "
        f"-> {reasons}"
    )


def rank_products(
    products: Sequence[RawProduct],
    criteria: ScoringCriteria | None = None,
    config: ScoringConfig | None = None,
    id_factory: IdFactory | None = None,
) -> RankingResult:
    """Score a batch and keep full diagnostics.

    Args:
        products: Normalized products (not mutated)
        criteria: Per-request override of weights/thresholds
        config: Configured defaults (uses defaults if None)
        id_factory: Id generator for products without id or URL

    Returns:
        RankingResult with every scored product and the ranked qualifiers
    """
    if config is None:
        config = ScoringConfig()
    effective = merge_criteria(config, criteria)

    logger.info(f"Scoring {len(products)} products")

    scored = [score_product(p, effective, id_factory) for p in products]
    result = RankingResult(scored=scored, ranked=rank_scored(scored))

    logger.info(f"{result.qualified_count}/{result.total_count} products meet criteria")

    if not result.ranked and result.scored:
        logger.warning("No products met the thresholds. First rejections:")
        for item in result.scored[:EXPLAIN_LIMIT]:
            logger.warning(f"  {explain_rejection(item, effective)}")

    return result


def score_products(
    products: Sequence[RawProduct],
    criteria: ScoringCriteria | None = None,
    config: ScoringConfig | None = None,
    id_factory: IdFactory | None = None,
) -> list[ScoredProduct]:
    """Score a batch and return only qualified products, best first."""
    return rank_products(products, criteria, config, id_factory).ranked


def select_candidates(
    ranked: Sequence[ScoredProduct],
    limit: int = 20,
) -> list[ScoredProduct]:
    """Top-N ranked products for AI re-ranking."""
    if limit <= 0:
        return []
    return list(ranked[:limit])
