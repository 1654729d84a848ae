"""Product scoring module."""

from shopscore.scoring.calculator import (
    calculate_profit,
    calculate_selling_price,
    calculate_shopify_fee,
    select_markup,
)
from shopscore.scoring.filters import GateResult, apply_threshold_gate
from shopscore.scoring.identity import IdFactory
from shopscore.scoring.models import (
    FeeModel,
    PriceTier,
    ProfitBreakdown,
    RawProduct,
    ScoreBreakdown,
    ScoredProduct,
    ScoringConfig,
    ScoringCriteria,
    ScoringThresholds,
    ScoringWeights,
    merge_criteria,
)
from shopscore.scoring.ranker import (
    RankingResult,
    rank_products,
    score_products,
    select_candidates,
)
from shopscore.scoring.scorer import (
    calculate_final_score,
    calculate_profit_score,
    calculate_review_score,
    calculate_trend_score,
    score_product,
)

__all__ = [
    # Models
    "FeeModel",
    "PriceTier",
    "ProfitBreakdown",
    "RawProduct",
    "ScoreBreakdown",
    "ScoredProduct",
    "ScoringConfig",
    "ScoringCriteria",
    "ScoringThresholds",
    "ScoringWeights",
    "merge_criteria",
    # Calculator
    "select_markup",
    "calculate_selling_price",
    "calculate_shopify_fee",
    "calculate_profit",
    # Gate
    "GateResult",
    "apply_threshold_gate",
    # Scorer
    "IdFactory",
    "calculate_profit_score",
    "calculate_review_score",
    "calculate_trend_score",
    "calculate_final_score",
    "score_product",
    # Ranker
    "RankingResult",
    "rank_products",
    "score_products",
    "select_candidates",
]
