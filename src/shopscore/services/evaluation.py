"""Evaluation Service - orchestrates normalization, scoring and AI hand-off.

Takes scraped records, normalizes them, scores and ranks them, and
passes the top candidates to an optional re-ranking collaborator (an
external generative-AI evaluator). The collaborator's answer is
returned as-is.

Usage:
    service = EvaluationService(evaluator=my_evaluator)
    result = await service.evaluate(records, source="tiki")
    print(f"{result.qualified_count}/{result.total_count} products qualified")
"""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from shopscore.scoring.identity import IdFactory
from shopscore.scoring.models import (
    ScoredProduct,
    ScoringConfig,
    ScoringCriteria,
    merge_criteria,
)
from shopscore.scoring.ranker import rank_products, select_candidates
from shopscore.services.normalizers import Record, normalize_records

logger = logging.getLogger(__name__)


class CandidateEvaluator(Protocol):
    """Re-ranks top candidates, e.g. through a generative-AI call."""

    async def evaluate(
        self,
        candidates: list[Record],
        criteria: ScoringCriteria | None,
    ) -> Any:
        ...


@dataclass
class EvaluationResult:
    """Result of an evaluation run."""

    total_count: int = 0
    qualified_count: int = 0
    ranked: list[ScoredProduct] = field(default_factory=list)
    rejected: list[ScoredProduct] = field(default_factory=list)
    candidates: list[ScoredProduct] = field(default_factory=list)
    records: list[tuple[ScoredProduct, Record]] = field(default_factory=list)
    ai_evaluation: Optional[Any] = None
    ai_error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    _raw_by_scored: dict[int, Record] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._raw_by_scored = {id(scored): raw for scored, raw in self.records}

    def raw_for(self, scored: ScoredProduct) -> Optional[Record]:
        """Original record of a scored product from this run."""
        return self._raw_by_scored.get(id(scored))

    @property
    def pass_rate(self) -> float:
        """Share of products that qualified."""
        if self.total_count == 0:
            return 0.0
        return self.qualified_count / self.total_count


class EvaluationService:
    """Runs the normalize → score → rank → candidate hand-off flow."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        evaluator: CandidateEvaluator | None = None,
        id_factory: IdFactory | None = None,
    ):
        self.config = config or ScoringConfig()
        self.evaluator = evaluator
        self.id_factory = id_factory or IdFactory()

    async def evaluate(
        self,
        records: Sequence[Any],
        source: str | None = None,
        criteria: ScoringCriteria | None = None,
        session_id: str | None = None,
    ) -> EvaluationResult:
        """Evaluate a batch of scraped records.

        Args:
            records: Raw scraped records
            source: Marketplace name (None/"auto" resolves aliases)
            criteria: Per-request override of weights/thresholds
            session_id: Caller session, generated if missing

        Returns:
            EvaluationResult

        Raises:
            UnknownSourceError: If the source has no normalizer
        """
        pairs = normalize_records(records, source)
        products = [product for product, _ in pairs]

        ranking = rank_products(products, criteria, self.config, self.id_factory)

        effective = merge_criteria(self.config, criteria)
        result = EvaluationResult(
            total_count=ranking.total_count,
            qualified_count=ranking.qualified_count,
            ranked=ranking.ranked,
            rejected=ranking.rejected,
            candidates=select_candidates(ranking.ranked, self.config.candidate_limit),
            # Paired by position so duplicate or synthesized ids keep their own record
            records=[(scored, raw) for scored, (_, raw) in zip(ranking.scored, pairs)],
            metadata={
                "sessionId": session_id or f"session-{int(time.time() * 1000)}",
                "source": source or "auto",
                "totalProducts": ranking.total_count,
                "qualifiedProducts": ranking.qualified_count,
                "weights": effective.weights.model_dump(by_alias=True),
                "thresholds": effective.thresholds.model_dump(by_alias=True),
            },
        )

        if not result.candidates:
            logger.info("No products met the quality thresholds - skipping AI evaluation")
            return result

        if self.evaluator is None:
            logger.debug("No candidate evaluator configured - skipping AI evaluation")
            return result

        logger.info(f"Handing {len(result.candidates)} candidates to AI evaluation")
        try:
            result.ai_evaluation = await self.evaluator.evaluate(
                [result.raw_for(c) for c in result.candidates],
                criteria,
            )
        except Exception as e:
            logger.exception(f"AI evaluation failed: {e}")
            result.ai_error = str(e)

        return result
