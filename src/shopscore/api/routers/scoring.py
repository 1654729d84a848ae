"""Scoring API endpoints.

Endpoints:
- GET /scoring/config - scoring defaults in effect
- POST /scoring/evaluate - score, filter and rank scraped products
- POST /scoring/rows - display rows for qualified products
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shopscore.config import get_settings
from shopscore.scoring.models import (
    FeeModel,
    PriceTier,
    ScoredProduct,
    ScoringCriteria,
    ScoringThresholds,
    ScoringWeights,
)
from shopscore.services.evaluation import EvaluationResult, EvaluationService
from shopscore.services.normalizers import UnknownSourceError
from shopscore.services.presenter import DisplayRow, to_display_rows

router = APIRouter(prefix="/scoring", tags=["scoring"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EvaluateRequest(CamelModel):
    """Batch of scraped products to score."""

    products: list[Any] = Field(..., description="Scraped product records")
    source: str = Field("auto", description="tiki, ebay, chotot or auto")
    criteria: ScoringCriteria | None = None
    include_rejected: bool = Field(False, description="Also return rejected products")
    session_id: str | None = None


class EvaluateResponse(CamelModel):
    """Ranked products and hand-off candidates."""

    success: bool = True
    message: str | None = None
    total_products: int
    qualified_products: int
    scored_products: list[ScoredProduct]
    rejected_products: list[ScoredProduct] | None = None
    candidate_ids: list[str]
    ai_evaluation: Any | None = None
    ai_error: str | None = None
    metadata: dict[str, Any]


class ConfigResponse(CamelModel):
    """Scoring defaults in effect."""

    weights: ScoringWeights
    thresholds: ScoringThresholds
    price_tiers: list[PriceTier]
    fee_model: FeeModel
    default_markup: float
    target_profit_margin: float
    candidate_limit: int


def get_evaluation_service() -> EvaluationService:
    """Evaluation service built from settings; no AI evaluator by default."""
    return EvaluationService(config=get_settings().scoring)


async def _run_evaluation(
    request: EvaluateRequest,
    service: EvaluationService,
) -> EvaluationResult:
    if not request.products:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Products array is required and must not be empty",
        )

    try:
        return await service.evaluate(
            request.products,
            source=request.source,
            criteria=request.criteria,
            session_id=request.session_id,
        )
    except UnknownSourceError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e


@router.get("/config", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get the scoring defaults callers can override per request."""
    config = get_settings().scoring
    return ConfigResponse(
        weights=config.weights,
        thresholds=config.thresholds,
        price_tiers=list(config.price_tiers),
        fee_model=config.fee_model,
        default_markup=config.default_markup,
        target_profit_margin=config.target_profit_margin,
        candidate_limit=config.candidate_limit,
    )


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_products(
    request: EvaluateRequest,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluateResponse:
    """Score, filter and rank products.

    Qualified products are sorted by final score, highest first. The
    top candidates are handed to the AI evaluator when one is configured.
    """
    result = await _run_evaluation(request, service)

    return EvaluateResponse(
        message=None if result.ranked else "No products met the quality thresholds",
        total_products=result.total_count,
        qualified_products=result.qualified_count,
        scored_products=result.ranked,
        rejected_products=result.rejected if request.include_rejected else None,
        candidate_ids=[c.product_id for c in result.candidates],
        ai_evaluation=result.ai_evaluation,
        ai_error=result.ai_error,
        metadata=result.metadata,
    )


@router.post("/rows", response_model=list[DisplayRow])
async def display_rows(
    request: EvaluateRequest,
    service: EvaluationService = Depends(get_evaluation_service),
) -> list[DisplayRow]:
    """Score products and return table rows for the qualified ones."""
    result = await _run_evaluation(request, service)
    return to_display_rows(result.ranked, result.raw_for)
