"""Business logic services."""

from shopscore.services.evaluation import (
    CandidateEvaluator,
    EvaluationResult,
    EvaluationService,
)
from shopscore.services.normalizers import (
    NormalizationError,
    UnknownSourceError,
    normalize_records,
)
from shopscore.services.presenter import DisplayRow, to_display_rows

__all__ = [
    # Evaluation
    "CandidateEvaluator",
    "EvaluationResult",
    "EvaluationService",
    # Normalizers
    "NormalizationError",
    "UnknownSourceError",
    "normalize_records",
    # Presenter
    "DisplayRow",
    "to_display_rows",
]
