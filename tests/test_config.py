"""Tests for application settings."""

import pytest

from shopscore.config import Settings, get_settings
from shopscore.scoring.models import ScoringConfig


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.app_name == "shopscore"
        assert settings.api_prefix == "/api"
        assert settings.scoring == ScoringConfig()

    def test_nested_scoring_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOPSCORE_SCORING__THRESHOLDS__MIN_REVIEW_COUNT", "5")
        monkeypatch.setenv("SHOPSCORE_SCORING__WEIGHTS__TREND_WEIGHT", "0.1")

        scoring = Settings().scoring

        assert scoring.thresholds.min_review_count == 5
        assert scoring.thresholds.min_final_score == 0.50
        assert scoring.weights.trend_weight == 0.1
        assert scoring.weights.profit_weight == 0.60

    def test_cached(self) -> None:
        assert get_settings() is get_settings()
