"""Tests for the scoring module.

These tests validate the calculations against hand-calculated examples.
"""

import math

import pytest
from pydantic import ValidationError

from shopscore.scoring import (
    FeeModel,
    IdFactory,
    PriceTier,
    RawProduct,
    ScoredProduct,
    ScoringConfig,
    ScoringCriteria,
    ScoringThresholds,
    ScoringWeights,
    apply_threshold_gate,
    calculate_final_score,
    calculate_profit,
    calculate_profit_score,
    calculate_review_score,
    calculate_selling_price,
    calculate_shopify_fee,
    calculate_trend_score,
    merge_criteria,
    score_product,
    select_markup,
)
from shopscore.scoring.models import DEFAULT_PRICE_TIERS


# --- Calculator Tests ---


class TestSelectMarkup:
    """Tests for price tier selection."""

    @pytest.mark.parametrize(
        ("cost_price", "expected"),
        [
            (50, 0.20),
            (51, 0.30),
            (200, 0.30),
            (201, 0.40),
            (1, 0.20),
            (1_000_000, 0.40),
        ],
    )
    def test_tier_boundaries(self, cost_price: float, expected: float) -> None:
        """Bounds are inclusive, top tier is open-ended."""
        assert select_markup(cost_price, DEFAULT_PRICE_TIERS) == expected

    def test_no_matching_tier_uses_default(self) -> None:
        """Costs outside every tier fall back to the default markup."""
        assert select_markup(0, DEFAULT_PRICE_TIERS) == 0.20
        assert select_markup(-5, DEFAULT_PRICE_TIERS) == 0.20
        # Gap between 50 and 51
        assert select_markup(50.5, DEFAULT_PRICE_TIERS) == 0.20
        assert select_markup(0, DEFAULT_PRICE_TIERS, default_markup=0.10) == 0.10

    def test_first_match_wins(self) -> None:
        """Tiers are evaluated in order."""
        tiers = (
            PriceTier(min=0, max=100, markup=0.50),
            PriceTier(min=50, max=None, markup=0.10),
        )
        assert select_markup(75, tiers) == 0.50
        assert select_markup(150, tiers) == 0.10


class TestCalculateSellingPrice:
    """Tests for selling price calculation."""

    def test_selling_price(self, default_config: ScoringConfig) -> None:
        """Selling price = cost × (1 + markup)."""
        assert calculate_selling_price(40, default_config) == pytest.approx(48.0)
        assert calculate_selling_price(100, default_config) == pytest.approx(130.0)
        assert calculate_selling_price(185000, default_config) == pytest.approx(259000.0)

    def test_never_below_cost(self, default_config: ScoringConfig) -> None:
        """Non-negative markups keep selling price >= cost."""
        for cost in (0, 1, 50, 51, 200, 201, 99999):
            assert calculate_selling_price(cost, default_config) >= cost

    def test_negative_markup_allowed(self) -> None:
        """A clearance tier below cost is taken as configured."""
        config = ScoringConfig(price_tiers=(PriceTier(min=0, max=None, markup=-0.10),))
        assert calculate_selling_price(100, config) == pytest.approx(90.0)


class TestCalculateProfit:
    """Tests for fee and profit calculation."""

    def test_shopify_fee(self) -> None:
        """Fee = selling price × 2.9% + 0.30."""
        assert calculate_shopify_fee(100) == pytest.approx(3.20)
        fee_model = FeeModel(transaction_fee_rate=0.05, fixed_fee=1.0)
        assert calculate_shopify_fee(100, fee_model) == pytest.approx(6.0)

    def test_profit_breakdown(self) -> None:
        """Profit for cost 100 sold at 130.

        Fee: 130 × 0.029 + 0.30 = 4.07
        Total cost: 100 + 4.07 = 104.07
        Net profit: 25.93
        Margin: 25.93 / 130 = 19.95%
        """
        profit = calculate_profit(100, 130)
        assert profit.shopify_fee == pytest.approx(4.07)
        assert profit.total_cost == pytest.approx(104.07)
        assert profit.net_profit == pytest.approx(25.93)
        assert profit.profit_margin == pytest.approx(19.946, abs=0.001)

    def test_shipping_fee_included(self) -> None:
        """Shipping is part of total cost."""
        profit = calculate_profit(100, 130, shipping_fee=10)
        assert profit.shipping_fee == 10
        assert profit.total_cost == pytest.approx(114.07)
        assert profit.net_profit == pytest.approx(15.93)

    def test_zero_selling_price(self) -> None:
        """Edge case: zero selling price gives 0 margin, not NaN/inf."""
        profit = calculate_profit(0, 0)
        assert profit.profit_margin == 0.0
        assert profit.net_profit == pytest.approx(-0.30)

    def test_negative_margin(self) -> None:
        """Margin can go negative."""
        profit = calculate_profit(10, 10)
        assert profit.profit_margin < 0


# --- Sub-score Tests ---


class TestProfitScore:
    """Tests for the profit score ramp."""

    @pytest.fixture
    def thresholds(self) -> ScoringThresholds:
        return ScoringThresholds(min_profit_margin=0.20)

    def test_at_minimum(self, thresholds: ScoringThresholds) -> None:
        assert calculate_profit_score(20, thresholds) == 0.0

    def test_at_target(self, thresholds: ScoringThresholds) -> None:
        assert calculate_profit_score(40, thresholds) == 1.0

    def test_midpoint(self, thresholds: ScoringThresholds) -> None:
        assert calculate_profit_score(30, thresholds) == pytest.approx(0.5)

    def test_below_minimum_and_above_target(self, thresholds: ScoringThresholds) -> None:
        assert calculate_profit_score(10, thresholds) == 0.0
        assert calculate_profit_score(-50, thresholds) == 0.0
        assert calculate_profit_score(75, thresholds) == 1.0

    def test_lower_minimum(self) -> None:
        """Ramp starts at the configured minimum margin."""
        thresholds = ScoringThresholds(min_profit_margin=0.15)
        assert calculate_profit_score(27.5, thresholds) == pytest.approx(0.5)

    def test_minimum_above_target(self) -> None:
        """No division by zero when the minimum exceeds the target."""
        thresholds = ScoringThresholds(min_profit_margin=0.50)
        assert calculate_profit_score(45, thresholds) == 0.0
        assert calculate_profit_score(55, thresholds) == 1.0


class TestReviewScore:
    """Tests for review score leniency tiers."""

    @pytest.fixture
    def thresholds(self) -> ScoringThresholds:
        return ScoringThresholds(min_review_score=2.0, min_review_count=10)

    def test_zero_reviews(self, thresholds: ScoringThresholds) -> None:
        """No reviews gives 0.3 regardless of rating."""
        assert calculate_review_score(0, 0, thresholds) == 0.3
        assert calculate_review_score(5, 0, thresholds) == 0.3

    def test_many_reviews_capped(self, thresholds: ScoringThresholds) -> None:
        """min(5/5 + min(log10(1000)/2, 0.2), 1) = 1.0."""
        assert calculate_review_score(5, 1000, thresholds) == 1.0

    def test_enough_reviews(self, thresholds: ScoringThresholds) -> None:
        """3/5 + 0.2 bonus = 0.8."""
        assert calculate_review_score(3.0, 10, thresholds) == pytest.approx(0.8)

    def test_popularity_bonus_below_cap(self) -> None:
        """log10(2)/2 ≈ 0.15 stays under the 0.2 cap."""
        thresholds = ScoringThresholds(min_review_score=2.0, min_review_count=1)
        expected = 3.0 / 5 + math.log10(2) / 2
        assert calculate_review_score(3.0, 2, thresholds) == pytest.approx(expected)

    def test_few_reviews_partial_credit(self, thresholds: ScoringThresholds) -> None:
        """4/5 × 0.6 = 0.48, scaled by 0.5 + 0.5 × 5/10 = 0.75 → 0.36."""
        assert calculate_review_score(4.0, 5, thresholds) == pytest.approx(0.36)

    def test_few_reviews_never_reach_full_share(self, thresholds: ScoringThresholds) -> None:
        """A perfect rating below the minimum count stays under 0.6."""
        assert calculate_review_score(5.0, 9, thresholds) < 0.6

    def test_low_rating_is_zero(self, thresholds: ScoringThresholds) -> None:
        """Ratings below the minimum score 0 once reviews exist."""
        assert calculate_review_score(1.5, 3, thresholds) == 0.0
        assert calculate_review_score(1.9, 500, thresholds) == 0.0


class TestTrendScore:
    """Tests for the trend heuristic."""

    def test_all_signals_capped_at_one(self) -> None:
        """0.3 + 0.4 + 0.2 + 0.1 = 1.0."""
        product = RawProduct(
            discount_rate=50,
            units_sold=5000,
            badges=("best_seller", "new_arrival"),
        )
        assert calculate_trend_score(product) == 1.0

    def test_sum_below_one_not_clamped(self) -> None:
        """0.3 + 0.4 + 0.2 = 0.9 is kept as-is."""
        product = RawProduct(discount_rate=30, units_sold=1000, badges=("best_seller",))
        assert calculate_trend_score(product) == pytest.approx(0.9)

    @pytest.mark.parametrize(
        ("discount", "sold", "expected"),
        [
            (9, 99, 0.0),
            (10, 100, 0.3),
            (20, 500, 0.5),
            (29, 999, 0.5),
            (30, 0, 0.3),
            (0, 1000, 0.4),
        ],
    )
    def test_highest_tier_wins(self, discount: float, sold: int, expected: float) -> None:
        product = RawProduct(discount_rate=discount, units_sold=sold)
        assert calculate_trend_score(product) == pytest.approx(expected)

    def test_badges_are_additive(self) -> None:
        product = RawProduct(badges=("new_arrival", "best_seller"))
        assert calculate_trend_score(product) == pytest.approx(0.3)

    def test_missing_fields(self) -> None:
        assert calculate_trend_score(RawProduct()) == 0.0


class TestFinalScore:
    """Tests for the weighted aggregate."""

    def test_default_weights(self) -> None:
        """1 × 0.6 + 0.5 × 0.4 + 0.5 × 0 = 0.8."""
        assert calculate_final_score(1.0, 0.5, 0.5, ScoringWeights()) == pytest.approx(0.8)

    def test_not_renormalized(self) -> None:
        """Weights summing above 1 push the score above 1."""
        weights = ScoringWeights(profit_weight=1, review_weight=1, trend_weight=1)
        assert calculate_final_score(1.0, 1.0, 1.0, weights) == pytest.approx(3.0)

    def test_nan_weight_guarded(self) -> None:
        weights = ScoringWeights(profit_weight=float("nan"))
        assert calculate_final_score(1.0, 1.0, 1.0, weights) == 0.0


# --- Gate Tests ---


class TestThresholdGate:
    """Tests for the qualification gate."""

    @pytest.fixture
    def thresholds(self) -> ScoringThresholds:
        return ScoringThresholds()

    def test_no_reviews_passes_review_condition(self, thresholds: ScoringThresholds) -> None:
        """No reviews, 25% margin, final score above minimum → qualifies."""
        result = apply_threshold_gate(
            rating=0,
            review_count=0,
            profit_margin=25,
            final_score=0.6,
            thresholds=thresholds,
        )
        assert result.passed is True
        assert result.reasons == []

    def test_few_reviews_use_fixed_floor(self, thresholds: ScoringThresholds) -> None:
        """Few reviews need rating >= 3.0, even though the minimum is 2.0."""
        failed = apply_threshold_gate(2.5, 5, 25, 0.6, thresholds)
        assert failed.passed is False
        assert any("3.0" in r for r in failed.reasons)

        passed = apply_threshold_gate(3.0, 5, 25, 0.6, thresholds)
        assert passed.passed is True

    def test_enough_reviews_use_configured_minimum(self, thresholds: ScoringThresholds) -> None:
        assert apply_threshold_gate(2.0, 10, 25, 0.6, thresholds).passed is True

        failed = apply_threshold_gate(1.9, 50, 25, 0.6, thresholds)
        assert failed.passed is False
        assert any("minimum 2.0" in r for r in failed.reasons)

    def test_low_margin_and_final_score(self, thresholds: ScoringThresholds) -> None:
        """Every failed condition is reported."""
        result = apply_threshold_gate(4.5, 100, 15, 0.3, thresholds)
        assert result.passed is False
        assert len(result.reasons) == 2
        assert any("Profit margin" in r for r in result.reasons)
        assert any("Final score" in r for r in result.reasons)


# --- Criteria Tests ---


class TestMergeCriteria:
    """Tests for per-request overrides."""

    def test_no_criteria_returns_defaults(self, default_config: ScoringConfig) -> None:
        assert merge_criteria(default_config, None) is default_config
        assert merge_criteria(default_config, ScoringCriteria()) is default_config

    def test_per_field_override(self, default_config: ScoringConfig) -> None:
        """Only the given fields change."""
        criteria = ScoringCriteria.model_validate({"thresholds": {"minReviewCount": 5}})
        merged = merge_criteria(default_config, criteria)

        assert merged.thresholds.min_review_count == 5
        assert merged.thresholds.min_review_score == 2.0
        assert merged.thresholds.min_profit_margin == 0.20
        assert merged.weights == default_config.weights
        # Defaults untouched
        assert default_config.thresholds.min_review_count == 10

    def test_snake_and_camel_case(self, default_config: ScoringConfig) -> None:
        camel = ScoringCriteria.model_validate({"weights": {"profitWeight": 0.5, "trendWeight": 0.1}})
        snake = ScoringCriteria.model_validate({"weights": {"profit_weight": 0.5, "trend_weight": 0.1}})

        assert merge_criteria(default_config, camel) == merge_criteria(default_config, snake)
        merged = merge_criteria(default_config, camel)
        assert merged.weights.profit_weight == 0.5
        assert merged.weights.review_weight == 0.40
        assert merged.weights.trend_weight == 0.1

    def test_config_is_immutable(self, default_config: ScoringConfig) -> None:
        with pytest.raises(ValidationError):
            default_config.weights.profit_weight = 1.0  # type: ignore[misc]


# --- Input Coercion Tests ---


class TestRawProduct:
    """Tests for permissive input coercion."""

    def test_missing_fields_default(self) -> None:
        product = RawProduct()
        assert product.cost_price == 0.0
        assert product.rating == 0.0
        assert product.review_count == 0
        assert product.discount_rate == 0.0
        assert product.units_sold == 0
        assert product.badges == ()

    def test_malformed_fields_coerced(self) -> None:
        """Unparsable values become 0 instead of raising."""
        product = RawProduct(
            id=12345,
            cost_price="not a price",
            rating="n/a",
            review_count="lots",
            discount_rate=None,
            units_sold=float("inf"),
            badges=42,
        )
        assert product.id == "12345"
        assert product.cost_price == 0.0
        assert product.rating == 0.0
        assert product.review_count == 0
        assert product.units_sold == 0
        assert product.badges == ()

    def test_numeric_strings(self) -> None:
        product = RawProduct(cost_price="$12.99", rating="4.5", review_count="1,234")
        assert product.cost_price == pytest.approx(12.99)
        assert product.rating == 4.5
        assert product.review_count == 1234

    @pytest.mark.parametrize(
        ("sold", "expected"),
        [
            ("12 months", 12),
            ("3 more", 3),
            ("1,2k", 1200),
            ("Đã bán 2k+", 2000),
        ],
    )
    def test_count_suffix_only_when_standalone(self, sold: str, expected: int) -> None:
        """A k/m suffix counts only when no word follows it directly."""
        product = RawProduct(units_sold=sold, review_count=sold)
        assert product.units_sold == expected
        assert product.review_count == expected

    def test_nan_rejected_to_zero(self) -> None:
        product = RawProduct(cost_price=float("nan"), rating=float("nan"))
        assert product.cost_price == 0.0
        assert product.rating == 0.0


# --- Score Product Tests ---


class TestScoreProduct:
    """Tests for complete product scoring."""

    def test_qualifying_product(self, good_product: RawProduct) -> None:
        """Well-reviewed product at VND scale.

        Margin: 25.67% → profit score (25.67 - 20) / 20 = 0.284
        Review: 4.7/5 + 0.2 → capped 1.0
        Final: 0.284 × 0.6 + 1.0 × 0.4 = 0.570
        """
        score = score_product(good_product)

        assert isinstance(score, ScoredProduct)
        assert score.product_id == "good-001"
        assert score.product_name == "Stainless Steel Bottle"
        assert score.cost_price == 185000
        assert score.selling_price == pytest.approx(259000)
        assert score.net_profit == pytest.approx(66488.70)
        assert score.profit_margin == pytest.approx(25.671, abs=0.001)
        assert score.scores.profit_score == pytest.approx(0.2836, abs=0.0001)
        assert score.scores.review_score == 1.0
        assert score.scores.trend_score == pytest.approx(0.8)
        assert score.scores.final_score == pytest.approx(0.5701, abs=0.0001)
        assert score.meets_thresholds is True
        assert score.rejection_reasons == ()
        assert score.rating == 4.7
        assert score.review_count == 1250

    def test_margin_invariant(self, good_product: RawProduct) -> None:
        """profitMargin = (selling - total cost) / selling × 100."""
        score = score_product(good_product)
        fee = score.selling_price * 0.029 + 0.30
        total_cost = score.cost_price + fee
        expected = (score.selling_price - total_cost) / score.selling_price * 100
        assert score.profit_margin == pytest.approx(expected)

    def test_thin_margin_rejected(self) -> None:
        """Cost 100 earns 19.95% margin, below the 20% minimum."""
        product = RawProduct(id="thin", name="Thin", cost_price=100, rating=5, review_count=500)
        score = score_product(product)

        assert score.meets_thresholds is False
        assert score.scores.profit_score == 0.0
        assert any("Profit margin" in r for r in score.rejection_reasons)

    def test_zero_cost_is_safe(self) -> None:
        """Zero cost gives zero selling price; no NaN anywhere."""
        score = score_product(RawProduct(id="free", name="Freebie"))

        assert score.selling_price == 0.0
        assert score.profit_margin == 0.0
        assert not math.isnan(score.scores.final_score)
        assert score.meets_thresholds is False

    def test_no_reviews_qualifies_with_lower_final_threshold(self) -> None:
        """No reviews: review score 0.3, final 0.284 × 0.6 + 0.3 × 0.4 = 0.290."""
        config = merge_criteria(
            ScoringConfig(),
            ScoringCriteria.model_validate({"thresholds": {"minFinalScore": 0.25}}),
        )
        product = RawProduct(id="new", name="New Listing", cost_price=185000)
        score = score_product(product, config)

        assert score.scores.review_score == 0.3
        assert score.scores.final_score == pytest.approx(0.2901, abs=0.0001)
        assert score.meets_thresholds is True

    def test_id_from_url(self) -> None:
        product = RawProduct(
            title="Brass Compass",
            url="https://www.ebay.com/itm/186512345678?hash=item2b6c",
            cost_price=300,
        )
        score = score_product(product)
        assert score.product_id == "186512345678"
        assert score.product_name == "Brass Compass"

    def test_synthesized_id(self, fixed_id_factory: IdFactory) -> None:
        """Without id or URL, the injected factory supplies the id."""
        score = score_product(RawProduct(cost_price=300), id_factory=fixed_id_factory)
        assert score.product_id == "1700000000000_abc123xyz"
        assert score.product_name == "Unknown Product"

    def test_synthesized_id_default_factory(self) -> None:
        score = score_product(RawProduct(cost_price=300))
        timestamp, token = score.product_id.split("_")
        assert timestamp.isdigit()
        assert len(token) == 9

    def test_scored_product_is_frozen(self, good_product: RawProduct) -> None:
        score = score_product(good_product)
        with pytest.raises(ValidationError):
            score.meets_thresholds = False  # type: ignore[misc]

    def test_serializes_camel_case(self, good_product: RawProduct) -> None:
        data = score_product(good_product).model_dump(by_alias=True)
        assert data["productId"] == "good-001"
        assert data["meetsThresholds"] is True
        assert set(data["scores"]) == {"profitScore", "reviewScore", "trendScore", "finalScore"}
