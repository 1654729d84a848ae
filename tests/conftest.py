"""Shared pytest fixtures."""

from typing import Any

import pytest

from shopscore.scoring.identity import IdFactory
from shopscore.scoring.models import RawProduct, ScoringConfig


@pytest.fixture
def default_config() -> ScoringConfig:
    """Default scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def fixed_id_factory() -> IdFactory:
    """Id factory with a frozen clock and token."""
    return IdFactory(clock=lambda: 1_700_000_000.0, token=lambda: "abc123xyz")


@pytest.fixture
def tiki_record() -> dict[str, Any]:
    """A Tiki record that qualifies under default thresholds.

    Cost: 185,000 (tier 3, 40% markup)
    Selling price: 259,000
    Fee: 259,000 × 2.9% + 0.30 = 7,511.30
    Net profit: 259,000 - 185,000 - 7,511.30 = 66,488.70
    Margin: 25.67%
    """
    return {
        "id": 27435621,
        "name": "Bình giữ nhiệt inox 500ml",
        "price": 185000,
        "rating_average": 4.7,
        "review_count": 1250,
        "discount_rate": 25,
        "quantity_sold": {"text": "Đã bán 3,2k", "value": 3200},
        "badges": [{"code": "best_seller", "text": "Bán chạy"}],
        "thumbnail_url": "https://salt.tikicdn.com/ts/product/binh.jpg",
        "url": "https://tiki.vn/binh-giu-nhiet.html",
    }


@pytest.fixture
def ebay_record() -> dict[str, Any]:
    """An eBay search card: no id, textual price, few reviews."""
    return {
        "title": "Vintage Brass Compass",
        "price": "$324.99",
        "link": "https://www.ebay.com/itm/186512345678?hash=item2b6c",
        "image": "https://i.ebayimg.com/images/g/compass.jpg",
        "rating": 4.5,
        "reviewCount": 6,
    }


@pytest.fixture
def chotot_record() -> dict[str, Any]:
    """A Chotot classified ad: no ratings at all."""
    return {
        "ad_id": 118234567,
        "subject": "Xe đạp thể thao cũ",
        "cost_price": 1500000,
        "url": "https://www.chotot.com/118234567.htm",
    }


@pytest.fixture
def good_product() -> RawProduct:
    """Well-reviewed product that qualifies under default thresholds."""
    return RawProduct(
        id="good-001",
        name="Stainless Steel Bottle",
        cost_price=185000,
        rating=4.7,
        review_count=1250,
        discount_rate=25,
        units_sold=3200,
        badges=("best_seller",),
    )
