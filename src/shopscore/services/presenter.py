"""Display rows for qualified products."""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shopscore.scoring.models import ScoredProduct

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/150"

IMAGE_FIELDS = ("thumbnail_url", "image", "imageUrl")


class DisplayRow(BaseModel):
    """Row shown in the product table."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    price: int
    avg_rating: float
    rating_num: int
    image_url: str


def _image_url(raw: Mapping[str, Any]) -> str:
    for key in IMAGE_FIELDS:
        value = raw.get(key)
        if value:
            return str(value)
    return PLACEHOLDER_IMAGE_URL


def to_display_rows(
    scored: Iterable[ScoredProduct],
    raw_for: Callable[[ScoredProduct], Optional[Mapping[str, Any]]] | None = None,
) -> list[DisplayRow]:
    """Build display rows for qualified products.

    The price shown is the suggested selling price, falling back to the
    cost price, rounded to whole currency units.

    Args:
        scored: Scored products (rejected ones are dropped)
        raw_for: Looks up the original scraped record of a product, for images

    Returns:
        List of DisplayRow
    """
    rows = []
    for item in scored:
        if not item.meets_thresholds:
            continue
        raw = (raw_for(item) if raw_for else None) or {}
        price = item.selling_price or item.cost_price or 0
        rows.append(
            DisplayRow(
                id=item.product_id,
                name=item.product_name,
                price=round(price),
                avg_rating=item.rating,
                rating_num=item.review_count,
                image_url=_image_url(raw),
            )
        )
    return rows
