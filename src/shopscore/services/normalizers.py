"""Marketplace record normalizers.

Each scraper hands over records in its own shape. These functions map
them onto the canonical RawProduct so the scoring engine never sees
marketplace-specific field names.

Sources:
- tiki: JSON API records (numeric VND price, rating_average, badges)
- ebay: search card text (price like "$12.99", link, rating, reviewCount)
- chotot: classified ads (ad_id, subject, cost_price, no reviews)
- auto: any of the above, resolved through field aliases
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from shopscore.scoring.models import RawProduct

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


class NormalizationError(ValueError):
    """Exception raised for normalization errors."""

    pass


class UnknownSourceError(NormalizationError):
    """Raised when no normalizer exists for a source name."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(
            f"Unknown source '{source}'. Expected one of: {', '.join(sorted(NORMALIZERS))}"
        )


def _first(record: Record, *keys: str) -> Any:
    """Value of the first key that is present and not None/empty."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_tiki(record: Record) -> RawProduct:
    """Map a Tiki product record."""
    return RawProduct(
        id=record.get("id"),
        name=_first(record, "name", "short_name"),
        url=_first(record, "url", "short_url"),
        cost_price=record.get("price"),
        rating=record.get("rating_average"),
        review_count=record.get("review_count"),
        discount_rate=record.get("discount_rate"),
        units_sold=_first(record, "quantity_sold", "all_time_quantity_sold"),
        badges=record.get("badges"),
        source="tiki",
    )


def normalize_ebay(record: Record) -> RawProduct:
    """Map an eBay search result card.

    eBay cards carry no id; it comes from the item link.
    """
    return RawProduct(
        id=record.get("id"),
        title=record.get("title"),
        url=record.get("link"),
        cost_price=record.get("price"),
        shipping_fee=record.get("shipping"),
        rating=record.get("rating"),
        review_count=record.get("reviewCount"),
        source="ebay",
    )


def normalize_chotot(record: Record) -> RawProduct:
    """Map a Chotot classified ad. Ads have no rating or sales data."""
    return RawProduct(
        id=_first(record, "ad_id", "list_id"),
        name=record.get("subject"),
        url=record.get("url"),
        cost_price=_first(record, "cost_price", "price"),
        source="chotot",
    )


def normalize_generic(record: Record) -> RawProduct:
    """Map a record of unknown origin using every known field alias."""
    return RawProduct(
        id=_first(record, "id", "productId", "product_id", "ad_id", "list_id"),
        name=_first(record, "name", "subject", "short_name"),
        title=record.get("title"),
        url=_first(record, "url", "link", "short_url"),
        cost_price=_first(record, "price", "cost_price", "costPrice"),
        shipping_fee=_first(record, "shipping_fee", "shippingFee", "shipping"),
        rating=_first(record, "rating_average", "rating"),
        review_count=_first(record, "review_count", "reviewCount"),
        discount_rate=_first(record, "discount_rate", "discountRate"),
        units_sold=_first(
            record, "quantity_sold", "all_time_quantity_sold", "units_sold", "sold"
        ),
        badges=record.get("badges"),
        source=record.get("source"),
    )


NORMALIZERS: dict[str, Callable[[Record], RawProduct]] = {
    "auto": normalize_generic,
    "tiki": normalize_tiki,
    "ebay": normalize_ebay,
    "chotot": normalize_chotot,
}


def get_normalizer(source: str | None) -> Callable[[Record], RawProduct]:
    """Look up the normalizer for a source name ("auto" if None).

    Raises:
        UnknownSourceError: If the source has no normalizer
    """
    key = (source or "auto").strip().lower()
    try:
        return NORMALIZERS[key]
    except KeyError:
        raise UnknownSourceError(key) from None


def normalize_records(
    records: Iterable[Any],
    source: str | None = None,
) -> list[tuple[RawProduct, Record]]:
    """Normalize scraped records, keeping each next to its original.

    Records that are not mappings are skipped.

    Args:
        records: Scraped records
        source: Marketplace name, or None/"auto" for alias resolution

    Returns:
        List of (RawProduct, original record) pairs in input order
    """
    normalize = get_normalizer(source)

    pairs: list[tuple[RawProduct, Record]] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            logger.warning(f"Skipping record {index}: expected object, got {type(record).__name__}")
            continue
        pairs.append((normalize(record), record))

    return pairs
