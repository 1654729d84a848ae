"""Product id and name defaulting.

Some marketplaces (eBay, Chotot) do not hand over an id. Every scored
product still needs one for downstream joins within a run, so it is
taken from the product URL or, failing that, synthesized.
"""

import random
import string
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urlparse

from shopscore.scoring.models import RawProduct

UNKNOWN_PRODUCT_NAME = "Unknown Product"

_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


def _random_token(length: int = 9) -> str:
    return "".join(random.choices(_TOKEN_ALPHABET, k=length))


@dataclass(frozen=True)
class IdFactory:
    """Builds ``{milliseconds}_{token}`` ids.

    Swap ``clock`` and ``token`` for fixed callables to get reproducible
    ids in tests.
    """

    clock: Callable[[], float] = time.time
    token: Callable[[], str] = field(default=_random_token)

    def __call__(self) -> str:
        return f"{int(self.clock() * 1000)}_{self.token()}"


def id_from_url(url: str | None) -> str | None:
    """Return the trailing path segment of a URL, if any.

    >>> id_from_url("https://www.ebay.com/itm/1234567?hash=x")
    '1234567'
    """
    if not url:
        return None
    path = urlparse(url).path.rstrip("/")
    segment = path.rsplit("/", 1)[-1]
    return segment or None


def resolve_product_id(product: RawProduct, id_factory: IdFactory | None = None) -> str:
    """Product id, else URL trailing segment, else a synthesized id."""
    if product.id:
        return product.id
    from_url = id_from_url(product.url)
    if from_url:
        return from_url
    if id_factory is None:
        id_factory = IdFactory()
    return id_factory()


def resolve_product_name(product: RawProduct) -> str:
    """Name, else title, else "Unknown Product"."""
    return product.name or product.title or UNKNOWN_PRODUCT_NAME
