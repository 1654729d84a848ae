"""Permissive coercion of scraped values.

Scrapers hand over whatever the page or API returned: numbers, numeric
strings, price text with currency symbols, counts like "Đã bán 1,2k".
Every helper here returns a usable value and never raises; anything
unparsable becomes 0 (or empty).
"""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

_NUMBER_RE = re.compile(r"-?\d[\d.,]*")
_COUNT_SUFFIXES = {"k": 1_000, "m": 1_000_000}
_COUNT_RE = re.compile(r"(\d[\d.,]*)\s*(?:([kKmM])(?!\w))?")


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def to_text(value: Any) -> Optional[str]:
    """Coerce to a stripped string, ``None`` for missing or blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_float(value: Any) -> float:
    """Coerce a loosely typed number to float.

    Examples:
        4.5 -> 4.5, "4.5" -> 4.5, "4,5 sao" -> 4.5, "n/a" -> 0.0, None -> 0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _finite(float(value))
    text = str(value).strip()
    try:
        return _finite(float(text))
    except ValueError:
        pass
    match = _NUMBER_RE.search(text)
    if not match:
        return 0.0
    token = match.group(0).rstrip(".,")
    # A lone comma is a decimal separator ("4,5"); otherwise commas group digits
    if token.count(",") == 1 and "." not in token and len(token.split(",")[1]) != 3:
        token = token.replace(",", ".")
    else:
        token = token.replace(",", "")
    try:
        return _finite(float(token))
    except ValueError:
        return 0.0


def parse_price(value: Any) -> float:
    """Parse a price from a number or price text.

    Handles "$12.99", "12,99 US $", "1.299.000 ₫", "1,299.50" and ranges
    such as "$10.00 to $20.00" (the lower bound is used).

    Returns:
        Price as float, 0.0 if nothing parsable
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _finite(float(value))

    match = _NUMBER_RE.search(str(value))
    if not match:
        return 0.0
    token = match.group(0).rstrip(".,")

    if "," in token and "." in token:
        # Whichever separator comes last is the decimal point
        if token.rfind(",") > token.rfind("."):
            token = token.replace(".", "").replace(",", ".")
        else:
            token = token.replace(",", "")
    elif "," in token or "." in token:
        sep = "," if "," in token else "."
        groups = token.split(sep)
        if len(groups) > 2 or len(groups[-1]) == 3:
            # Thousands grouping: "1.299.000", "1,299"
            token = "".join(groups)
        else:
            token = ".".join(groups)

    try:
        return _finite(float(token))
    except ValueError:
        return 0.0


def parse_count(value: Any) -> int:
    """Parse a non-negative count such as review or sales totals.

    Accepts ints, floats, numeric strings, grouped numbers ("1,234") and
    abbreviated counts ("1.2k", "Đã bán 3,5k"). Dicts carrying a
    ``value`` key (Tiki's ``quantity_sold``) are unwrapped.
    """
    if isinstance(value, Mapping):
        value = value.get("value")
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        number = _finite(float(value))
        return max(int(number), 0)

    match = _COUNT_RE.search(str(value))
    if not match:
        return 0
    digits, suffix = match.group(1).rstrip(".,"), match.group(2)
    if suffix:
        number = round(to_float(digits.replace(",", ".")) * _COUNT_SUFFIXES[suffix.lower()])
    else:
        number = parse_price(digits)
    return max(int(number), 0)


def parse_badges(value: Any) -> tuple[str, ...]:
    """Normalize a badge collection to a tuple of lowercase codes.

    Tiki sends either plain strings or objects such as
    ``{"code": "best_seller", "text": "..."}``.
    """
    if value is None:
        return ()
    if isinstance(value, (str, Mapping)):
        value = [value]
    if not isinstance(value, Iterable):
        return ()

    badges: list[str] = []
    for item in value:
        if isinstance(item, Mapping):
            item = item.get("code") or item.get("type") or item.get("name")
        code = to_text(item)
        if code:
            badges.append(code.lower())
    return tuple(badges)
