"""
Mapping of the loosely typed extraction payload onto ScrapedProduct.

The upstream fills a JSON schema with an LLM and routinely gets types wrong
(prices as strings, lists as scalars, explicit nulls). Every field goes
through one of the accessors below, and none of them raise: anything that
cannot be read as the expected type is treated as absent.
"""
import math
import re
import time
from typing import Any, List, Mapping, Optional

import structlog

from models.product import ScrapedProduct
from services.retailer import resolve_retailer

log = structlog.get_logger()

DEFAULT_TITLE = "Unknown Product"
DEFAULT_CURRENCY = "INR"

_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def get_string(data: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    if not data:
        return None
    return _as_string(data.get(key))


def _as_string(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def get_number(data: Optional[Mapping[str, Any]], key: str) -> Optional[float]:
    if not data:
        return None
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def get_integer(data: Optional[Mapping[str, Any]], key: str) -> Optional[int]:
    if not data:
        return None
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    return None


def get_string_list(data: Optional[Mapping[str, Any]], key: str) -> List[str]:
    if not data:
        return []
    value = data.get(key)
    if not isinstance(value, list):
        return []
    items = []
    for element in value:
        text = _as_string(element)
        if text is not None:
            items.append(text)
    return items


def get_rating(data: Optional[Mapping[str, Any]], key: str = "rating") -> Optional[float]:
    rating = get_number(data, key)
    if rating is None or not 0 <= rating <= 5:
        return None
    return rating


def normalize_product(
    raw: Optional[Mapping[str, Any]],
    metadata: Optional[Mapping[str, Any]],
    source_url: str
) -> ScrapedProduct:
    raw = raw if isinstance(raw, Mapping) else {}
    metadata = metadata if isinstance(metadata, Mapping) else {}

    product = ScrapedProduct(
        title=get_string(raw, "title") or DEFAULT_TITLE,
        description=get_string(raw, "description"),
        image_url=get_string(raw, "imageUrl") or get_string(metadata, "ogImage"),
        price=get_number(raw, "price"),
        currency=get_string(raw, "currency") or DEFAULT_CURRENCY,
        original_price=get_number(raw, "originalPrice"),
        brand=get_string(raw, "brand"),
        category=get_string(raw, "category"),
        highlights=get_string_list(raw, "highlights"),
        additional_images=get_string_list(raw, "additionalImages"),
        rating=get_rating(raw),
        review_count=get_integer(raw, "reviewCount"),
        availability=get_string(raw, "availability"),
        retailer=resolve_retailer(source_url),
        source_url=source_url,
        scraped_at=int(time.time() * 1000),
    )

    log.debug(
        "product normalized",
        url=source_url,
        retailer=product.retailer.name,
        title=product.title,
        has_price=product.price is not None,
    )
    return product
