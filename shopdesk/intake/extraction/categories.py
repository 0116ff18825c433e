"""Keyword-based product category guessing."""

from __future__ import annotations

import re

DEFAULT_CATEGORY = "Clothing"

# Category given to the single record produced by the receipt fallback pass.
FALLBACK_CATEGORY = "ocr-extracted"

# Keyword → category mapping, checked in order; the first bin that matches wins.
_CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Shirts": ["shirt", "sweatshirt", "blouse", "top"],
    "Pants": ["pant", "jean", "trouser"],
    "Dresses": ["dress", "gown"],
    "Shoes": ["shoe", "boot", "sneaker"],
    "Accessories": ["bag", "purse", "wallet", "hat", "cap", "scarf", "scarves"],
    "Outerwear": ["jacket", "coat", "sweater"],
    "Intimates": ["sock", "underwear", "bra"],
}

# Keywords match whole words, optionally pluralized ("jeans", "dresses").
_CATEGORY_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    category: [re.compile(rf"\b{re.escape(k)}(?:e?s)?\b") for k in keywords]
    for category, keywords in _CATEGORY_KEYWORDS.items()
}

CATEGORY_LABELS: tuple[str, ...] = (
    *_CATEGORY_KEYWORDS,
    DEFAULT_CATEGORY,
    FALLBACK_CATEGORY,
)


def guess_category(name: str) -> str:
    """Guess a product category from its name.

    Always returns one of the keyword categories or ``DEFAULT_CATEGORY``.
    """
    lowered = name.lower()
    for category in _CATEGORY_KEYWORDS:
        if lowered == category.lower():
            return category
    for category, patterns in _CATEGORY_PATTERNS.items():
        if any(p.search(lowered) for p in patterns):
            return category
    return DEFAULT_CATEGORY
