"""Product extraction from receipt and product-tag OCR text."""

from __future__ import annotations

import logging
import re

from . import RecordExtractor
from .categories import FALLBACK_CATEGORY, guess_category
from .lines import segment_lines
from .models import ExtractedProduct, PriceMatch
from .patterns import CURRENCY_OR_DIGIT, has_price_pattern, match_price

logger = logging.getLogger(__name__)

# Receipt summary labels that carry a price but are not products
DEFAULT_SUMMARY_KEYWORDS: list[str] = [
    "subtotal", "sub total", "total", "tax", "vat", "change", "cash",
    "balance", "amount due", "小计", "合计", "总计",
]

_QUANTITY_PREFIX = re.compile(r"^\d+\s*[xX×]?\s+")
_NOISE = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")

_MIN_NAME_LENGTH = 2


class ReceiptExtractor(RecordExtractor):
    """Reconstructs product records from the lines of a receipt."""

    kind = "products"

    def __init__(
        self,
        summary_keywords: list[str] | None = None,
        fallback: bool = True,
    ) -> None:
        if summary_keywords is None:
            summary_keywords = DEFAULT_SUMMARY_KEYWORDS
        self._summary_patterns = [
            re.compile(rf"(?<![a-z]){re.escape(k.lower())}(?![a-z])")
            for k in summary_keywords
            if k.strip()
        ]
        self._fallback = fallback

    def extract(self, text: str, source: str = "") -> list[ExtractedProduct]:
        lines = segment_lines(text)
        products = self._extract_priced_lines(lines)
        if not products and self._fallback:
            fallback = self._extract_fallback(lines, source)
            if fallback is not None:
                logger.debug("Fallback pass produced %r", fallback.name)
                products.append(fallback)
        return products

    def _extract_priced_lines(self, lines: list[str]) -> list[ExtractedProduct]:
        """Primary pass: one product per line that carries a price."""
        products: list[ExtractedProduct] = []
        for idx, line in enumerate(lines):
            price = match_price(line)
            if price is None:
                continue

            name = self._name_from_line(line, price)
            if len(name) < _MIN_NAME_LENGTH:
                name = self._borrow_name(lines, idx)
            if not name:
                logger.debug("No name for price line %r", line)
                continue
            if self._is_summary(name):
                logger.debug("Skipping summary line %r", line)
                continue

            products.append(
                ExtractedProduct(
                    name=name,
                    price=price.price,
                    category=guess_category(name),
                    description=f"Extracted from receipt: {line}",
                )
            )
        return products

    def _extract_fallback(
        self, lines: list[str], source: str
    ) -> ExtractedProduct | None:
        """Relaxed pass: at most one product built from the whole image."""
        name = ""
        price: PriceMatch | None = None
        description_parts: list[str] = []

        for line in lines:
            priced = has_price_pattern(line)
            if priced:
                if price is None:
                    price = match_price(line)
                continue
            if not name and len(line) > 3:
                name = self._clean_name(line)
                if len(name) >= _MIN_NAME_LENGTH:
                    continue
                name = ""
            if len(line) > 5 and line != name:
                description_parts.append(line)

        if not name or price is None:
            return None

        return ExtractedProduct(
            name=name,
            price=price.price,
            category=FALLBACK_CATEGORY,
            description=" ".join(description_parts)
            or f"Product extracted from {source or 'image'}",
        )

    def _name_from_line(self, line: str, price: PriceMatch) -> str:
        remainder = f"{line[:price.start]} {line[price.end:]}"
        return self._clean_name(remainder)

    def _borrow_name(self, lines: list[str], idx: int) -> str:
        """Take the name from the line before, or else the line after."""
        for neighbour in (idx - 1, idx + 1):
            if not 0 <= neighbour < len(lines):
                continue
            candidate = lines[neighbour]
            if not self._is_name_line(candidate):
                continue
            name = self._clean_name(candidate)
            if len(name) >= _MIN_NAME_LENGTH:
                return name
        return ""

    def _is_summary(self, name: str) -> bool:
        lowered = name.lower()
        return any(p.search(lowered) for p in self._summary_patterns)

    @staticmethod
    def _is_name_line(line: str) -> bool:
        """A neighbouring line can lend its text as a name if it has no numbers."""
        if len(line) <= 2:
            return False
        if has_price_pattern(line):
            return False
        return CURRENCY_OR_DIGIT.search(line) is None

    @staticmethod
    def _clean_name(raw: str) -> str:
        """Normalize a product name candidate.

        Strips punctuation noise and a leading quantity such as ``"2x "``.
        """
        name = _NOISE.sub("", raw)
        name = _WHITESPACE.sub(" ", name).strip()
        name = _QUANTITY_PREFIX.sub("", name)
        return name.strip(" -_")
