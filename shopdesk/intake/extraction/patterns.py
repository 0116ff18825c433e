"""Regular expressions for prices, emails and phone numbers."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .models import PriceMatch

# Number with optional thousands separators and exactly two decimals.
_DECIMAL = r"\d{1,3}(?:,\d{3})+\.\d{2}|\d+\.\d{2}"
# Number with optional thousands separators and optional two decimals.
_NUMBER = r"\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?"

# Tried in order; the first pattern that matches a line decides its price.
PRICE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("symbol_prefix", re.compile(rf"[$€£]\s*(?P<amount>{_DECIMAL})(?![\d.])")),
    ("symbol_suffix", re.compile(rf"(?<![\d.,])(?P<amount>{_NUMBER})\s*[$€£¥]")),
    ("yen_prefix", re.compile(rf"[¥￥]\s*(?P<amount>{_NUMBER})(?![\d.])")),
    ("trailing_decimal", re.compile(rf"(?<![\w.,])(?P<amount>{_DECIMAL})\s*$")),
)

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# Loose: long digit runs such as SKUs or prices can match too.
PHONE_PATTERN = re.compile(r"\+?[1-9]?[\d\s\-()]{8,15}")

# Characters that signal a line carries a number or a currency amount.
CURRENCY_OR_DIGIT = re.compile(r"[\d$€£¥￥]")


def parse_amount(raw: str) -> Decimal | None:
    """Parse a matched number, dropping thousands separators.

    Returns None for anything that is not a positive amount.
    """
    try:
        amount = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def match_price(line: str) -> PriceMatch | None:
    """Find the price on a line using the first pattern that matches."""
    for name, pattern in PRICE_PATTERNS:
        m = pattern.search(line)
        if m is None:
            continue
        amount = parse_amount(m.group("amount"))
        if amount is None:
            return None
        return PriceMatch(amount=amount, start=m.start(), end=m.end(), pattern=name)
    return None


def find_email(line: str) -> re.Match[str] | None:
    return EMAIL_PATTERN.search(line)


def find_phone(line: str) -> re.Match[str] | None:
    return PHONE_PATTERN.search(line)


def normalize_phone(raw: str) -> str:
    """Strip whitespace and separators from a phone number, keeping a leading +."""
    return re.sub(r"[\s\-().]", "", raw)


def has_price_pattern(line: str) -> bool:
    """True if any price pattern matches, whatever the amount."""
    return any(pattern.search(line) for _, pattern in PRICE_PATTERNS)
