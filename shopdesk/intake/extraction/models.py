"""Data models for records reconstructed from OCR text."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class PriceMatch:
    """A price found on a single OCR line."""

    amount: Decimal
    start: int  # offset of the matched text within the line
    end: int
    pattern: str  # name of the pattern that matched

    @property
    def price(self) -> str:
        """Canonical two-decimal string, e.g. ``"24.99"``."""
        return f"{self.amount:.2f}"


@dataclass
class ExtractedProduct:
    """A catalog product read from a receipt or product tag."""

    name: str
    price: str  # canonical "12.34", currency symbol dropped
    category: str = "Clothing"
    description: str = ""


@dataclass
class ExtractedContact:
    """A customer contact read from a photographed list."""

    name: str
    email: str
    phone: str | None = None
