"""Record extractor base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .models import ExtractedContact, ExtractedProduct, PriceMatch

if TYPE_CHECKING:
    from ..config import IntakeConfig


class RecordExtractor(ABC):
    """Turns the recognized text of one image into records."""

    kind: str = ""

    @abstractmethod
    def extract(self, text: str, source: str = "") -> list[Any]:
        """Extract records from OCR text.

        Args:
            text: Recognized text, newline separated.
            source: Name of the image the text came from (used in
                synthesized descriptions).
        """
        ...


def create_extractor(kind: str, config: IntakeConfig | None = None) -> RecordExtractor:
    """Create the extractor for ``"products"`` or ``"contacts"``."""
    match kind:
        case "products":
            from .receipts import ReceiptExtractor

            if config is None:
                return ReceiptExtractor()
            return ReceiptExtractor(
                summary_keywords=config.extraction.summary_keywords,
                fallback=config.extraction.fallback,
            )
        case "contacts":
            from .contacts import ContactExtractor

            return ContactExtractor()
        case _:
            raise ValueError(
                f"Unknown record kind: {kind!r} (choose products or contacts)"
            )


__all__ = [
    "RecordExtractor",
    "create_extractor",
    "ExtractedProduct",
    "ExtractedContact",
    "PriceMatch",
]
