"""OCR backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import IntakeConfig

DEFAULT_LANGUAGES: list[str] = ["eng", "chi_sim", "chi_tra"]


class OCRBackend(ABC):
    """Abstract base for turning an image into recognized text."""

    @abstractmethod
    async def recognize(self, image: bytes, languages: list[str]) -> str:
        """Recognize the text in one image.

        Args:
            image: Encoded image bytes (JPEG, PNG, ...).
            languages: Tesseract-style language hints, e.g. ``["eng", "chi_sim"]``.

        Returns:
            The recognized text, one line per line of the image.
        """
        ...


def create_backend(config: IntakeConfig) -> OCRBackend:
    """Create an OCR backend based on configuration."""
    backend_name = config.ocr.backend

    match backend_name:
        case "tesseract":
            from .tesseract import TesseractOCRBackend

            return TesseractOCRBackend(
                tesseract_cmd=config.ocr.tesseract.cmd,
                preprocess=config.ocr.tesseract.preprocess,
            )
        case "claude":
            from .claude import ClaudeOCRBackend

            return ClaudeOCRBackend(
                api_key=config.ocr.claude.api_key,
                model=config.ocr.claude.model,
            )
        case "gemini":
            from .gemini import GeminiOCRBackend

            return GeminiOCRBackend(
                api_key=config.ocr.gemini.api_key,
                model=config.ocr.gemini.model,
            )
        case _:
            raise ValueError(
                f"Unknown OCR backend: {backend_name!r} "
                f"(choose tesseract, claude or gemini)"
            )


def strip_code_fences(text: str) -> str:
    """Remove markdown fences an LLM may wrap its transcription in."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines)
    return cleaned


_LANGUAGE_NAMES: dict[str, str] = {
    "eng": "English",
    "chi_sim": "Simplified Chinese",
    "chi_tra": "Traditional Chinese",
}


def transcription_prompt(languages: list[str]) -> str:
    """Prompt asking a vision model for a plain line-by-line transcription."""
    names = ", ".join(_LANGUAGE_NAMES.get(lang, lang) for lang in languages)
    return (
        "This image is a photographed receipt, product tag or handwritten list.\n"
        f"The text may be written in: {names}.\n"
        "Transcribe every line of text exactly as it appears, top to bottom,\n"
        "one line of output per printed line. Keep prices, currency symbols,\n"
        "email addresses and phone numbers unchanged.\n"
        "Return only the transcription, with no commentary."
    )
