"""Gemini API OCR backend."""

from __future__ import annotations

from . import OCRBackend, strip_code_fences, transcription_prompt
from .claude import _media_type


class GeminiOCRBackend(OCRBackend):
    """Transcribe images using Google Gemini's vision capability."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def recognize(self, image: bytes, languages: list[str]) -> str:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        parts: list = [
            {"mime_type": _media_type(image), "data": image},
            transcription_prompt(languages),
        ]
        response = await model.generate_content_async(parts)
        return strip_code_fences(response.text)
