"""Claude API OCR backend."""

from __future__ import annotations

import base64

from . import OCRBackend, strip_code_fences, transcription_prompt


class ClaudeOCRBackend(OCRBackend):
    """Transcribe images using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def recognize(self, image: bytes, languages: list[str]) -> str:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": _media_type(image),
                    "data": base64.standard_b64encode(image).decode(),
                },
            },
            {"type": "text", "text": transcription_prompt(languages)},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=4096,
            messages=[{"role": "user", "content": content}],
        )

        return strip_code_fences(response.content[0].text)


def _media_type(image: bytes) -> str:
    """Guess the media type from the image's magic bytes."""
    if image.startswith(b"\x89PNG"):
        return "image/png"
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    if image.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    return "image/jpeg"
