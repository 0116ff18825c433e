"""Local Tesseract OCR backend."""

from __future__ import annotations

import asyncio
import logging

from . import DEFAULT_LANGUAGES, OCRBackend

logger = logging.getLogger(__name__)


class TesseractOCRBackend(OCRBackend):
    """Recognize text with the Tesseract binary via pytesseract.

    Works offline. Images are decoded and binarized with OpenCV before
    recognition, which helps with photographed (unevenly lit) receipts.
    """

    def __init__(self, tesseract_cmd: str = "", preprocess: bool = True) -> None:
        self._tesseract_cmd = tesseract_cmd
        self._preprocess = preprocess

    async def recognize(self, image: bytes, languages: list[str]) -> str:
        return await asyncio.to_thread(self._recognize_sync, image, languages)

    def _recognize_sync(self, image: bytes, languages: list[str]) -> str:
        try:
            import pytesseract
        except ImportError:
            raise ImportError(
                "pytesseract is required: pip install pytesseract "
                "(and install the tesseract-ocr binary)"
            ) from None

        try:
            import cv2
            import numpy as np
        except ImportError:
            raise ImportError(
                "opencv-python and numpy are required for the Tesseract backend"
            ) from None

        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd

        buf = np.frombuffer(image, dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        if img is None:
            raise ValueError("Could not decode image data")

        if self._preprocess:
            gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
            _, img = cv2.threshold(
                gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
            )

        lang = "+".join(languages or DEFAULT_LANGUAGES)
        text = pytesseract.image_to_string(img, lang=lang)
        logger.debug("Tesseract (%s) recognized %d characters", lang, len(text))
        return text
