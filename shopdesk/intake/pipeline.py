"""Batch OCR intake: recognize images, extract records, store them."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from .db.sessions import STATUS_COMPLETED, STATUS_FAILED
from .ocr import DEFAULT_LANGUAGES

if TYPE_CHECKING:
    from .db.sessions import UploadSessionDB
    from .extraction import RecordExtractor
    from .ocr import OCRBackend

logger = logging.getLogger(__name__)

# Upload session type recorded per record kind
_SESSION_TYPES: dict[str, str] = {
    "products": "ocr",
    "contacts": "users-ocr",
}


class RecordStore(Protocol):
    def bulk_insert(self, records: list[Any]) -> list[dict]: ...


class NothingExtractedError(RuntimeError):
    """No record could be extracted from any image of the batch."""

    def __init__(self, message: str, failed_images: list[str] | None = None) -> None:
        super().__init__(message)
        self.failed_images = failed_images or []


class OCRFailedError(NothingExtractedError):
    """Text recognition raised for every image of the batch."""


@dataclass
class ImageInput:
    filename: str
    data: bytes


@dataclass
class IntakeResult:
    message: str
    records: list[dict]
    extracted_text: str = ""
    failed_images: list[str] = field(default_factory=list)


@dataclass
class _ImageOutcome:
    records: list[Any] = field(default_factory=list)
    text: str = ""
    failed: bool = False


def load_images(paths: list[str | Path]) -> list[ImageInput]:
    """Read image files from disk, keeping their order."""
    images: list[ImageInput] = []
    for path in paths:
        p = Path(path)
        images.append(ImageInput(filename=p.name, data=p.read_bytes()))
    return images


class IntakePipeline:
    """Runs OCR and record extraction over a batch of uploaded images.

    Images are recognized concurrently (up to ``max_concurrency`` at a time)
    but records are always returned in upload order. A failure on one image
    is logged and the image is skipped.
    """

    def __init__(
        self,
        backend: OCRBackend,
        extractor: RecordExtractor,
        store: RecordStore | None = None,
        *,
        languages: list[str] | None = None,
        max_concurrency: int = 4,
        sessions: UploadSessionDB | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._backend = backend
        self._extractor = extractor
        self._store = store
        self._languages = languages or list(DEFAULT_LANGUAGES)
        self._max_concurrency = max_concurrency
        self._sessions = sessions

    @property
    def kind(self) -> str:
        return self._extractor.kind or "records"

    async def extract(self, images: list[ImageInput]) -> tuple[list[Any], str, list[str]]:
        """Recognize and extract every image without storing anything.

        Returns:
            (records, extracted text of all images, names of failed images)
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def process(image: ImageInput) -> _ImageOutcome:
            async with semaphore:
                return await self._process_image(image)

        outcomes = await asyncio.gather(*(process(image) for image in images))

        records: list[Any] = []
        texts: list[str] = []
        failed: list[str] = []
        for image, outcome in zip(images, outcomes):
            if outcome.failed:
                failed.append(image.filename)
                continue
            records.extend(outcome.records)
            if outcome.text.strip():
                texts.append(outcome.text.strip())
        return records, "\n\n".join(texts), failed

    async def run(self, images: list[ImageInput]) -> IntakeResult:
        """Process a batch and bulk-insert the extracted records.

        Raises:
            ValueError: If no images were given.
            OCRFailedError: If text recognition failed for every image.
            NothingExtractedError: If no record could be extracted.
        """
        if not images:
            raise ValueError("No images uploaded")

        session_id = None
        if self._sessions is not None:
            session_id = self._sessions.start(
                _SESSION_TYPES.get(self.kind, self.kind),
                file_name=", ".join(i.filename for i in images),
                total_images=len(images),
            )

        failed: list[str] = []
        try:
            records, text, failed = await self.extract(images)

            if len(failed) == len(images):
                raise OCRFailedError(
                    f"Text recognition failed for all {len(images)} images",
                    failed_images=failed,
                )
            if not records:
                raise NothingExtractedError(
                    f"No {self.kind} could be extracted from the images",
                    failed_images=failed,
                )

            if self._store is None:
                stored = [asdict(r) for r in records]
            else:
                stored = self._store.bulk_insert(records)
        except Exception as e:
            if session_id is not None:
                self._sessions.finish(
                    session_id,
                    STATUS_FAILED,
                    failed_images=len(failed),
                    error_message=str(e),
                )
            raise

        if session_id is not None:
            self._sessions.finish(
                session_id,
                STATUS_COMPLETED,
                processed_records=len(stored),
                failed_images=len(failed),
            )

        logger.info(
            "Extracted %d %s from %d images (%d failed)",
            len(stored),
            self.kind,
            len(images),
            len(failed),
        )
        return IntakeResult(
            message=f"Successfully extracted and created {len(stored)} {self.kind} from OCR",
            records=stored,
            extracted_text=text,
            failed_images=failed,
        )

    async def _process_image(self, image: ImageInput) -> _ImageOutcome:
        try:
            text = await self._backend.recognize(image.data, self._languages)
            records = self._extractor.extract(text, source=image.filename)
        except Exception:
            logger.exception("OCR error for file %s", image.filename)
            return _ImageOutcome(failed=True)

        logger.debug(
            "%s: %d lines of text, %d %s",
            image.filename,
            len(text.splitlines()),
            len(records),
            self.kind,
        )
        return _ImageOutcome(records=records, text=text)
