"""Tests for the batch intake pipeline."""

import asyncio
import sqlite3
from unittest.mock import MagicMock

import pytest

from shopdesk.intake.db.sessions import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    UploadSessionDB,
)
from shopdesk.intake.extraction.contacts import ContactExtractor
from shopdesk.intake.extraction.receipts import ReceiptExtractor
from shopdesk.intake.ocr import OCRBackend
from shopdesk.intake.pipeline import (
    ImageInput,
    IntakePipeline,
    NothingExtractedError,
    OCRFailedError,
    load_images,
)


class FakeOCRBackend(OCRBackend):
    """Returns canned text per image; raises for images mapped to an exception."""

    def __init__(self, texts, delays=None):
        self.texts = texts
        self.delays = delays or {}
        self.active = 0
        self.max_active = 0
        self.calls = []

    async def recognize(self, image, languages):
        self.calls.append((image, languages))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(image, 0))
            result = self.texts[image]
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            self.active -= 1


@pytest.fixture
def sessions(tmp_path):
    db = UploadSessionDB(db_path=tmp_path / "test.db")
    yield db
    db.close()


def _images(*names):
    return [ImageInput(filename=f"{n.decode()}.jpg", data=n) for n in names]


@pytest.mark.asyncio
async def test_run_without_store_returns_dicts():
    backend = FakeOCRBackend({b"a": "Blue Cotton Shirt\n$24.99\n"})
    pipeline = IntakePipeline(backend, ReceiptExtractor())

    result = await pipeline.run(_images(b"a"))

    assert result.message == "Successfully extracted and created 1 products from OCR"
    assert result.records == [
        {
            "name": "Blue Cotton Shirt",
            "price": "24.99",
            "category": "Shirts",
            "description": "Extracted from receipt: $24.99",
        }
    ]
    assert result.extracted_text == "Blue Cotton Shirt\n$24.99"
    assert result.failed_images == []


@pytest.mark.asyncio
async def test_languages_are_passed_to_backend():
    backend = FakeOCRBackend({b"a": "Blue Cotton Shirt\n$24.99\n"})
    pipeline = IntakePipeline(backend, ReceiptExtractor(), languages=["eng"])
    await pipeline.run(_images(b"a"))
    assert backend.calls == [(b"a", ["eng"])]


@pytest.mark.asyncio
async def test_records_keep_upload_order():
    backend = FakeOCRBackend(
        {
            b"a": "Denim Jeans $39.99",
            b"b": "Wool Sweater 59.00",
            b"c": "Silk Scarf $12.00",
        },
        delays={b"a": 0.05, b"b": 0.02},
    )
    pipeline = IntakePipeline(backend, ReceiptExtractor(), max_concurrency=3)

    result = await pipeline.run(_images(b"a", b"b", b"c"))

    assert [r["name"] for r in result.records] == [
        "Denim Jeans",
        "Wool Sweater",
        "Silk Scarf",
    ]
    assert result.extracted_text == (
        "Denim Jeans $39.99\n\nWool Sweater 59.00\n\nSilk Scarf $12.00"
    )


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    texts = {bytes([i]): "Silk Scarf $12.00" for i in range(6)}
    backend = FakeOCRBackend(texts, delays={k: 0.01 for k in texts})
    pipeline = IntakePipeline(backend, ReceiptExtractor(), max_concurrency=2)

    images = [ImageInput(filename=f"{i}.jpg", data=k) for i, k in enumerate(texts)]
    result = await pipeline.run(images)

    assert len(result.records) == 6
    assert backend.max_active <= 2


@pytest.mark.asyncio
async def test_failed_image_is_skipped():
    backend = FakeOCRBackend(
        {b"a": "Blue Cotton Shirt\n$24.99", b"b": RuntimeError("OCR crashed")}
    )
    pipeline = IntakePipeline(backend, ReceiptExtractor())

    result = await pipeline.run(_images(b"a", b"b"))

    assert len(result.records) == 1
    assert result.failed_images == ["b.jpg"]


@pytest.mark.asyncio
async def test_all_images_failed():
    backend = FakeOCRBackend(
        {b"a": RuntimeError("boom"), b"b": ValueError("Could not decode image data")}
    )
    pipeline = IntakePipeline(backend, ReceiptExtractor())

    with pytest.raises(OCRFailedError, match="failed for all 2 images") as exc_info:
        await pipeline.run(_images(b"a", b"b"))

    assert isinstance(exc_info.value, NothingExtractedError)
    assert exc_info.value.failed_images == ["a.jpg", "b.jpg"]


@pytest.mark.asyncio
async def test_nothing_extracted():
    backend = FakeOCRBackend({b"a": "ab\nc\n"})
    pipeline = IntakePipeline(backend, ReceiptExtractor())

    with pytest.raises(NothingExtractedError, match="No products could be extracted"):
        await pipeline.run(_images(b"a"))


@pytest.mark.asyncio
async def test_no_images():
    pipeline = IntakePipeline(FakeOCRBackend({}), ReceiptExtractor())
    with pytest.raises(ValueError, match="No images uploaded"):
        await pipeline.run([])


def test_invalid_max_concurrency():
    with pytest.raises(ValueError, match="max_concurrency"):
        IntakePipeline(FakeOCRBackend({}), ReceiptExtractor(), max_concurrency=0)


@pytest.mark.asyncio
async def test_store_receives_all_records():
    backend = FakeOCRBackend(
        {b"a": "Denim Jeans $39.99", b"b": "Wool Sweater 59.00"}
    )
    store = MagicMock()
    store.bulk_insert.return_value = [{"id": 1}, {"id": 2}]
    pipeline = IntakePipeline(backend, ReceiptExtractor(), store)

    result = await pipeline.run(_images(b"a", b"b"))

    store.bulk_insert.assert_called_once()
    inserted = store.bulk_insert.call_args.args[0]
    assert [p.name for p in inserted] == ["Denim Jeans", "Wool Sweater"]
    assert result.records == [{"id": 1}, {"id": 2}]


@pytest.mark.asyncio
async def test_store_error_propagates(sessions):
    backend = FakeOCRBackend({b"a": "Denim Jeans $39.99"})
    store = MagicMock()
    store.bulk_insert.side_effect = sqlite3.OperationalError("database is locked")
    pipeline = IntakePipeline(backend, ReceiptExtractor(), store, sessions=sessions)

    with pytest.raises(sqlite3.OperationalError):
        await pipeline.run(_images(b"a"))

    row = sessions.get_recent(1)[0]
    assert row["status"] == STATUS_FAILED
    assert row["error_message"] == "database is locked"


@pytest.mark.asyncio
async def test_store_error_keeps_failed_image_count(sessions):
    backend = FakeOCRBackend(
        {b"a": "Denim Jeans $39.99", b"b": RuntimeError("boom")}
    )
    store = MagicMock()
    store.bulk_insert.side_effect = sqlite3.OperationalError("database is locked")
    pipeline = IntakePipeline(backend, ReceiptExtractor(), store, sessions=sessions)

    with pytest.raises(sqlite3.OperationalError):
        await pipeline.run(_images(b"a", b"b"))

    row = sessions.get_recent(1)[0]
    assert row["status"] == STATUS_FAILED
    assert row["failed_images"] == 1


@pytest.mark.asyncio
async def test_session_recorded_on_success(sessions):
    backend = FakeOCRBackend(
        {b"a": "Denim Jeans $39.99", b"b": RuntimeError("boom")}
    )
    pipeline = IntakePipeline(backend, ReceiptExtractor(), sessions=sessions)

    await pipeline.run(_images(b"a", b"b"))

    row = sessions.get_recent(1)[0]
    assert row["type"] == "ocr"
    assert row["status"] == STATUS_COMPLETED
    assert row["file_name"] == "a.jpg, b.jpg"
    assert row["total_images"] == 2
    assert row["failed_images"] == 1
    assert row["processed_records"] == 1


@pytest.mark.asyncio
async def test_session_recorded_on_failure(sessions):
    backend = FakeOCRBackend({b"a": "Thank you"})
    pipeline = IntakePipeline(backend, ContactExtractor(), sessions=sessions)

    with pytest.raises(NothingExtractedError):
        await pipeline.run(_images(b"a"))

    row = sessions.get_recent(1)[0]
    assert row["type"] == "users-ocr"
    assert row["status"] == STATUS_FAILED
    assert "No contacts could be extracted" in row["error_message"]


@pytest.mark.asyncio
async def test_contacts_batch():
    backend = FakeOCRBackend(
        {
            b"a": "John Smith\njohn@example.com\n555-123-4567",
            b"b": "Jane Doe\njane@example.com",
        }
    )
    pipeline = IntakePipeline(backend, ContactExtractor())

    result = await pipeline.run(_images(b"a", b"b"))

    assert result.message == "Successfully extracted and created 2 contacts from OCR"
    assert result.records == [
        {"name": "John Smith", "email": "john@example.com", "phone": "5551234567"},
        {"name": "Jane Doe", "email": "jane@example.com", "phone": None},
    ]


def test_load_images(tmp_path):
    first = tmp_path / "first.jpg"
    second = tmp_path / "second.png"
    first.write_bytes(b"\xff\xd8one")
    second.write_bytes(b"\x89PNGtwo")

    images = load_images([first, str(second)])

    assert [i.filename for i in images] == ["first.jpg", "second.png"]
    assert images[1].data == b"\x89PNGtwo"


def test_load_images_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_images([tmp_path / "missing.jpg"])
