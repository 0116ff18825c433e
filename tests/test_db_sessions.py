"""Tests for UploadSessionDB batch records."""

import pytest

from shopdesk.intake.db.sessions import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
    UploadSessionDB,
)


@pytest.fixture
def db(tmp_path):
    """Create a temporary UploadSessionDB."""
    sessions = UploadSessionDB(db_path=tmp_path / "test.db")
    yield sessions
    sessions.close()


def test_start_records_processing(db):
    sid = db.start("ocr", file_name="a.jpg, b.jpg", total_images=2)
    row = db.get(sid)
    assert row["type"] == "ocr"
    assert row["status"] == STATUS_PROCESSING
    assert row["file_name"] == "a.jpg, b.jpg"
    assert row["total_images"] == 2


def test_finish_completed(db):
    sid = db.start("users-ocr", total_images=1)
    db.finish(sid, STATUS_COMPLETED, processed_records=3)
    row = db.get(sid)
    assert row["status"] == STATUS_COMPLETED
    assert row["processed_records"] == 3
    assert row["error_message"] is None


def test_finish_failed(db):
    sid = db.start("ocr", total_images=1)
    db.finish(sid, STATUS_FAILED, failed_images=1, error_message="boom")
    row = db.get(sid)
    assert row["status"] == STATUS_FAILED
    assert row["failed_images"] == 1
    assert row["error_message"] == "boom"


def test_get_missing(db):
    assert db.get(999) is None


def test_get_recent_newest_first(db):
    first = db.start("ocr")
    second = db.start("users-ocr")
    rows = db.get_recent(limit=10)
    assert [r["id"] for r in rows] == [second, first]
    assert len(db.get_recent(limit=1)) == 1
