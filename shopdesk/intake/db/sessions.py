"""Upload session records for OCR batches."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from .schema import ensure_schema

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class UploadSessionDB:
    """Manages the upload_sessions table.

    One row per OCR batch, so failed batches can be told apart from batches
    that simply contained nothing.
    """

    def __init__(self, db_path: str | Path = "~/.config/shopdesk/catalog.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def start(self, kind: str, file_name: str = "", total_images: int = 0) -> int:
        """Record a new batch in the processing state.

        Args:
            kind: ``"ocr"`` for products, ``"users-ocr"`` for contacts.

        Returns:
            The session ID.
        """
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO upload_sessions (type, status, file_name, total_images)
               VALUES (?, ?, ?, ?)""",
            (kind, STATUS_PROCESSING, file_name, total_images),
        )
        conn.commit()
        return cur.lastrowid

    def finish(
        self,
        session_id: int,
        status: str,
        *,
        processed_records: int = 0,
        failed_images: int = 0,
        error_message: str | None = None,
    ) -> None:
        """Mark a batch completed or failed."""
        conn = self._get_conn()
        conn.execute(
            """UPDATE upload_sessions
               SET status = ?,
                   processed_records = ?,
                   failed_images = ?,
                   error_message = ?,
                   updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (status, processed_records, failed_images, error_message, session_id),
        )
        conn.commit()

    def get(self, session_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM upload_sessions WHERE id = ?", (session_id,)
        ).fetchone()
        return dict(row) if row else None

    def get_recent(self, limit: int = 20) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM upload_sessions ORDER BY id DESC LIMIT ?", (limit,)
        ).fetchall()
        return [dict(r) for r in rows]
