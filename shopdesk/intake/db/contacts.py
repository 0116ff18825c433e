"""Customer contact CRUD operations."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from .schema import ensure_schema

if TYPE_CHECKING:
    from ..extraction.models import ExtractedContact


class ContactDB:
    """Manages the contacts table."""

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

    def bulk_insert(self, contacts: list[ExtractedContact]) -> list[dict]:
        """Insert contacts in one transaction and return the stored rows."""
        conn = self._get_conn()
        ids: list[int] = []
        try:
            for contact in contacts:
                cur = conn.execute(
                    "INSERT INTO contacts (name, email, phone) VALUES (?, ?, ?)",
                    (contact.name, contact.email, contact.phone),
                )
                ids.append(cur.lastrowid)
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return [self.get_contact(i) for i in ids]

    def get_contacts(self) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM contacts ORDER BY created_at DESC, id DESC"
        ).fetchall()
        return [dict(r) for r in rows]

    def get_contact(self, contact_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM contacts WHERE id = ?", (contact_id,)
        ).fetchone()
        return dict(row) if row else None

    def search_contacts(self, query: str = "") -> list[dict]:
        """Case-insensitive search over name and email."""
        conn = self._get_conn()
        pattern = f"%{query.lower()}%"
        rows = conn.execute(
            """SELECT * FROM contacts
               WHERE LOWER(name) LIKE ? OR LOWER(email) LIKE ?
               ORDER BY created_at DESC, id DESC""",
            (pattern, pattern),
        ).fetchall()
        return [dict(r) for r in rows]

    def delete_contact(self, contact_id: int) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
        conn.commit()

    def count(self) -> int:
        conn = self._get_conn()
        return conn.execute("SELECT COUNT(*) FROM contacts").fetchone()[0]
