"""Product catalog CRUD operations."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from .schema import ensure_schema

if TYPE_CHECKING:
    from ..extraction.models import ExtractedProduct

_UPDATABLE = ("name", "description", "price", "category", "sku", "image_url")


class CatalogDB:
    """Manages the products table."""

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

    def bulk_insert(self, products: list[ExtractedProduct]) -> list[dict]:
        """Insert products in one transaction.

        Either every product is stored or, on error, none is.

        Returns:
            The stored rows, including their generated IDs.
        """
        conn = self._get_conn()
        ids: list[int] = []
        try:
            for product in products:
                cur = conn.execute(
                    """INSERT INTO products (name, description, price, category)
                       VALUES (?, ?, ?, ?)""",
                    (
                        product.name,
                        product.description,
                        product.price,
                        product.category,
                    ),
                )
                ids.append(cur.lastrowid)
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return [self.get_product(i) for i in ids]

    def add_product(self, product: ExtractedProduct) -> dict:
        """Insert a single product and return the stored row."""
        return self.bulk_insert([product])[0]

    def get_products(self) -> list[dict]:
        """Return all products, newest first."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM products ORDER BY created_at DESC, id DESC"
        ).fetchall()
        return [dict(r) for r in rows]

    def get_product(self, product_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        return dict(row) if row else None

    def search_products(self, query: str = "", category: str | None = None) -> list[dict]:
        """Case-insensitive search over name and description.

        A category of None or ``"all"`` does not filter.
        """
        conn = self._get_conn()
        pattern = f"%{query.lower()}%"
        sql = """SELECT * FROM products
                 WHERE (LOWER(name) LIKE ? OR LOWER(COALESCE(description, '')) LIKE ?)"""
        params: list = [pattern, pattern]
        if category and category != "all":
            sql += " AND category = ?"
            params.append(category)
        sql += " ORDER BY created_at DESC, id DESC"
        rows = conn.execute(sql, params).fetchall()
        return [dict(r) for r in rows]

    def update_product(self, product_id: int, **fields) -> dict | None:
        """Update the given columns of a product and return the new row."""
        unknown = set(fields) - set(_UPDATABLE)
        if unknown:
            raise ValueError(f"Cannot update product fields: {sorted(unknown)}")
        if fields:
            conn = self._get_conn()
            assignments = ", ".join(f"{name} = ?" for name in fields)
            conn.execute(
                f"UPDATE products SET {assignments} WHERE id = ?",
                (*fields.values(), product_id),
            )
            conn.commit()
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> None:
        """Delete a product by ID."""
        conn = self._get_conn()
        conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
        conn.commit()

    def count(self) -> int:
        conn = self._get_conn()
        return conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]
