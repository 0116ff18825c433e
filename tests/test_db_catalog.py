"""Tests for CatalogDB CRUD operations."""

import sqlite3
from unittest.mock import patch

import pytest

from shopdesk.intake.db.catalog import CatalogDB
from shopdesk.intake.extraction.models import ExtractedProduct


@pytest.fixture
def db(tmp_path):
    """Create a temporary CatalogDB."""
    catalog = CatalogDB(db_path=tmp_path / "test.db")
    yield catalog
    catalog.close()


@pytest.fixture
def sample_products():
    return [
        ExtractedProduct(
            name="Blue Cotton Shirt",
            price="24.99",
            category="Shirts",
            description="Extracted from receipt: $24.99",
        ),
        ExtractedProduct(
            name="Leather Wallet",
            price="45.00",
            category="Accessories",
            description="Extracted from receipt: 2 x Leather Wallet 45.00",
        ),
    ]


def test_bulk_insert_returns_rows(db, sample_products):
    rows = db.bulk_insert(sample_products)
    assert len(rows) == 2
    assert all(isinstance(r["id"], int) for r in rows)
    assert rows[0]["name"] == "Blue Cotton Shirt"
    assert rows[0]["price"] == "24.99"
    assert rows[1]["category"] == "Accessories"


def test_bulk_insert_empty(db):
    assert db.bulk_insert([]) == []
    assert db.count() == 0


def test_bulk_insert_is_atomic(db, sample_products):
    """A failing row rolls back the rows inserted before it."""
    broken = ExtractedProduct(name=None, price="1.00")  # violates NOT NULL
    with pytest.raises(sqlite3.IntegrityError):
        db.bulk_insert([sample_products[0], broken])
    assert db.count() == 0


def test_get_products(db, sample_products):
    db.bulk_insert(sample_products)
    rows = db.get_products()
    assert {r["name"] for r in rows} == {"Blue Cotton Shirt", "Leather Wallet"}


def test_get_product_missing(db):
    assert db.get_product(999) is None


def test_add_product(db, sample_products):
    row = db.add_product(sample_products[0])
    assert row["name"] == "Blue Cotton Shirt"
    assert db.count() == 1


def test_search_products_by_name(db, sample_products):
    db.bulk_insert(sample_products)
    rows = db.search_products("wallet")
    assert [r["name"] for r in rows] == ["Leather Wallet"]


def test_search_products_by_description(db, sample_products):
    db.bulk_insert(sample_products)
    rows = db.search_products("2 x leather")
    assert len(rows) == 1


def test_search_products_category_filter(db, sample_products):
    db.bulk_insert(sample_products)
    assert len(db.search_products("", "Shirts")) == 1
    assert len(db.search_products("", "all")) == 2
    assert db.search_products("wallet", "Shirts") == []


def test_update_product(db, sample_products):
    row = db.add_product(sample_products[0])
    updated = db.update_product(row["id"], price="19.99", category="Tops")
    assert updated["price"] == "19.99"
    assert updated["category"] == "Tops"


def test_update_product_rejects_unknown_field(db, sample_products):
    row = db.add_product(sample_products[0])
    with pytest.raises(ValueError, match="Cannot update"):
        db.update_product(row["id"], id=5)


def test_delete_product(db, sample_products):
    rows = db.bulk_insert(sample_products)
    db.delete_product(rows[0]["id"])
    assert db.count() == 1
