"""SQLite storage for the catalog, contacts and upload sessions."""

from .catalog import CatalogDB
from .contacts import ContactDB
from .schema import ensure_schema
from .sessions import UploadSessionDB

__all__ = [
    "CatalogDB",
    "ContactDB",
    "UploadSessionDB",
    "ensure_schema",
]
