"""Catalog table and SQL-backed catalog store for the gallery."""

from .catalog import CatalogStore, SqlCatalogStore, matches_search
from .schema import (
    Base,
    GalleryPhotoRow,
    create_engine_from_url,
    init_db,
    session_factory,
)

__all__ = [
    "Base",
    "CatalogStore",
    "GalleryPhotoRow",
    "SqlCatalogStore",
    "create_engine_from_url",
    "init_db",
    "matches_search",
    "session_factory",
]
