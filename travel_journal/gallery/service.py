from __future__ import annotations

import logging
from typing import Optional

from travel_journal.core.errors import UpstreamError
from travel_journal.core.models import DeleteResult, Photo, PhotoUpdate
from travel_journal.index.catalog import CatalogStore
from travel_journal.storage.object_store import ObjectStore

from .view import sort_photos

logger = logging.getLogger(__name__)


def list_photos(
    catalog: CatalogStore,
    *,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "date",
) -> list[Photo]:
    category = (category or "").strip() or None
    search = (search or "").strip() or None
    return sort_photos(catalog.query(category=category, search=search), sort)


def retag_photo(catalog: CatalogStore, update: PhotoUpdate) -> Photo:
    """Replace a photo's tags and category; concurrent edits are last-write-wins."""
    photo = catalog.update(update.id, update.tags, update.category)
    logger.info("Retagged %s as %s %s", photo.id, photo.category, photo.tags)
    return photo


def delete_photo(
    photo_id: str,
    *,
    catalog: CatalogStore,
    object_store: ObjectStore,
    bucket: str,
) -> DeleteResult:
    """Delete the catalog row, then try to reclaim its stored object.

    An unknown id raises before storage is touched. A failed object removal
    is logged and reported through ``storage_reclaimed`` rather than raised.
    """
    photo = catalog.delete(photo_id)
    try:
        object_store.remove(bucket, [photo.file_path])
    except UpstreamError as exc:
        logger.warning(
            "Deleted photo %s but could not remove %s/%s: %s",
            photo.id,
            bucket,
            photo.file_path,
            exc,
        )
        return DeleteResult(photo=photo, storage_reclaimed=False)
    logger.info("Deleted photo %s (%s)", photo.id, photo.file_path)
    return DeleteResult(photo=photo, storage_reclaimed=True)
