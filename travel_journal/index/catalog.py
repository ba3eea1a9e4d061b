from __future__ import annotations

import logging
from datetime import timezone
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from travel_journal.core.errors import PhotoNotFoundError, UpstreamError
from travel_journal.core.models import Photo, PhotoDraft

from .schema import GalleryPhotoRow

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    def insert(self, draft: PhotoDraft) -> Photo: ...

    def get(self, photo_id: str) -> Optional[Photo]: ...

    def update(self, photo_id: str, tags: list[str], category: str) -> Photo: ...

    def query(self, category: Optional[str] = None, search: Optional[str] = None) -> list[Photo]: ...

    def delete(self, photo_id: str) -> Photo: ...


def matches_search(photo: Photo, term: str) -> bool:
    """Name contains the term (any case) OR the term is one of the tags."""
    if term.casefold() in photo.original_name.casefold():
        return True
    return term in photo.tags


def _to_photo(row: GalleryPhotoRow) -> Photo:
    uploaded_at = row.uploaded_at
    if uploaded_at.tzinfo is None:
        # SQLite drops the offset; stored values are always UTC.
        uploaded_at = uploaded_at.replace(tzinfo=timezone.utc)
    return Photo(
        id=row.id,
        filename=row.filename,
        original_name=row.original_name,
        file_path=row.file_path,
        file_size=row.file_size,
        mime_type=row.mime_type,
        width=row.width,
        height=row.height,
        exif_data=row.exif_data,
        location_data=row.location_data,
        tags=list(row.tags or []),
        category=row.category,
        uploaded_at=uploaded_at,
    )


class SqlCatalogStore:
    """Catalog kept in a SQLAlchemy database (SQLite for local use)."""

    def __init__(self, sessions: sessionmaker[Session]) -> None:
        self.sessions = sessions

    def insert(self, draft: PhotoDraft) -> Photo:
        row = GalleryPhotoRow(**draft.model_dump())
        try:
            with self.sessions() as session:
                session.add(row)
                session.commit()
                return _to_photo(row)
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Catalog insert failed: {exc.__class__.__name__}") from exc

    def get(self, photo_id: str) -> Optional[Photo]:
        try:
            with self.sessions() as session:
                row = session.get(GalleryPhotoRow, photo_id)
                return _to_photo(row) if row else None
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Catalog lookup failed: {exc.__class__.__name__}") from exc

    def update(self, photo_id: str, tags: list[str], category: str) -> Photo:
        try:
            with self.sessions() as session:
                row = session.get(GalleryPhotoRow, photo_id)
                if row is None:
                    raise PhotoNotFoundError(photo_id)
                row.tags = list(tags)
                row.category = category
                session.commit()
                return _to_photo(row)
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Catalog update failed: {exc.__class__.__name__}") from exc

    def query(self, category: Optional[str] = None, search: Optional[str] = None) -> list[Photo]:
        stmt = select(GalleryPhotoRow).order_by(
            GalleryPhotoRow.uploaded_at.desc(), GalleryPhotoRow.id
        )
        if category:
            stmt = stmt.where(GalleryPhotoRow.category == category)
        try:
            with self.sessions() as session:
                photos = [_to_photo(row) for row in session.scalars(stmt)]
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Catalog query failed: {exc.__class__.__name__}") from exc
        # Tag membership is not portable across SQL dialects; filter in Python.
        if search:
            photos = [photo for photo in photos if matches_search(photo, search)]
        return photos

    def delete(self, photo_id: str) -> Photo:
        try:
            with self.sessions() as session:
                row = session.get(GalleryPhotoRow, photo_id)
                if row is None:
                    raise PhotoNotFoundError(photo_id)
                photo = _to_photo(row)
                session.delete(row)
                session.commit()
                return photo
        except SQLAlchemyError as exc:
            raise UpstreamError(f"Catalog delete failed: {exc.__class__.__name__}") from exc
