from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_CATEGORY = "general"
CATEGORIES = ("landscape", "action", "portrait", "food", "accommodation", DEFAULT_CATEGORY)

# Labels shown by the gallery filter selector.
CATEGORY_LABELS = {
    "landscape": "풍경",
    "action": "액션",
    "portrait": "인물",
    "food": "음식",
    "accommodation": "숙소",
    "general": "일반",
}


def _clean_tags(tags: list[str]) -> list[str]:
    cleaned: list[str] = []
    for tag in tags:
        value = tag.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class Photo(BaseModel):
    """One row of the gallery catalog."""

    id: str
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    width: Optional[int] = None
    height: Optional[int] = None
    exif_data: Optional[dict[str, Any]] = None
    location_data: Optional[dict[str, Any]] = None
    tags: list[str] = Field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    uploaded_at: datetime


class PhotoDraft(BaseModel):
    """Photo fields known before the catalog assigns an id and upload time."""

    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    width: Optional[int] = None
    height: Optional[int] = None
    exif_data: Optional[dict[str, Any]] = None
    location_data: Optional[dict[str, Any]] = None
    tags: list[str]
    category: str


class PhotoUpdate(BaseModel):
    id: str
    tags: list[str]
    category: str

    @field_validator("id")
    @classmethod
    def _id_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("id is required")
        return value

    @field_validator("tags")
    @classmethod
    def _tags_not_empty(cls, value: list[str]) -> list[str]:
        cleaned = _clean_tags(value)
        if not cleaned:
            raise ValueError("at least one tag is required")
        return cleaned

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in CATEGORIES:
            raise ValueError(f"unknown category: {value}")
        return value


class NormalizedImage(BaseModel):
    data: bytes
    filename: str
    content_type: str
    converted: bool = False


class PhotoMetadata(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    # Reserved until real EXIF/GPS extraction exists; always None for now.
    exif_data: Optional[dict[str, Any]] = None
    location_data: Optional[dict[str, Any]] = None
    tags: list[str]
    category: str


class UploadResult(BaseModel):
    photo: Photo
    url: str


class DeleteResult(BaseModel):
    """Outcome of a delete: the row is always gone, the object may have leaked."""

    photo: Photo
    storage_reclaimed: bool

    @property
    def orphaned_key(self) -> Optional[str]:
        return None if self.storage_reclaimed else self.photo.file_path


class GalleryStats(BaseModel):
    total_photos: int
    total_bytes: int
    category_count: int
    tag_count: int
    categories: dict[str, int] = Field(default_factory=dict)
    category_labels: dict[str, str] = Field(default_factory=lambda: dict(CATEGORY_LABELS))


class UploadOutcome(BaseModel):
    name: str
    success: bool
    message: str
    photo: Optional[Photo] = None
    url: Optional[str] = None


class UploadProgress(BaseModel):
    """Running state of a client-side batch upload after one file resolves."""

    completed: int
    total: int
    succeeded: int
    failed: int
    outcome: UploadOutcome

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0

    @property
    def message(self) -> str:
        return f"{self.succeeded} uploaded, {self.failed} failed ({self.completed}/{self.total})"
