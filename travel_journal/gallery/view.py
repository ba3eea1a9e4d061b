from __future__ import annotations

from collections import Counter
from typing import Iterable

from travel_journal.core.models import GalleryStats, Photo

SORT_ORDERS = ("date", "name", "size")


def sort_photos(photos: Iterable[Photo], order: str = "date") -> list[Photo]:
    """Order photos newest first (date), by original name, or largest first (size)."""
    items = list(photos)
    if order == "name":
        return sorted(items, key=lambda photo: photo.original_name.casefold())
    if order == "size":
        return sorted(items, key=lambda photo: photo.file_size, reverse=True)
    if order != "date":
        raise ValueError(f"Unknown sort order: {order}")
    return sorted(items, key=lambda photo: photo.uploaded_at, reverse=True)


def summarize_gallery(photos: Iterable[Photo]) -> GalleryStats:
    items = list(photos)
    categories = Counter(photo.category for photo in items)
    tags = {tag for photo in items for tag in photo.tags}
    return GalleryStats(
        total_photos=len(items),
        total_bytes=sum(photo.file_size for photo in items),
        category_count=len(categories),
        tag_count=len(tags),
        categories=dict(categories),
    )


def format_size(num_bytes: int) -> str:
    return f"{num_bytes / 1024 / 1024:.2f} MB"
