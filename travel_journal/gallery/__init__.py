"""Gallery listing, statistics, edits and the HTTP client used for batch uploads."""

from .client import GalleryClient, GalleryClientError
from .service import delete_photo, list_photos, retag_photo
from .view import SORT_ORDERS, format_size, sort_photos, summarize_gallery

__all__ = [
    "GalleryClient",
    "GalleryClientError",
    "SORT_ORDERS",
    "delete_photo",
    "format_size",
    "list_photos",
    "retag_photo",
    "sort_photos",
    "summarize_gallery",
]
