from __future__ import annotations

from io import BytesIO
from typing import Optional

from PIL import Image

from travel_journal.core.models import PhotoMetadata

from .taxonomy import classify_filename


def read_dimensions(data: bytes) -> Optional[tuple[int, int]]:
    """Return (width, height) of encoded image bytes, or None if they do not decode."""
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
    except Exception:
        # Undecodable images are still stored; they just lack dimensions.
        return None
    return width, height


def extract_metadata(data: bytes, original_name: str) -> PhotoMetadata:
    """Dimensions come from the stored bytes, tags and category from the original name."""
    dimensions = read_dimensions(data)
    tags, category = classify_filename(original_name)
    return PhotoMetadata(
        width=dimensions[0] if dimensions else None,
        height=dimensions[1] if dimensions else None,
        tags=tags,
        category=category,
    )
