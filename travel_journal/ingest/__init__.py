"""Upload pipeline: format normalization, metadata extraction, storage."""

from .extractor import extract_metadata, read_dimensions
from .normalizer import is_legacy_format, normalize_upload
from .pipeline import generate_storage_filename, upload_photo, validate_upload
from .taxonomy import DEFAULT_TAGS, classify_filename

__all__ = [
    "DEFAULT_TAGS",
    "classify_filename",
    "extract_metadata",
    "generate_storage_filename",
    "is_legacy_format",
    "normalize_upload",
    "read_dimensions",
    "upload_photo",
    "validate_upload",
]
