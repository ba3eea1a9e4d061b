from __future__ import annotations

import logging
import secrets
import time
from pathlib import PurePosixPath
from typing import Optional

from travel_journal.core.config import UploadLimits
from travel_journal.core.errors import UploadValidationError, UpstreamError
from travel_journal.core.models import PhotoDraft, UploadResult
from travel_journal.index.catalog import CatalogStore
from travel_journal.storage.object_store import ObjectStore

from .extractor import extract_metadata
from .normalizer import is_legacy_format, normalize_upload

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "gallery"
KEY_PREFIX = "photos"

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
}
ALLOWED_CONTENT_TYPES = set(CONTENT_TYPE_EXTENSIONS)
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".heif"}
EXTENSION_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
SUFFIX_LENGTH = 6


def _suffix(filename: str) -> str:
    return PurePosixPath(filename).suffix.lower()


def resolve_content_type(filename: str, content_type: Optional[str]) -> str:
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    return EXTENSION_CONTENT_TYPES.get(_suffix(filename), declared or "application/octet-stream")


def validate_upload(
    data: Optional[bytes],
    filename: Optional[str],
    content_type: str,
    limits: UploadLimits,
) -> bytes:
    """Reject missing, disallowed, or oversized uploads before anything is written."""
    if data is None or not filename:
        raise UploadValidationError("No file provided")
    if not data:
        raise UploadValidationError("Empty file")
    if content_type not in ALLOWED_CONTENT_TYPES and _suffix(filename) not in ALLOWED_EXTENSIONS:
        raise UploadValidationError(f"Unsupported file type: {content_type or _suffix(filename)}")
    legacy = is_legacy_format(filename, content_type)
    ceiling = limits.max_legacy_bytes if legacy else limits.max_bytes
    if len(data) > ceiling:
        raise UploadValidationError(
            f"File too large: {len(data)} bytes exceeds {ceiling // (1024 * 1024)}MB limit"
        )
    return data


def generate_storage_filename(filename: str, content_type: str, now_ms: Optional[int] = None) -> str:
    """Build ``<unix-ms>-<base36 suffix>.<ext>`` for a final (possibly converted) file."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(SUFFIX_LENGTH))
    suffix_ext = _suffix(filename)
    if suffix_ext in ALLOWED_EXTENSIONS:
        ext = suffix_ext.lstrip(".")
    else:
        # Only image extensions are ever written; a stray suffix follows the content type.
        ext = CONTENT_TYPE_EXTENSIONS.get(content_type, "bin")
    return f"{timestamp}-{suffix}.{ext}"


def storage_key(filename: str) -> str:
    return f"{KEY_PREFIX}/{filename}"


def _compensate_storage_write(object_store: ObjectStore, bucket: str, key: str) -> bool:
    try:
        object_store.remove(bucket, [key])
    except UpstreamError as exc:
        logger.warning("Compensating delete of %s/%s failed, object leaked: %s", bucket, key, exc)
        return False
    logger.info("Compensating delete removed %s/%s", bucket, key)
    return True


def upload_photo(
    data: Optional[bytes],
    filename: Optional[str],
    content_type: Optional[str],
    *,
    object_store: ObjectStore,
    catalog: CatalogStore,
    bucket: str = DEFAULT_BUCKET,
    limits: Optional[UploadLimits] = None,
) -> UploadResult:
    """Validate, normalize, store, tag and catalog a single uploaded image.

    The object is written before the catalog row. If the catalog insert fails
    the object is removed again (best-effort) and the insert error re-raised.
    """
    limits = limits or UploadLimits()
    original_name = filename or ""
    original_type = resolve_content_type(original_name, content_type)
    data = validate_upload(data, filename, original_type, limits)

    normalized = normalize_upload(data, original_name, original_type)
    stored_name = generate_storage_filename(normalized.filename, normalized.content_type)
    key = storage_key(stored_name)

    object_store.put(bucket, key, normalized.data, normalized.content_type)

    metadata = extract_metadata(normalized.data, original_name)
    draft = PhotoDraft(
        filename=stored_name,
        original_name=original_name,
        file_path=key,
        file_size=len(data),
        mime_type=original_type,
        **metadata.model_dump(),
    )
    try:
        photo = catalog.insert(draft)
    except Exception:
        _compensate_storage_write(object_store, bucket, key)
        raise

    logger.info(
        "Uploaded %s as %s (%s, converted=%s)",
        original_name,
        key,
        photo.category,
        normalized.converted,
    )
    return UploadResult(photo=photo, url=object_store.public_url(bucket, key))
