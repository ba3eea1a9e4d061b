from __future__ import annotations

import logging
from io import BytesIO
from pathlib import PurePosixPath

from PIL import Image
from pillow_heif import register_heif_opener

from travel_journal.core.models import NormalizedImage

logger = logging.getLogger(__name__)

register_heif_opener()

LEGACY_CONTENT_TYPES = {"image/heic", "image/heif"}
LEGACY_EXTENSIONS = {".heic", ".heif"}
TRANSCODE_FORMAT = "JPEG"
TRANSCODE_CONTENT_TYPE = "image/jpeg"
TRANSCODE_EXTENSION = ".jpg"
TRANSCODE_QUALITY = 80  # 0.8 of maximum


def is_legacy_format(filename: str, content_type: str | None) -> bool:
    """True for HEIC/HEIF uploads, judged by content type or file suffix."""
    if content_type and content_type.strip().lower() in LEGACY_CONTENT_TYPES:
        return True
    return PurePosixPath(filename).suffix.lower() in LEGACY_EXTENSIONS


def _swap_extension(filename: str, extension: str) -> str:
    path = PurePosixPath(filename)
    if path.suffix:
        return str(path.with_suffix(extension))
    return f"{filename}{extension}"


def transcode_to_jpeg(data: bytes) -> bytes:
    with Image.open(BytesIO(data)) as img:
        rgb = img.convert("RGB")
        buf = BytesIO()
        rgb.save(buf, format=TRANSCODE_FORMAT, quality=TRANSCODE_QUALITY)
        return buf.getvalue()


def normalize_upload(data: bytes, filename: str, content_type: str) -> NormalizedImage:
    """Transcode HEIC/HEIF uploads to JPEG; return everything else untouched.

    Conversion is best-effort: if decoding or encoding fails the original
    bytes, name and content type come back unchanged.
    """
    if not is_legacy_format(filename, content_type):
        return NormalizedImage(data=data, filename=filename, content_type=content_type)
    try:
        converted = transcode_to_jpeg(data)
    except Exception as exc:
        logger.warning("Transcode of %s failed, keeping original: %s", filename, exc)
        return NormalizedImage(data=data, filename=filename, content_type=content_type)
    logger.info(
        "Transcoded %s to JPEG (%d -> %d bytes)", filename, len(data), len(converted)
    )
    return NormalizedImage(
        data=converted,
        filename=_swap_extension(filename, TRANSCODE_EXTENSION),
        content_type=TRANSCODE_CONTENT_TYPE,
        converted=True,
    )
