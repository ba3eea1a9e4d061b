from __future__ import annotations


class GalleryError(RuntimeError):
    """Base class for errors surfaced to gallery clients."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(GalleryError):
    """Raised for user-correctable requests; nothing has been changed."""

    status_code = 400


class UploadValidationError(InvalidRequestError):
    """Raised when an upload is missing, of a disallowed type, or too large."""


class PhotoNotFoundError(GalleryError):
    """Raised when a photo id does not exist in the catalog."""

    status_code = 404

    def __init__(self, photo_id: str) -> None:
        super().__init__("Photo not found")
        self.photo_id = photo_id


class UpstreamError(GalleryError):
    """Raised when the object store or the catalog store call fails."""

    status_code = 500


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing."""
