from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import httpx

from travel_journal.core.models import (
    GalleryStats,
    Photo,
    UploadOutcome,
    UploadProgress,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadProgress], None]


class GalleryClientError(RuntimeError):
    """Raised when the gallery API answers with an error body."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_of(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return response.reason_phrase


class GalleryClient:
    """Talks to the gallery HTTP API: listing, editing, deleting, uploading."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.Client] = None,
        timeout: float = 60.0,
    ) -> None:
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        if response.is_error:
            raise GalleryClientError(response.status_code, _error_of(response))
        return response.json()

    def list_photos(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "date",
    ) -> list[Photo]:
        params = {"sort": sort}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        body = self._json(self.client.get("/photos", params=params))
        return [Photo.model_validate(item) for item in body["photos"]]

    def stats(self) -> GalleryStats:
        return GalleryStats.model_validate(self._json(self.client.get("/photos/stats")))

    def update_photo(self, photo_id: str, tags: list[str], category: str) -> Photo:
        body = self._json(
            self.client.post("/photos", json={"id": photo_id, "tags": tags, "category": category})
        )
        return Photo.model_validate(body["photo"])

    def delete_photo(self, photo_id: str) -> bool:
        """Delete a photo; returns whether its stored object was reclaimed too."""
        body = self._json(self.client.delete("/photos", params={"id": photo_id}))
        return bool(body.get("storage_reclaimed", True))

    def upload_bytes(
        self, data: bytes, filename: str, content_type: Optional[str] = None
    ) -> tuple[Photo, str]:
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        body = self._json(
            self.client.post("/upload", files={"file": (filename, data, content_type)})
        )
        return Photo.model_validate(body["data"]), body["url"]

    def upload_file(self, path: Path) -> tuple[Photo, str]:
        return self.upload_bytes(path.read_bytes(), path.name)

    def upload_batch(
        self,
        paths: Iterable[Path],
        on_progress: Optional[ProgressCallback] = None,
    ) -> list[UploadOutcome]:
        """Upload files one request at a time; a failed file never stops the rest."""
        files = list(paths)
        outcomes: list[UploadOutcome] = []
        succeeded = failed = 0
        for index, path in enumerate(files, start=1):
            try:
                photo, url = self.upload_file(path)
            except (GalleryClientError, httpx.HTTPError, OSError) as exc:
                failed += 1
                message = exc.message if isinstance(exc, GalleryClientError) else str(exc)
                outcome = UploadOutcome(name=path.name, success=False, message=message)
                logger.warning("Upload of %s failed: %s", path.name, message)
            else:
                succeeded += 1
                outcome = UploadOutcome(
                    name=path.name, success=True, message="uploaded", photo=photo, url=url
                )
            outcomes.append(outcome)
            if on_progress:
                on_progress(
                    UploadProgress(
                        completed=index,
                        total=len(files),
                        succeeded=succeeded,
                        failed=failed,
                        outcome=outcome,
                    )
                )
        return outcomes

    def close(self) -> None:
        self.client.close()
