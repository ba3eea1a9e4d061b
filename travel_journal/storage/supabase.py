from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional
from urllib.parse import quote

import httpx

from travel_journal.core.errors import PhotoNotFoundError, UpstreamError
from travel_journal.core.models import DEFAULT_CATEGORY, Photo, PhotoDraft

logger = logging.getLogger(__name__)


def build_client(base_url: str, api_key: str, timeout: float = 10.0) -> httpx.Client:
    """httpx client carrying the Supabase key on every request."""
    return httpx.Client(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
    )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict):
        for field in ("message", "error", "msg", "hint"):
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return response.reason_phrase


def _send(client: httpx.Client, method: str, url: str, action: str, **kwargs: Any) -> httpx.Response:
    try:
        response = client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        raise UpstreamError(f"{action} failed: {exc}") from exc
    if response.is_error:
        raise UpstreamError(f"{action} failed: {_error_message(response)}")
    return response


class SupabaseObjectStore:
    """Object store backed by Supabase Storage (``/storage/v1``)."""

    def __init__(self, client: httpx.Client, public_base_url: Optional[str] = None) -> None:
        self.client = client
        self.public_base_url = (public_base_url or str(client.base_url)).rstrip("/")

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        _send(
            self.client,
            "POST",
            f"/storage/v1/object/{quote(bucket)}/{quote(key)}",
            "Storage upload",
            content=data,
            headers={"Content-Type": content_type, "x-upsert": "false"},
        )

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/storage/v1/object/public/{quote(bucket)}/{quote(key)}"

    def remove(self, bucket: str, keys: Iterable[str]) -> None:
        prefixes = list(keys)
        if not prefixes:
            return
        _send(
            self.client,
            "DELETE",
            f"/storage/v1/object/{quote(bucket)}",
            "Storage remove",
            json={"prefixes": prefixes},
        )


def _quote_filter_value(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _row_to_photo(row: dict[str, Any]) -> Photo:
    data = dict(row)
    if data.get("tags") is None:
        data["tags"] = []
    if not data.get("category"):
        data["category"] = DEFAULT_CATEGORY
    return Photo.model_validate(data)


class SupabaseCatalogStore:
    """Catalog backed by a PostgREST table (``/rest/v1/<table>``)."""

    def __init__(self, client: httpx.Client, table: str = "gallery_photos") -> None:
        self.client = client
        self.path = f"/rest/v1/{table}"

    def _rows(self, response: httpx.Response) -> list[dict[str, Any]]:
        data = response.json()
        if not isinstance(data, list):
            raise UpstreamError("Catalog returned an unexpected payload")
        return data

    def insert(self, draft: PhotoDraft) -> Photo:
        payload = draft.model_dump()
        payload["uploaded_at"] = datetime.now(timezone.utc).isoformat()
        response = _send(
            self.client,
            "POST",
            self.path,
            "Catalog insert",
            json=payload,
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise UpstreamError("Catalog insert returned no row")
        return _row_to_photo(rows[0])

    def get(self, photo_id: str) -> Optional[Photo]:
        response = _send(
            self.client,
            "GET",
            self.path,
            "Catalog lookup",
            params={"select": "*", "id": f"eq.{photo_id}"},
        )
        rows = self._rows(response)
        return _row_to_photo(rows[0]) if rows else None

    def update(self, photo_id: str, tags: list[str], category: str) -> Photo:
        response = _send(
            self.client,
            "PATCH",
            self.path,
            "Catalog update",
            params={"id": f"eq.{photo_id}"},
            json={"tags": list(tags), "category": category},
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise PhotoNotFoundError(photo_id)
        return _row_to_photo(rows[0])

    def query(self, category: Optional[str] = None, search: Optional[str] = None) -> list[Photo]:
        params: dict[str, str] = {"select": "*", "order": "uploaded_at.desc"}
        if category:
            params["category"] = f"eq.{category}"
        if search:
            like = _quote_filter_value(f"*{search}*")
            member = _quote_filter_value(search)
            params["or"] = f"(original_name.ilike.{like},tags.cs.{{{member}}})"
        response = _send(self.client, "GET", self.path, "Catalog query", params=params)
        return [_row_to_photo(row) for row in self._rows(response)]

    def delete(self, photo_id: str) -> Photo:
        response = _send(
            self.client,
            "DELETE",
            self.path,
            "Catalog delete",
            params={"id": f"eq.{photo_id}"},
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise PhotoNotFoundError(photo_id)
        return _row_to_photo(rows[0])
