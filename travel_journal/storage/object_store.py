from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Protocol
from urllib.parse import quote

from travel_journal.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None: ...

    def public_url(self, bucket: str, key: str) -> str: ...

    def remove(self, bucket: str, keys: Iterable[str]) -> None: ...


def _safe_key(key: str) -> PurePosixPath:
    path = PurePosixPath(key)
    if path.is_absolute() or ".." in path.parts or not path.parts:
        raise UpstreamError(f"Invalid object key: {key}")
    return path


class LocalObjectStore:
    """Object store kept in a local directory, one sub-directory per bucket.

    The HTTP app serves ``root`` under ``/storage`` so ``public_url`` resolves
    against ``public_base_url``.
    """

    def __init__(self, root: Path, public_base_url: str) -> None:
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, bucket: str, key: str) -> Path:
        return self.root / bucket / _safe_key(key)

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        path = self._path(bucket, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as outfile:
                outfile.write(data)
        except FileExistsError as exc:
            raise UpstreamError(f"Object already exists: {bucket}/{key}") from exc
        except OSError as exc:
            raise UpstreamError(f"Failed to store {bucket}/{key}: {exc}") from exc
        logger.debug("Stored %s/%s (%d bytes, %s)", bucket, key, len(data), content_type)

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base_url}/{quote(bucket)}/{quote(key)}"

    def remove(self, bucket: str, keys: Iterable[str]) -> None:
        for key in keys:
            try:
                self._path(bucket, key).unlink(missing_ok=True)
            except OSError as exc:
                raise UpstreamError(f"Failed to remove {bucket}/{key}: {exc}") from exc

    def exists(self, bucket: str, key: str) -> bool:
        return self._path(bucket, key).is_file()
