from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable, Iterable

import pytest
from PIL import Image

from travel_journal.core.errors import UpstreamError
from travel_journal.index import SqlCatalogStore, init_db, session_factory


class MemoryObjectStore:
    """Object store double keeping bytes in a dict; can be told to fail."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.removed: list[str] = []
        self.fail_put = False
        self.fail_remove = False

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        if self.fail_put:
            raise UpstreamError("storage unavailable")
        self.objects[(bucket, key)] = (data, content_type)

    def public_url(self, bucket: str, key: str) -> str:
        return f"https://cdn.test/{bucket}/{key}"

    def remove(self, bucket: str, keys: Iterable[str]) -> None:
        keys = list(keys)
        if self.fail_remove:
            raise UpstreamError("storage remove unavailable")
        for key in keys:
            self.objects.pop((bucket, key), None)
        self.removed.extend(keys)

    def keys(self, bucket: str = "gallery") -> list[str]:
        return sorted(key for b, key in self.objects if b == bucket)


@pytest.fixture
def object_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def catalog(tmp_path: Path) -> SqlCatalogStore:
    engine = init_db(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    return SqlCatalogStore(session_factory(engine))


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    def _make(fmt: str = "JPEG", size: tuple[int, int] = (32, 24), color: str = "red") -> bytes:
        buf = BytesIO()
        Image.new("RGB", size, color=color).save(buf, format=fmt)
        return buf.getvalue()

    return _make
