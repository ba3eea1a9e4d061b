from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient

from travel_journal.api.http_api import _read_upload, create_app
from travel_journal.core.config import GalleryConfig, UploadLimits
from travel_journal.core.errors import ConfigError, UpstreamError


def _config(tmp_path: Path) -> GalleryConfig:
    return GalleryConfig(
        backend="supabase",
        supabase_url="https://project.supabase.co",
        supabase_key="anon-key",
        bucket="gallery",
        table="gallery_photos",
        timeout=5.0,
        database_url=f"sqlite+pysqlite:///{tmp_path / 'unused.db'}",
        storage_dir=tmp_path / "storage",
        public_base_url="http://testserver/storage",
        limits=UploadLimits(),
    )


class BrokenCatalog:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def insert(self, draft):
        raise self.exc

    def query(self, category=None, search=None):
        raise self.exc


@pytest.fixture
def client(tmp_path: Path, object_store, catalog) -> TestClient:
    return TestClient(create_app(_config(tmp_path), object_store=object_store, catalog=catalog))


def _upload(client: TestClient, name: str, data: bytes, content_type: str = "image/jpeg"):
    return client.post("/upload", files={"file": (name, data, content_type)})


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_upload_then_list(client: TestClient, object_store, make_image) -> None:
    resp = _upload(client, "bike-park-1.jpg", make_image(size=(40, 30)))
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    photo = body["data"]
    assert photo["tags"] == ["바이크파크", "바이킹"]
    assert photo["category"] == "action"
    assert (photo["width"], photo["height"]) == (40, 30)
    assert body["url"] == f"https://cdn.test/gallery/{photo['file_path']}"
    assert object_store.keys() == [photo["file_path"]]

    listed = client.get("/photos").json()["photos"]
    assert [p["id"] for p in listed] == [photo["id"]]
    assert listed[0]["file_path"] == photo["file_path"]
    assert listed[0]["uploaded_at"] == photo["uploaded_at"]


def test_upload_without_file_is_rejected(client: TestClient, object_store) -> None:
    resp = client.post("/upload", data={"note": "no file here"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No file provided"}
    assert object_store.objects == {}


def test_upload_rejects_unsupported_type(client: TestClient, object_store) -> None:
    resp = _upload(client, "notes.txt", b"hello", "text/plain")
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Unsupported file type")
    assert client.get("/photos").json()["photos"] == []
    assert object_store.objects == {}


def test_upload_catalog_failure_leaves_no_object(tmp_path: Path, object_store, make_image) -> None:
    app = create_app(
        _config(tmp_path),
        object_store=object_store,
        catalog=BrokenCatalog(UpstreamError("Catalog insert failed: permission denied")),
    )
    resp = _upload(TestClient(app), "a.jpg", make_image())
    assert resp.status_code == 500
    assert resp.json() == {"error": "Catalog insert failed: permission denied"}
    assert object_store.objects == {}
    assert len(object_store.removed) == 1


def test_unexpected_failure_returns_fixed_message(tmp_path: Path, object_store, make_image) -> None:
    app = create_app(
        _config(tmp_path), object_store=object_store, catalog=BrokenCatalog(RuntimeError("boom"))
    )
    client = TestClient(app)

    resp = _upload(client, "a.jpg", make_image())
    assert resp.status_code == 500
    assert resp.json() == {"error": "Upload failed"}
    assert object_store.objects == {}

    resp = client.get("/photos")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch photos"}


def test_update_photo(client: TestClient, make_image) -> None:
    photo = _upload(client, "IMG_0001.jpg", make_image()).json()["data"]
    assert photo["tags"] == ["휘슬러", "여행", "갤러리"]
    assert photo["category"] == "general"

    update = {"id": photo["id"], "tags": ["점프", " 점프 ", "친구"], "category": "action"}
    resp = client.post("/photos", json=update)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["photo"]["tags"] == ["점프", "친구"]
    assert body["photo"]["category"] == "action"
    actions = client.get("/photos", params={"category": "action"}).json()["photos"]
    assert [p["id"] for p in actions] == [photo["id"]]


def test_update_unknown_photo_is_404(client: TestClient) -> None:
    resp = client.post("/photos", json={"id": "missing", "tags": ["x"], "category": "general"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Photo not found"}


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "p1", "tags": ["x"], "category": "scenery"},
        {"id": "p1", "tags": [], "category": "general"},
        {"id": "p1", "tags": ["  "], "category": "general"},
        {"id": "", "tags": ["x"], "category": "general"},
        {"tags": ["x"], "category": "general"},
    ],
)
def test_update_validation_errors(client: TestClient, payload: dict) -> None:
    resp = client.post("/photos", json=payload)
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_delete_requires_id(client: TestClient) -> None:
    resp = client.delete("/photos")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Photo id is required"}


def test_delete_unknown_photo_leaves_storage_alone(client: TestClient, object_store) -> None:
    resp = client.delete("/photos", params={"id": "missing"})
    assert resp.status_code == 404
    assert object_store.removed == []


def test_delete_removes_row_and_object(client: TestClient, object_store, make_image) -> None:
    photo = _upload(client, "lake.jpg", make_image()).json()["data"]
    resp = client.delete("/photos", params={"id": photo["id"]})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "storage_reclaimed": True}
    assert object_store.objects == {}
    assert client.get("/photos").json()["photos"] == []


def test_delete_reports_leaked_object(client: TestClient, object_store, make_image) -> None:
    photo = _upload(client, "lake.jpg", make_image()).json()["data"]
    object_store.fail_remove = True
    resp = client.delete("/photos", params={"id": photo["id"]})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "storage_reclaimed": False}
    assert client.get("/photos").json()["photos"] == []
    assert object_store.keys() == [photo["file_path"]]


def test_search_sort_and_stats(client: TestClient, make_image) -> None:
    _upload(client, "village-view.jpg", make_image(size=(10, 10)))
    _upload(client, "mountain-bike-jump.jpg", make_image(size=(200, 150), color="blue"))
    _upload(client, "lunch-at-cafe.jpg", make_image(size=(20, 20)))

    found = client.get("/photos", params={"search": "Village"}).json()["photos"]
    assert [p["original_name"] for p in found] == ["village-view.jpg"]
    found = client.get("/photos", params={"search": "점프"}).json()["photos"]
    assert [p["original_name"] for p in found] == ["mountain-bike-jump.jpg"]
    assert len(client.get("/photos", params={"search": "  "}).json()["photos"]) == 3

    by_name = client.get("/photos", params={"sort": "name"}).json()["photos"]
    assert [p["original_name"] for p in by_name] == [
        "lunch-at-cafe.jpg",
        "mountain-bike-jump.jpg",
        "village-view.jpg",
    ]
    by_size = client.get("/photos", params={"sort": "size"}).json()["photos"]
    assert by_size[0]["original_name"] == "mountain-bike-jump.jpg"

    stats = client.get("/photos/stats").json()
    assert stats["total_photos"] == 3
    assert stats["categories"] == {"landscape": 2, "food": 1}
    assert stats["category_count"] == 2
    assert stats["category_labels"]["landscape"] == "풍경"
    assert stats["total_bytes"] == sum(p["file_size"] for p in by_size)


def test_unknown_sort_is_rejected(client: TestClient) -> None:
    resp = client.get("/photos", params={"sort": "bogus"})
    assert resp.status_code == 400
    assert "sort" in resp.json()["error"]


def test_expenses(client: TestClient) -> None:
    body = client.get("/expenses").json()
    assert body["total_cad"] == "244.50"
    assert body["total_krw"] == 244500
    assert body["largest_item"] == "반나절권"
    assert body["largest_share_percent"] == 38.7
    assert body["items"][0]["amount_krw"] == 94500


def test_missing_supabase_settings_fail_at_startup(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for name in (
        "GALLERY_BACKEND",
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "NEXT_PUBLIC_SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ConfigError):
        create_app()


def test_local_backend_serves_uploaded_files(tmp_path: Path, monkeypatch, make_image) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GALLERY_BACKEND", "local")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'local.db'}")
    monkeypatch.setenv("GALLERY_STORAGE_DIR", str(tmp_path / "objects"))
    monkeypatch.setenv("GALLERY_PUBLIC_BASE_URL", "http://testserver/storage")
    client = TestClient(create_app())

    data = make_image()
    body = _upload(client, "whistler-mountain-1.jpg", data).json()
    assert body["url"].startswith("http://testserver/storage/gallery/photos/")
    assert (tmp_path / "objects" / "gallery" / body["data"]["file_path"]).read_bytes() == data

    resp = client.get(body["url"])
    assert resp.status_code == 200
    assert resp.content == data

    assert client.delete("/photos", params={"id": body["data"]["id"]}).json()["storage_reclaimed"]
    assert client.get(body["url"]).status_code == 404


def test_local_backend_never_serves_uploads_as_html(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GALLERY_BACKEND", "local")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'local.db'}")
    monkeypatch.setenv("GALLERY_STORAGE_DIR", str(tmp_path / "objects"))
    monkeypatch.setenv("GALLERY_PUBLIC_BASE_URL", "http://testserver/storage")
    client = TestClient(create_app())

    body = _upload(client, "evil.html", b"<script>alert(1)</script>", "image/png").json()
    assert body["data"]["filename"].endswith(".png")

    resp = client.get(body["url"])
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"


def test_oversize_upload_is_rejected_before_storing(tmp_path: Path, object_store, catalog) -> None:
    config = _config(tmp_path)
    config.limits = UploadLimits(max_bytes=100, max_legacy_bytes=200)
    client = TestClient(create_app(config, object_store=object_store, catalog=catalog))

    resp = _upload(client, "big.jpg", b"\xff" * 5000)
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("File too large")
    assert object_store.objects == {}


def test_upload_read_is_bounded() -> None:
    upload = UploadFile(file=BytesIO(b"x" * 5000), filename="big.heic")
    data = _read_upload(upload, UploadLimits(max_bytes=100, max_legacy_bytes=200))
    assert len(data) == 201
