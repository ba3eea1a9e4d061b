from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from travel_journal.core.config import MIB, GalleryConfig, UploadLimits
from travel_journal.core.env import configure_logging, load_dotenv_if_present
from travel_journal.core.errors import GalleryError, InvalidRequestError, UploadValidationError
from travel_journal.core.models import PhotoUpdate
from travel_journal.gallery import delete_photo, list_photos, retag_photo, summarize_gallery
from travel_journal.index import CatalogStore, SqlCatalogStore, init_db, session_factory
from travel_journal.ingest import upload_photo
from travel_journal.journal import summarize_expenses
from travel_journal.storage import (
    LocalObjectStore,
    ObjectStore,
    SupabaseCatalogStore,
    SupabaseObjectStore,
    build_client,
)

logger = logging.getLogger(__name__)


@dataclass
class Gallery:
    config: GalleryConfig
    object_store: ObjectStore
    catalog: CatalogStore


def build_stores(config: GalleryConfig) -> tuple[ObjectStore, CatalogStore]:
    """Construct the object and catalog stores selected by GALLERY_BACKEND."""
    if config.backend == "local":
        engine = init_db(config.database_url)
        catalog = SqlCatalogStore(session_factory(engine))
        return LocalObjectStore(config.storage_dir, config.public_base_url), catalog
    client = build_client(config.supabase_url or "", config.supabase_key or "", config.timeout)
    return SupabaseObjectStore(client), SupabaseCatalogStore(client, table=config.table)


def get_gallery(request: Request) -> Gallery:
    return request.app.state.gallery


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _read_upload(file: UploadFile, limits: UploadLimits) -> bytes:
    """Read at most one byte past the largest ceiling; validation rejects the rest."""
    ceiling = max(limits.max_bytes, limits.max_legacy_bytes)
    if file.size is not None and file.size > ceiling:
        raise UploadValidationError(
            f"File too large: {file.size} bytes exceeds {ceiling // MIB}MB limit"
        )
    return file.file.read(ceiling + 1)


router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/photos")
def get_photos(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Literal["date", "name", "size"] = "date",
    gallery: Gallery = Depends(get_gallery),
) -> dict:
    try:
        photos = list_photos(gallery.catalog, category=category, search=search, sort=sort)
    except GalleryError:
        raise
    except Exception:
        logger.exception("Listing photos failed")
        return _error("Failed to fetch photos", 500)
    return {"photos": [photo.model_dump(mode="json") for photo in photos]}


@router.get("/photos/stats")
def get_photo_stats(gallery: Gallery = Depends(get_gallery)) -> dict:
    try:
        stats = summarize_gallery(gallery.catalog.query())
    except GalleryError:
        raise
    except Exception:
        logger.exception("Computing gallery stats failed")
        return _error("Failed to fetch photo stats", 500)
    return stats.model_dump()


@router.post("/photos")
def update_photo(req: PhotoUpdate, gallery: Gallery = Depends(get_gallery)) -> dict:
    try:
        photo = retag_photo(gallery.catalog, req)
    except GalleryError:
        raise
    except Exception:
        logger.exception("Updating photo %s failed", req.id)
        return _error("Failed to update photo", 500)
    return {"success": True, "photo": photo.model_dump(mode="json")}


@router.delete("/photos")
def remove_photo(
    photo_id: Optional[str] = Query(None, alias="id"),
    gallery: Gallery = Depends(get_gallery),
) -> dict:
    photo_id = (photo_id or "").strip()
    if not photo_id:
        raise InvalidRequestError("Photo id is required")
    try:
        result = delete_photo(
            photo_id,
            catalog=gallery.catalog,
            object_store=gallery.object_store,
            bucket=gallery.config.bucket,
        )
    except GalleryError:
        raise
    except Exception:
        logger.exception("Deleting photo %s failed", photo_id)
        return _error("Failed to delete photo", 500)
    return {"success": True, "storage_reclaimed": result.storage_reclaimed}


@router.post("/upload")
def upload(
    file: Optional[UploadFile] = File(None),
    gallery: Gallery = Depends(get_gallery),
) -> dict:
    try:
        data = _read_upload(file, gallery.config.limits) if file is not None else None
        result = upload_photo(
            data,
            file.filename if file is not None else None,
            file.content_type if file is not None else None,
            object_store=gallery.object_store,
            catalog=gallery.catalog,
            bucket=gallery.config.bucket,
            limits=gallery.config.limits,
        )
    except GalleryError:
        raise
    except Exception:
        logger.exception("Upload failed")
        return _error("Upload failed", 500)
    return {"success": True, "data": result.photo.model_dump(mode="json"), "url": result.url}


@router.get("/expenses")
def get_expenses() -> dict:
    return summarize_expenses().model_dump(mode="json")


async def _gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.message, exc.status_code)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", message)
    return _error(message, 400)


def create_app(
    config: Optional[GalleryConfig] = None,
    *,
    object_store: Optional[ObjectStore] = None,
    catalog: Optional[CatalogStore] = None,
) -> FastAPI:
    """Build the gallery API; stores default to the backend named in the config.

    Without a config the environment is read, and a missing Supabase URL/key
    raises ``ConfigError`` so the server never starts half-configured.
    """
    load_dotenv_if_present()
    configure_logging()
    config = config or GalleryConfig.from_env()
    if object_store is None or catalog is None:
        default_store, default_catalog = build_stores(config)
        object_store = object_store or default_store
        catalog = catalog or default_catalog

    app = FastAPI(title="Travel Journal Gallery API")
    app.state.gallery = Gallery(config=config, object_store=object_store, catalog=catalog)
    app.add_exception_handler(GalleryError, _gallery_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)

    if config.backend == "local" and isinstance(object_store, LocalObjectStore):
        object_store.root.mkdir(parents=True, exist_ok=True)
        app.mount("/storage", StaticFiles(directory=object_store.root), name="storage")

    logger.info("Gallery API ready (backend=%s, bucket=%s)", config.backend, config.bucket)
    return app
