from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from travel_journal.core.env import env_number
from travel_journal.core.errors import ConfigError

MIB = 1024 * 1024


@dataclass
class UploadLimits:
    max_bytes: int = 20 * MIB
    max_legacy_bytes: int = 50 * MIB


@dataclass
class GalleryConfig:
    backend: str
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    bucket: str
    table: str
    timeout: float
    database_url: str
    storage_dir: Path
    public_base_url: str
    limits: UploadLimits

    @classmethod
    def from_env(cls) -> "GalleryConfig":
        backend = os.getenv("GALLERY_BACKEND", "supabase").strip().lower()
        if backend not in {"supabase", "local"}:
            raise ConfigError(f"Unknown GALLERY_BACKEND: {backend}")
        supabase_url = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
        supabase_key = os.getenv("SUPABASE_ANON_KEY") or os.getenv(
            "NEXT_PUBLIC_SUPABASE_ANON_KEY"
        )
        if backend == "supabase" and not (supabase_url and supabase_key):
            raise ConfigError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        limits = UploadLimits(
            max_bytes=int(env_number("MAX_UPLOAD_MB", 20) * MIB),
            max_legacy_bytes=int(env_number("MAX_LEGACY_UPLOAD_MB", 50) * MIB),
        )
        return cls(
            backend=backend,
            supabase_url=supabase_url.rstrip("/") if supabase_url else None,
            supabase_key=supabase_key,
            bucket=os.getenv("GALLERY_BUCKET", "gallery"),
            table=os.getenv("GALLERY_TABLE", "gallery_photos"),
            timeout=env_number("SUPABASE_HTTP_TIMEOUT", 10.0),
            database_url=os.getenv("DATABASE_URL", "sqlite+pysqlite:///./travel_journal.db"),
            storage_dir=Path(os.getenv("GALLERY_STORAGE_DIR", "./storage")).expanduser(),
            public_base_url=os.getenv(
                "GALLERY_PUBLIC_BASE_URL", "http://localhost:8000/storage"
            ).rstrip("/"),
            limits=limits,
        )
