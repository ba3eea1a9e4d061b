"""Object store clients and the managed (Supabase) catalog client."""

from .object_store import LocalObjectStore, ObjectStore
from .supabase import SupabaseCatalogStore, SupabaseObjectStore, build_client

__all__ = [
    "LocalObjectStore",
    "ObjectStore",
    "SupabaseCatalogStore",
    "SupabaseObjectStore",
    "build_client",
]
