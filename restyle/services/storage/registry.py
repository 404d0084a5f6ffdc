from __future__ import annotations

from functools import lru_cache

from restyle.config import get_settings

from .base import ObjectStore
from .gcs_store import GCSObjectStore
from .local_store import LocalObjectStore

_STORES: dict[str, type[ObjectStore]] = {
    "gcs": GCSObjectStore,
    "local": LocalObjectStore,
}


@lru_cache()
def get_object_store() -> ObjectStore:
    settings = get_settings()
    backend = settings.storage_backend.lower()
    if backend not in _STORES:
        raise ValueError(f"Unsupported storage backend: {backend}")
    return _STORES[backend](settings)
