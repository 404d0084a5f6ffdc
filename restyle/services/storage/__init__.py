from .base import ObjectStore
from .gcs_store import GCSObjectStore
from .local_store import LocalObjectStore
from .registry import get_object_store

__all__ = [
    "GCSObjectStore",
    "LocalObjectStore",
    "ObjectStore",
    "get_object_store",
]
