from __future__ import annotations

from abc import ABC, abstractmethod


class ObjectStore(ABC):
    """Abstract interface for the storage that stages images publicly."""

    name: str = "abstract"

    @abstractmethod
    def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store *data* at *path* and return its public URL.

        Implementations raise their own client errors; callers treat any
        exception as a failed upload.
        """

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Return the public URL of *path* without a network round trip."""
