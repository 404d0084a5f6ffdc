"""Filesystem object store for local development.

Files are written under ``settings.static_dir`` and served by the app's
``/assets`` mount, so ``public_base_url`` must point at that mount.
"""
from __future__ import annotations

import logging
from pathlib import Path

from restyle.config import Settings

from .base import ObjectStore

logger = logging.getLogger(__name__)


class LocalObjectStore(ObjectStore):
    name = "local"

    def __init__(self, settings: Settings) -> None:
        self._root = Path(settings.static_dir).resolve()
        self._base_url = settings.public_base_url.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    def put(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug("Wrote %d bytes (%s) to %s", len(data), content_type, target)
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{path.strip('/')}"

    def _resolve(self, path: str) -> Path:
        target = (self._root / path.strip("/")).resolve()
        if self._root not in target.parents:
            raise ValueError(f"Path escapes storage root: {path}")
        return target
