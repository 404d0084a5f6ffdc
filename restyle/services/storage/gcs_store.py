"""Google Cloud Storage object store.

Objects land in ``settings.bucket_name`` under the path chosen by the
caller. The returned URL is the blob's public URL, so the bucket (or each
object, with ``GCS_MAKE_PUBLIC=true``) must be publicly readable for the
conversion service to fetch it.
"""
from __future__ import annotations

import logging

from google.cloud import storage

from restyle.config import Settings

from .base import ObjectStore

logger = logging.getLogger(__name__)


class GCSObjectStore(ObjectStore):  # pylint: disable=too-few-public-methods
    name = "gcs"

    def __init__(self, settings: Settings, client: storage.Client | None = None) -> None:
        self._client = client or storage.Client()
        self._bucket_name = settings.bucket_name
        self._bucket = self._client.bucket(settings.bucket_name)
        self._make_public = settings.gcs_make_public

    def put(self, path: str, data: bytes, content_type: str) -> str:
        blob = self._bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        if self._make_public:
            blob.make_public()
        logger.debug("Uploaded %d bytes to gs://%s/%s", len(data), self._bucket_name, path)
        return blob.public_url

    def public_url(self, path: str) -> str:
        return self._bucket.blob(path).public_url
