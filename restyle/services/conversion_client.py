"""Async client for the remote conversion endpoint.

Also performs the availability probe against staged objects, since both
share the same HTTP connection pool.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from restyle.config import Settings

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to convert image"


class ConversionAPIError(Exception):
    """Raised when the conversion endpoint answers with a non-success status."""

    def __init__(self, status: int, message: str, response_json: Optional[Any] = None):
        super().__init__(f"Conversion API error {status}: {message}")
        self.status = status
        self.message = message
        self.response_json = response_json


class RateLimitedError(ConversionAPIError):
    """The endpoint throttled us (HTTP 429)."""


class ConversionClient:
    """Minimal async client for the ``POST {imageUrl}`` conversion contract."""

    def __init__(
        self,
        *,
        endpoint_url: str,
        timeout: float = 60.0,
        probe_timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._timeout = timeout
        self._probe_timeout = probe_timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConversionClient":
        return cls(
            endpoint_url=settings.conversion_endpoint_url,
            timeout=settings.request_timeout_s,
            probe_timeout=settings.probe_timeout_s,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def request_conversion(self, image_url: str) -> Any:
        """POST *image_url* and return the decoded success payload.

        The payload is returned as-is (``None`` if the body is not JSON);
        checking its shape is left to the caller.
        """

        logger.debug("POST %s imageUrl=%s", self._endpoint_url, image_url)
        try:
            resp = await self._client.post(
                self._endpoint_url,
                json={"imageUrl": image_url},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise ConversionAPIError(0, str(exc) or GENERIC_FAILURE) from exc

        payload = _json_or_none(resp)
        if resp.status_code == 429:
            raise RateLimitedError(resp.status_code, _error_message(payload), payload)
        if not resp.is_success:
            raise ConversionAPIError(resp.status_code, _error_message(payload), payload)
        return payload

    async def check_available(self, url: str) -> bool:
        """Header-only fetch of *url*; True if the object is retrievable."""

        try:
            resp = await self._client.head(url, timeout=self._probe_timeout, follow_redirects=True)
        except httpx.HTTPError as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return False
        logger.debug("HEAD %s -> %s", url, resp.status_code)
        return resp.is_success

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ConversionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _error_message(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error:
            return error
    return GENERIC_FAILURE
