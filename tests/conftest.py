"""Shared fixtures: in-memory storage, a scripted HTTP endpoint and a sleep recorder.

No test touches the network or actually waits: the conversion endpoint and
the availability probe are served by ``httpx.MockTransport`` and every delay
goes through :class:`SleepRecorder`.
"""
from __future__ import annotations

import io
import logging
import sys
from typing import Any, Callable

import httpx
import pytest
from PIL import Image

from restyle.config import Settings
from restyle.services.conversion_client import ConversionClient
from restyle.services.orchestrator import ConversionOrchestrator
from restyle.services.storage import ObjectStore

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)

ENDPOINT_URL = "https://restyle.test/api/convert"
RESULT_URL = "https://host/result.png"
MIB = 1024 * 1024


def make_image(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", **save_kwargs: Any) -> bytes:
    """Return an encoded solid-colour image of the given size."""
    color = (200, 120, 40, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def decoded_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size


class FakeStore(ObjectStore):
    name = "fake"

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.objects: dict[str, tuple[bytes, str]] = {}

    def put(self, path: str, data: bytes, content_type: str) -> str:
        if self.error is not None:
            raise self.error
        self.objects[path] = (data, content_type)
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"https://cdn.test/{path}"


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


class ScriptedEndpoint:
    """MockTransport handler answering HEAD probes and conversion POSTs.

    ``probes`` and ``conversions`` are consumed in order; once exhausted the
    last entry repeats. An entry that is an exception is raised instead of
    answered. Conversion entries are ``(status, body)`` where body is JSON
    data or raw bytes.
    """

    def __init__(
        self,
        *,
        probes: list[Any] | None = None,
        conversions: list[Any] | None = None,
    ) -> None:
        self.probes = list(probes or [200])
        self.conversions = list(conversions or [(200, {"output": [RESULT_URL]})])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "HEAD":
            entry = _next(self.probes)
            if isinstance(entry, Exception):
                raise entry
            return httpx.Response(entry)

        entry = _next(self.conversions)
        if isinstance(entry, Exception):
            raise entry
        status, body = entry
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def probe_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "HEAD"]

    @property
    def conversion_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


def _next(entries: list[Any]) -> Any:
    return entries.pop(0) if len(entries) > 1 else entries[0]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        conversion_endpoint_url=ENDPOINT_URL,
        storage_backend="local",
        openai_api_key=None,
    )


@pytest.fixture
def build_orchestrator(settings: Settings) -> Callable[..., tuple[ConversionOrchestrator, SleepRecorder]]:
    def _build(
        endpoint: ScriptedEndpoint,
        store: ObjectStore | None = None,
        **overrides: Any,
    ) -> tuple[ConversionOrchestrator, SleepRecorder]:
        cfg = settings.model_copy(update=overrides) if overrides else settings
        client = ConversionClient(
            endpoint_url=cfg.conversion_endpoint_url,
            client=httpx.AsyncClient(transport=httpx.MockTransport(endpoint)),
        )
        sleep = SleepRecorder()
        orchestrator = ConversionOrchestrator(
            settings=cfg,
            store=store if store is not None else FakeStore(),
            client=client,
            sleep=sleep,
        )
        return orchestrator, sleep

    return _build
