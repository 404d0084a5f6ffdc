"""Upload → stage → poll → convert pipeline.

A single conversion runs the following steps, each gating the next:

1. validate the declared size and MIME type (no network),
2. resize the image,
3. stage it in object storage under a fresh unique path,
4. poll the public URL until the object is servable,
5. request the remote conversion, retrying once after a 429,
6. return the output URLs.

Callers either use :meth:`ConversionOrchestrator.execute`, which raises the
typed error of the failing step, or :meth:`ConversionOrchestrator.convert`,
which never raises and reports everything through a :class:`ConversionState`.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from functools import lru_cache
from typing import Any, Callable, Optional

from restyle.config import Settings, get_settings
from restyle.models import (
    STAGE_MESSAGES,
    ConversionResult,
    ConversionState,
    ProgressEvent,
    ResizedImage,
    Stage,
    StagedObject,
    UploadRequest,
)
from restyle.services.conversion_client import ConversionAPIError, ConversionClient, RateLimitedError
from restyle.services.errors import (
    AvailabilityTimeoutError,
    ConversionError,
    ConversionInProgressError,
    ConversionPipelineError,
    InvalidResponseError,
    StagingError,
    TooLargeError,
    UnsupportedTypeError,
)
from restyle.services.resizer import ImageResizer
from restyle.services.storage import ObjectStore, get_object_store
from restyle.utils.polling import Sleep, poll_until_ready

logger = logging.getLogger(__name__)

StateListener = Callable[[ConversionState], None]

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


def make_staging_path(prefix: str, mime_type: str) -> str:
    """Return ``{prefix}/{epoch-millis}-{random}.{ext}``, unique per call."""

    ext = _EXTENSIONS.get(mime_type, "png")
    return f"{prefix.strip('/')}/{int(time.time() * 1000)}-{uuid.uuid4().hex}.{ext}"


def extract_output_urls(payload: Any) -> list[str]:
    """Validate a success payload and return the URLs in its ``output`` list.

    Only the first entry must be a URL; later entries that are not
    non-empty strings are dropped.
    """

    output = payload.get("output") if isinstance(payload, dict) else None
    if not isinstance(output, list) or not output:
        raise InvalidResponseError()
    if not isinstance(output[0], str) or not output[0]:
        raise InvalidResponseError()
    return [url for url in output if isinstance(url, str) and url]


class ConversionOrchestrator:
    """Runs conversions and enforces one in-flight conversion per session."""

    def __init__(
        self,
        *,
        settings: Settings,
        store: ObjectStore,
        client: ConversionClient,
        resizer: ImageResizer | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings
        self._store = store
        self._client = client
        self._resizer = resizer or ImageResizer.from_settings(settings)
        self._sleep = sleep
        self._active_sessions: set[str] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_active(self, session_id: str) -> bool:
        return session_id in self._active_sessions

    async def close(self) -> None:
        await self._client.close()

    async def convert(
        self,
        upload: UploadRequest,
        listener: Optional[StateListener] = None,
        *,
        session_id: str = "default",
    ) -> ConversionState:
        """Run one conversion and return its terminal state.

        *listener* receives a snapshot of the state on every transition:
        the start, each progress event, and exactly one terminal update.
        Exceptions raised by the listener are logged and ignored.
        """

        state = ConversionState()
        notify = _snapshotting(listener)

        if session_id in self._active_sessions:
            logger.warning("Rejected conversion for session %s: one already in flight", session_id)
            self._fail(state, ConversionInProgressError())
            notify(state)
            return state

        self._active_sessions.add(session_id)
        try:
            state.converting = True
            notify(state)
            try:
                result = await self.execute(upload, state, notify)
            except ConversionPipelineError as exc:
                logger.info("Conversion failed (%s): %s", exc.kind, exc.message)
                self._fail(state, exc)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Unexpected error during conversion")
                self._fail(state, ConversionPipelineError())
            else:
                state.converting = False
                state.progress = None
                state.result = result
                logger.info("Conversion complete: %s", result.url)
            notify(state)
            return state
        finally:
            self._active_sessions.discard(session_id)

    async def execute(
        self,
        upload: UploadRequest,
        state: ConversionState | None = None,
        notify: Optional[StateListener] = None,
    ) -> ConversionResult:
        """Run the pipeline, raising the ConversionPipelineError of the failing step."""

        state = state if state is not None else ConversionState()
        self._validate(upload)

        self._advance(state, Stage.PREPARING, notify)
        resized = await asyncio.to_thread(self._resizer.resize, upload.raw_bytes)

        self._advance(state, Stage.UPLOADING, notify)
        staged = await self._stage(resized)

        self._advance(state, Stage.WAITING, notify)
        ready = await poll_until_ready(
            lambda: self._client.check_available(staged.public_url),
            attempts=self._settings.poll_attempts,
            interval=self._settings.poll_interval,
            sleep=self._sleep,
        )
        if not ready:
            raise AvailabilityTimeoutError()

        self._advance(state, Stage.CONVERTING, notify)
        payload = await self._request_conversion(staged.public_url, state, notify)
        return ConversionResult(source_url=staged.public_url, output_urls=extract_output_urls(payload))

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _validate(self, upload: UploadRequest) -> None:
        limit = self._settings.max_file_size_bytes
        if upload.size_bytes is not None and upload.size_bytes > limit:
            raise TooLargeError(limit, upload.size_bytes)
        if upload.mime_type and not upload.mime_type.lower().startswith("image/"):
            raise UnsupportedTypeError(upload.mime_type)

    async def _stage(self, image: ResizedImage) -> StagedObject:
        path = make_staging_path(self._settings.upload_prefix, image.mime_type)
        try:
            public_url = await asyncio.to_thread(self._store.put, path, image.encoded_bytes, image.mime_type)
        except Exception as exc:  # pylint: disable=broad-except
            raise StagingError(str(exc) or None) from exc
        logger.info("Staged %dx%d image at %s", image.width, image.height, path)
        return StagedObject(path=path, public_url=public_url)

    async def _request_conversion(
        self,
        image_url: str,
        state: ConversionState,
        notify: Optional[StateListener],
    ) -> Any:
        try:
            return await self._client.request_conversion(image_url)
        except RateLimitedError as exc:
            logger.warning("Conversion rate limited (%s); retrying once", exc.message)
        except ConversionAPIError as exc:
            raise ConversionError(exc.message) from exc

        backoff = self._settings.rate_limit_backoff
        self._advance(
            state,
            Stage.RATE_LIMITED,
            notify,
            message=STAGE_MESSAGES[Stage.RATE_LIMITED].format(seconds=backoff),
        )
        await self._sleep(backoff)

        try:
            return await self._client.request_conversion(image_url)
        except ConversionAPIError as exc:
            raise ConversionError(exc.message) from exc

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    @staticmethod
    def _advance(
        state: ConversionState,
        stage: Stage,
        notify: Optional[StateListener],
        *,
        message: str | None = None,
    ) -> None:
        if state.stage is not None and stage.order <= state.stage.order:
            logger.error("Out-of-order stage transition: %s -> %s", state.stage.value, stage.value)
            raise RuntimeError(f"Stage {stage.value} cannot follow {state.stage.value}")
        event = ProgressEvent(stage=stage, message=message or STAGE_MESSAGES[stage])
        state.stage = stage
        state.progress = event.message
        state.events.append(event)
        logger.info(event.message)
        if notify is not None:
            notify(state)

    @staticmethod
    def _fail(state: ConversionState, exc: ConversionPipelineError) -> None:
        state.converting = False
        state.progress = None
        state.error = exc.message
        state.error_kind = exc.kind


def _snapshotting(listener: Optional[StateListener]) -> StateListener:
    def notify(state: ConversionState) -> None:
        if listener is None:
            return
        try:
            listener(state.model_copy(deep=True))
        except Exception:  # pylint: disable=broad-except
            # Listener errors never change the outcome of a conversion
            logger.exception("State listener failed at stage %s", state.stage.value if state.stage else None)

    return notify


@lru_cache()
def get_orchestrator() -> ConversionOrchestrator:
    settings = get_settings()
    return ConversionOrchestrator(
        settings=settings,
        store=get_object_store(),
        client=ConversionClient.from_settings(settings),
    )
