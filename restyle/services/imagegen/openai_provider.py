from __future__ import annotations

import logging

import openai
from openai import AsyncOpenAI

from restyle.config import Settings, get_settings

from .base import ImageGenerationError, ImageProvider, ImageRateLimitError

logger = logging.getLogger(__name__)


class OpenAIImageProvider(ImageProvider):
    name = "openai"

    def __init__(self, settings: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings or get_settings()
        if client is None and not self._settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the openai image provider")
        self._client = client or AsyncOpenAI(api_key=self._settings.openai_api_key)

    async def stylize(self, image_url: str) -> list[str]:
        """Generate a styled image with the configured model.

        The source URL is only logged: the generation endpoint works from the
        style prompt alone.
        """

        settings = self._settings
        logger.info("Generating %s image for %s", settings.openai_image_model, image_url)
        try:
            response = await self._client.images.generate(
                model=settings.openai_image_model,
                prompt=settings.style_prompt,
                n=1,
                size=settings.openai_image_size,
                quality=settings.openai_image_quality,
                response_format="url",
            )
        except openai.RateLimitError as exc:
            raise ImageRateLimitError(_api_message(exc)) from exc
        except openai.OpenAIError as exc:
            raise ImageGenerationError(_api_message(exc)) from exc

        if not response.data or not response.data[0].url:
            raise ImageGenerationError("No valid image URL in conversion response")
        return [response.data[0].url]


def _api_message(exc: openai.OpenAIError) -> str:
    message = getattr(exc, "message", None)
    return message or str(exc) or exc.__class__.__name__
