from __future__ import annotations

from functools import lru_cache

from restyle.config import get_settings

from .base import ImageProvider
from .openai_provider import OpenAIImageProvider

_PROVIDERS: dict[str, type[ImageProvider]] = {
    "openai": OpenAIImageProvider,
}


@lru_cache()
def get_image_provider() -> ImageProvider:
    settings = get_settings()
    provider_key = settings.image_provider.lower()
    if provider_key not in _PROVIDERS:
        raise ValueError(f"Unsupported image provider: {provider_key}")
    return _PROVIDERS[provider_key](settings)
