from .base import ImageGenerationError, ImageProvider, ImageRateLimitError
from .openai_provider import OpenAIImageProvider
from .registry import get_image_provider

__all__ = [
    "ImageGenerationError",
    "ImageProvider",
    "ImageRateLimitError",
    "OpenAIImageProvider",
    "get_image_provider",
]
