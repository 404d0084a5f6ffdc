from __future__ import annotations

from abc import ABC, abstractmethod


class ImageGenerationError(Exception):
    """Raised when a provider cannot produce an image."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImageRateLimitError(ImageGenerationError):
    """The provider throttled the request; the caller may retry later."""

    status_code = 429


class ImageProvider(ABC):
    """Abstract interface for an image-generation provider."""

    name: str = "abstract"

    @abstractmethod
    async def stylize(self, image_url: str) -> list[str]:
        """Reimagine the image at *image_url* and return the output URL(s)."""
