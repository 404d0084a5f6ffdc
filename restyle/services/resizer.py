"""Downsample uploaded images to fit the staging bounding box.

The target size is computed width-first: an image wider than ``max_width``
is scaled to that width, and the result is then scaled again if it is still
taller than ``max_height``. Images already inside the box keep their size.
"""
from __future__ import annotations

import io
import logging
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from restyle.config import Settings
from restyle.models import ResizedImage
from restyle.services.errors import DecodeError

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


def compute_target_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Return (width, height) scaled down to fit, preserving aspect ratio."""

    if width > max_width:
        height = max(1, round(height * max_width / width))
        width = max_width
    if height > max_height:
        width = max(1, round(width * max_height / height))
        height = max_height
    return width, height


class ImageResizer:
    """Decode, downsample and re-encode a single image."""

    def __init__(
        self,
        *,
        max_width: int = 800,
        max_height: int = 400,
        quality: float = 0.9,
        image_format: str = "PNG",
    ) -> None:
        if image_format not in _MIME_TYPES:
            raise ValueError(f"Unsupported encode format: {image_format}")
        self.max_width = max_width
        self.max_height = max_height
        self.quality = quality
        self.image_format = image_format

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageResizer":
        return cls(
            max_width=settings.max_width,
            max_height=settings.max_height,
            quality=settings.encode_quality,
            image_format=settings.encode_format,
        )

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.image_format]

    def resize(self, data: bytes) -> ResizedImage:
        """Return the re-encoded image, raising DecodeError if *data* is not an image."""

        try:
            with Image.open(io.BytesIO(data)) as source:
                source.load()
                img = ImageOps.exif_transpose(source)
                width, height = compute_target_size(*img.size, self.max_width, self.max_height)
                if (width, height) != img.size:
                    logger.debug("Resizing %sx%s -> %sx%s", img.size[0], img.size[1], width, height)
                    img = img.resize((width, height), Image.Resampling.LANCZOS)
                encoded = self._encode(img)
        except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
            raise DecodeError() from exc
        except (OSError, ValueError) as exc:
            raise DecodeError(f"Failed to load image: {exc}") from exc

        return ResizedImage(encoded_bytes=encoded, width=width, height=height, mime_type=self.mime_type)

    def _encode(self, img: Image.Image) -> bytes:
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        buffer = io.BytesIO()
        if self.image_format == "PNG":
            img = img.convert("RGBA" if has_alpha else "RGB")
            img.save(buffer, format="PNG", optimize=True)
        elif self.image_format == "WEBP":
            img = img.convert("RGBA" if has_alpha else "RGB")
            img.save(buffer, format="WEBP", quality=round(self.quality * 100))
        else:
            img = img.convert("RGB")  # ensure RGB for JPEG
            img.save(buffer, format="JPEG", quality=round(self.quality * 100), optimize=True)
        return buffer.getvalue()
