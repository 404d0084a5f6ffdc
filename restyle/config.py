from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Image preparation
    max_width: int = Field(800, ge=1, description="Maximum width of the staged image (pixels).")
    max_height: int = Field(400, ge=1, description="Maximum height of the staged image (pixels).")
    max_file_size_bytes: int = Field(4 * 1024 * 1024, ge=1, description="Upload size ceiling, checked before any network call.")
    encode_format: Literal["PNG", "JPEG", "WEBP"] = Field("PNG", description="Raster format the resized image is re-encoded to.")
    encode_quality: float = Field(0.9, gt=0, le=1, description="Quality factor for lossy formats (ignored by PNG).")

    # Availability polling / conversion retry
    poll_attempts: int = Field(5, ge=1)
    poll_interval_ms: int = Field(1000, ge=0)
    rate_limit_backoff_ms: int = Field(15000, ge=0)

    # Transport
    conversion_endpoint_url: str = Field("http://localhost:8000/api/convert")
    request_timeout_s: float = Field(60.0, gt=0, description="Timeout for the conversion request.")
    probe_timeout_s: float = Field(10.0, gt=0, description="Timeout for a single availability probe.")

    # Object storage
    storage_backend: Literal["gcs", "local"] = Field("gcs")
    bucket_name: str = Field("restyle-images")
    upload_prefix: str = Field("uploads")
    gcs_make_public: bool = Field(False, description="If true, each staged object is made public after upload.")
    static_dir: str = Field("data", description="Root directory of the local object store.")
    public_base_url: str = Field("http://localhost:8000/assets", description="URL prefix the local store is served under.")

    # Image generation (server side of the conversion endpoint)
    image_provider: str = Field("openai")
    openai_api_key: Optional[str] = Field(default=None)
    openai_image_model: str = Field("dall-e-3")
    openai_image_size: str = Field("1024x1024")
    openai_image_quality: str = Field("standard")
    style_prompt: str = Field(
        "Create a Studio Ghibli style anime artwork with vibrant colors, magical atmosphere, "
        "and detailed backgrounds. The image should have a whimsical, dreamy quality with "
        "soft lighting and painterly effects."
    )

    log_level: str = Field("INFO")

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def rate_limit_backoff(self) -> float:
        return self.rate_limit_backoff_ms / 1000


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
