from __future__ import annotations

import mimetypes
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class UploadRequest(BaseModel):
    """A raw file as received from the user, before any processing."""

    raw_bytes: bytes
    mime_type: str = ""
    size_bytes: int | None = Field(default=None, ge=0)
    filename: str | None = None

    @model_validator(mode="after")
    def _default_size(self) -> "UploadRequest":
        if self.size_bytes is None:
            self.size_bytes = len(self.raw_bytes)
        return self

    @classmethod
    def from_path(cls, path: str | Path) -> "UploadRequest":
        path = Path(path)
        data = path.read_bytes()
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(raw_bytes=data, mime_type=mime_type or "", size_bytes=len(data), filename=path.name)


class ResizedImage(BaseModel):
    encoded_bytes: bytes
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    mime_type: str = "image/png"


class StagedObject(BaseModel):
    path: str
    public_url: str
