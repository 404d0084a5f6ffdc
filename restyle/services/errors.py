"""Errors raised by the conversion pipeline.

Each error carries a user-facing message and the HTTP status the upload
endpoint answers with when the error ends a conversion.
"""
from __future__ import annotations


class ConversionPipelineError(Exception):
    """Base class for every terminal pipeline failure."""

    default_message = "An error occurred while processing your image"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return self.__class__.__name__


class TooLargeError(ConversionPipelineError):
    status_code = 413

    def __init__(self, max_bytes: int, size_bytes: int | None = None) -> None:
        self.max_bytes = max_bytes
        self.size_bytes = size_bytes
        super().__init__(f"File size too large. Please upload an image under {max_bytes / (1024 * 1024):g}MB.")


class DecodeError(ConversionPipelineError):
    default_message = "Failed to load image"
    status_code = 415


class UnsupportedTypeError(DecodeError):
    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type {mime_type!r}. Please upload an image.")


class StagingError(ConversionPipelineError):
    default_message = "Failed to upload image"
    status_code = 502


class AvailabilityTimeoutError(ConversionPipelineError):
    default_message = "Failed to load uploaded image from storage."
    status_code = 504


class ConversionError(ConversionPipelineError):
    default_message = "Failed to convert image"
    status_code = 502


class InvalidResponseError(ConversionPipelineError):
    default_message = "Invalid response from conversion service"
    status_code = 502


class ConversionInProgressError(ConversionPipelineError):
    default_message = "A conversion is already in progress."
    status_code = 409
