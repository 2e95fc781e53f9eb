# -*- coding: utf-8 -*-
"""Failure kinds raised by the encoder, client, and parser."""

from __future__ import annotations


class ChartRoastError(Exception):
    """Base class for expected analysis failures."""


class UnsupportedMediaType(ChartRoastError):
    """Raised when an image is not JPEG, PNG, GIF, or WebP."""

    def __init__(self, media_type: str | None) -> None:
        self.media_type = media_type or "unknown"
        super().__init__(
            f"Unsupported file type: {self.media_type}. Please use JPEG, PNG, GIF, or WebP."
        )


class MissingCredential(ChartRoastError):
    """Raised when no Anthropic API key is configured."""


class MalformedUpstreamResponse(ChartRoastError):
    """Raised when the API reply carries no text content block."""


class UpstreamRequestError(ChartRoastError):
    """Raised when the API request itself fails."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


class UnparseableResponse(ChartRoastError):
    """Raised when no parse tier could recover every feedback field."""

    def __init__(self, raw_response: str, missing_fields: list[str] | None = None) -> None:
        self.raw_response = raw_response
        self.missing_fields = list(missing_fields or [])
        message = "Could not recover feedback fields from the model reply"
        if self.missing_fields:
            message += f" (missing: {', '.join(self.missing_fields)})"
        super().__init__(message)
