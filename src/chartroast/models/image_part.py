# -*- coding: utf-8 -*-
"""Encoded image data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ImagePart:
    """Base64 image payload tagged with a supported media type."""

    media_type: str
    data: str

    def as_source(self) -> dict[str, Any]:
        """Return the Messages API base64 image source block."""
        return {"type": "base64", "media_type": self.media_type, "data": self.data}
