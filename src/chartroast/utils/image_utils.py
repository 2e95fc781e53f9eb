# -*- coding: utf-8 -*-
"""Image encoding helpers for the analysis request."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path

from chartroast.constants import SUFFIX_MEDIA_TYPES, SUPPORTED_MEDIA_TYPES
from chartroast.errors import UnsupportedMediaType
from chartroast.models.image_part import ImagePart

logger = logging.getLogger(__name__)


def guess_media_type(path: str | Path) -> str | None:
    """Return the declared content type of a file, judged by its suffix."""
    suffix = Path(path).suffix.lower()
    if suffix in SUFFIX_MEDIA_TYPES:
        return SUFFIX_MEDIA_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed


def validate_media_type(media_type: str | None) -> str:
    normalized = (media_type or "").strip().lower()
    if normalized not in SUPPORTED_MEDIA_TYPES:
        logger.error("[encode] Unsupported media type: %s", media_type)
        raise UnsupportedMediaType(media_type)
    return normalized


def strip_data_uri(text: str) -> str:
    """Remove a ``data:<type>;base64,`` prefix if present."""
    if text.startswith("data:") and "," in text:
        return text.split(",", 1)[1]
    return text


def encode_file_base64(path: str | Path) -> str:
    """Encode a file as base64 text."""
    file_path = Path(path)
    return base64.b64encode(file_path.read_bytes()).decode("ascii")


def encode_image(path: str | Path, media_type: str | None = None) -> ImagePart:
    """Validate the content type of an image file and base64-encode it."""
    declared = media_type if media_type is not None else guess_media_type(path)
    validated = validate_media_type(declared)
    data = encode_file_base64(path)
    logger.debug("[encode] %s encoded as %s (%d base64 chars)", path, validated, len(data))
    return ImagePart(media_type=validated, data=data)


def encode_data_uri(uri: str) -> ImagePart:
    """Build an image part from a ``data:image/png;base64,...`` string."""
    if not uri.startswith("data:") or "," not in uri:
        raise UnsupportedMediaType(None)
    header = uri[len("data:"):].split(",", 1)[0]
    media_type = header.split(";", 1)[0]
    validated = validate_media_type(media_type)
    return ImagePart(media_type=validated, data=strip_data_uri(uri))


async def encode_image_async(path: str | Path, media_type: str | None = None) -> ImagePart:
    """Read and encode the image in a worker thread."""
    return await asyncio.to_thread(encode_image, path, media_type)
