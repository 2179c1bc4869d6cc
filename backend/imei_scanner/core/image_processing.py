"""Image encoding for scan uploads.

Turns an uploaded photo into the inline payload the inference providers
send alongside the prompt.  Only JPEG and PNG are accepted; anything else
is rejected here so no request is wasted on the remote service.  The bytes
are passed through unchanged (no resizing or recompression).
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Constants
# ------------------------------------------------------------------

SUPPORTED_MEDIA_TYPES = frozenset({"image/jpeg", "image/png"})

_MEDIA_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "image/x-png": "image/png",
}

# Declared types that carry no information and trigger sniffing.
_GENERIC_MEDIA_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})

_PILLOW_FORMATS = {
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",  # multi-picture JPEG written by many phone cameras
    "PNG": "image/png",
}


class EncodingError(ValueError):
    """The image is missing or its media type is not supported."""


@dataclass(frozen=True)
class ScanRequest:
    """A single image submitted for scanning."""

    content: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class EncodedImage:
    """Transport-ready inline image: media type + base64 data."""

    mime_type: str
    data: str

    def as_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def normalize_media_type(content_type: Optional[str]) -> str:
    """Lower-case *content_type*, drop parameters and resolve aliases."""
    if not content_type:
        return ""
    base = content_type.split(";", 1)[0].strip().lower()
    return _MEDIA_TYPE_ALIASES.get(base, base)


def sniff_media_type(content: bytes) -> str:
    """Detect the media type of *content* with Pillow, or ``""`` if unknown."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            fmt = (img.format or "").upper()
    except (UnidentifiedImageError, OSError):
        return ""
    return _PILLOW_FORMATS.get(fmt, f"image/{fmt.lower()}" if fmt else "")


def encode_image(
    content: bytes,
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> EncodedImage:
    """Encode an uploaded image for inline transport.

    Raises ``EncodingError`` when *content* is empty or the media type is
    outside ``SUPPORTED_MEDIA_TYPES``.  If no useful type was declared the
    type is sniffed from the bytes.
    """
    if not content:
        raise EncodingError("No image provided")

    mime_type = normalize_media_type(content_type)
    if mime_type in _GENERIC_MEDIA_TYPES:
        mime_type = sniff_media_type(content)
        logger.debug("Sniffed media type %r for %s", mime_type, filename)

    if mime_type not in SUPPORTED_MEDIA_TYPES:
        shown = mime_type or content_type or "unknown"
        raise EncodingError(
            f"Unsupported image type {shown!r}; please upload a JPEG or PNG image"
        )

    return EncodedImage(
        mime_type=mime_type,
        data=base64.b64encode(content).decode("ascii"),
    )


def encode_request(request: ScanRequest) -> EncodedImage:
    return encode_image(request.content, request.content_type, request.filename)
