"""
Summary: Image introspection for embedded artwork using Pillow.
Why: Tag formats store MIME type and raster dimensions next to the image bytes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from io import BytesIO

from PIL import UnidentifiedImageError
from PIL.Image import MIME, open as open_image

from tagbridge.platform.logging import logger

from ..domain.attached_picture import AttachedPicture

__all__ = ["ImageInfo", "inspect_image", "ordered_pictures", "UNKNOWN_IMAGE_MIME_TYPE"]

UNKNOWN_IMAGE_MIME_TYPE = "image/"

_MODE_DEPTHS: dict[str, int] = {
    "1": 1,
    "L": 8,
    "P": 8,
    "LA": 16,
    "PA": 16,
    "I;16": 16,
    "RGB": 24,
    "YCbCr": 24,
    "LAB": 24,
    "HSV": 24,
    "RGBA": 32,
    "RGBX": 32,
    "CMYK": 32,
    "I": 32,
    "F": 32,
}


@dataclass(frozen=True, slots=True)
class ImageInfo:
    """What Pillow could tell about an image without decoding its pixels."""

    mime_type: str
    width: int
    height: int
    depth: int


def inspect_image(data: bytes) -> ImageInfo | None:
    """Identify ``data`` as an image; ``None`` when Pillow does not recognize it."""
    try:
        with open_image(BytesIO(data)) as image:
            mime_type = MIME.get(image.format or "", UNKNOWN_IMAGE_MIME_TYPE)
            return ImageInfo(
                mime_type=mime_type,
                width=image.width,
                height=image.height,
                depth=_MODE_DEPTHS.get(image.mode, 0),
            )
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.debug("Could not identify embedded image (%d bytes): %s", len(data), exc)
        return None


def ordered_pictures(pictures: Iterable[AttachedPicture]) -> list[AttachedPicture]:
    """Return ``pictures`` in a stable order (by type, then bytes) for serialization."""
    return sorted(pictures, key=lambda picture: (int(picture.picture_type), picture.image_data))
