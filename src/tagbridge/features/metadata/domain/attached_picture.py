"""
Summary: Attached picture value object and its picture type codes.
Why: Give artwork a single representation independent of the tag format it came from.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

__all__ = ["AttachedPictureType", "AttachedPicture"]

IMAGE_DATA_KEY = "Image Data"
PICTURE_TYPE_KEY = "Picture Type"
PICTURE_DESCRIPTION_KEY = "Picture Description"


class AttachedPictureType(enum.IntEnum):
    """Semantic picture types, numerically identical to ID3v2 APIC codes."""

    OTHER = 0x00
    FILE_ICON = 0x01
    OTHER_FILE_ICON = 0x02
    FRONT_COVER = 0x03
    BACK_COVER = 0x04
    LEAFLET_PAGE = 0x05
    MEDIA = 0x06
    LEAD_ARTIST = 0x07
    ARTIST = 0x08
    CONDUCTOR = 0x09
    BAND = 0x0A
    COMPOSER = 0x0B
    LYRICIST = 0x0C
    RECORDING_LOCATION = 0x0D
    DURING_RECORDING = 0x0E
    DURING_PERFORMANCE = 0x0F
    MOVIE_SCREEN_CAPTURE = 0x10
    COLOURED_FISH = 0x11
    ILLUSTRATION = 0x12
    BAND_LOGO = 0x13
    PUBLISHER_LOGO = 0x14

    @classmethod
    def coerce(cls, value: int | None) -> AttachedPictureType:
        """Map a raw type code to a member, falling back to ``OTHER``."""
        if value is None:
            return cls.OTHER
        try:
            return cls(int(value))
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class AttachedPicture:
    """Embedded image identified by its bytes and picture type.

    The description is carried along but is not part of equality or hashing,
    so the same image attached twice with different captions is one picture.
    """

    image_data: bytes
    picture_type: AttachedPictureType = AttachedPictureType.OTHER
    description: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.image_data, bytes):
            object.__setattr__(self, "image_data", bytes(self.image_data))
        if not isinstance(self.picture_type, AttachedPictureType):
            object.__setattr__(self, "picture_type", AttachedPictureType.coerce(self.picture_type))
        if self.description == "":
            object.__setattr__(self, "description", None)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(type={self.picture_type.name}, "
            f"bytes={len(self.image_data)}, description={self.description!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            IMAGE_DATA_KEY: self.image_data,
            PICTURE_TYPE_KEY: int(self.picture_type),
        }
        if self.description is not None:
            result[PICTURE_DESCRIPTION_KEY] = self.description
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttachedPicture:
        return cls(
            image_data=data[IMAGE_DATA_KEY],
            picture_type=AttachedPictureType.coerce(data.get(PICTURE_TYPE_KEY)),
            description=data.get(PICTURE_DESCRIPTION_KEY),
        )
