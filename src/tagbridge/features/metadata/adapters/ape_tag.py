"""
Summary: Copy fields between mutagen APEv2 tags and AudioMetadata.
Why: Monkey's Audio, WavPack, Musepack, OptimFROG and some MP3 files carry APE tags.
"""

from __future__ import annotations

from mutagen.apev2 import BINARY, APEBinaryValue, APETextValue, APEv2, APEValue, is_valid_apev2_key

from tagbridge.platform.logging import logger

from ..domain.attached_picture import AttachedPicture, AttachedPictureType
from ..domain.audio_metadata import AudioMetadata
from ._tag_utils import (
    VORBIS_STYLE_FIELDS,
    TextField,
    merge_additional_metadata,
    stale_additional_keys,
)
from .pictures import ordered_pictures

__all__ = ["COVER_ART_ITEMS", "read_ape_tag", "write_ape_tag"]

# Binary items holding ``<description>\0<image bytes>``.
COVER_ART_ITEMS: dict[str, AttachedPictureType] = {
    "Cover Art (Front)": AttachedPictureType.FRONT_COVER,
    "Cover Art (Back)": AttachedPictureType.BACK_COVER,
}

_FIELDS_BY_NAME: dict[str, TextField] = {field.name: field for field in VORBIS_STYLE_FIELDS}
_COVER_ART_BY_NAME: dict[str, AttachedPictureType] = {
    name.upper(): picture_type for name, picture_type in COVER_ART_ITEMS.items()
}


def _decode_cover_art(data: bytes, picture_type: AttachedPictureType) -> AttachedPicture | None:
    description, separator, image_data = data.partition(b"\0")
    if not separator or len(data) <= 3:
        return None
    return AttachedPicture(
        image_data=image_data,
        picture_type=picture_type,
        description=description.decode("utf-8", errors="replace") or None,
    )


def read_ape_tag(tag: APEv2, metadata: AudioMetadata) -> None:
    """Copy every item of ``tag`` into ``metadata``."""
    additional: dict[str, str] = {}

    for name, value in tag.items():
        upper = name.upper()
        if isinstance(value, APEBinaryValue):
            picture_type = _COVER_ART_BY_NAME.get(upper)
            if picture_type is not None:
                picture = _decode_cover_art(value.value, picture_type)
                if picture is not None:
                    metadata.attach_picture(picture)
            continue
        if not isinstance(value, APETextValue):
            continue

        text = value[0]
        field = _FIELDS_BY_NAME.get(upper)
        if field is None:
            additional[name] = text
            continue
        parsed = field.parse(text)
        if parsed is not None:
            metadata.set_value(field.key, parsed)

    merge_additional_metadata(metadata, additional)


def _remove_item(tag: APEv2, name: str) -> None:
    if name in tag:
        del tag[name]


def write_ape_tag(metadata: AudioMetadata, tag: APEv2, *, write_pictures: bool) -> None:
    """Install the merged view of ``metadata`` into ``tag``."""
    for field in VORBIS_STYLE_FIELDS:
        value = metadata.get_value(field.key)
        if value is None:
            _remove_item(tag, field.name)
        else:
            tag[field.name] = field.render(value)

    for name in stale_additional_keys(metadata):
        _remove_item(tag, name)
    for name, value in (metadata.additional_metadata or {}).items():
        if not is_valid_apev2_key(name) or name.upper() in _COVER_ART_BY_NAME:
            logger.warning("Skipping additional metadata %r: not a usable APE item key", name)
            continue
        tag[name] = value

    if write_pictures:
        for name in COVER_ART_ITEMS:
            _remove_item(tag, name)
        for picture in ordered_pictures(metadata.attached_pictures):
            for name, picture_type in COVER_ART_ITEMS.items():
                if picture.picture_type is not picture_type or name in tag:
                    continue
                description = (picture.description or "").encode("utf-8")
                tag[name] = APEValue(description + b"\0" + picture.image_data, BINARY)
