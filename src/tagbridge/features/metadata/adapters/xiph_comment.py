"""
Summary: Copy fields between mutagen Vorbis comments and AudioMetadata.
Why: FLAC and every Ogg codec share this tag format, so one table serves them all.
"""

from __future__ import annotations

import base64
import binascii

from mutagen._vorbis import VComment, is_valid_key
from mutagen.flac import Picture, error as FLACError

from tagbridge.platform.logging import logger

from ..domain.attached_picture import AttachedPicture, AttachedPictureType
from ..domain.audio_metadata import AudioMetadata, MetadataKey
from ._tag_utils import (
    VORBIS_STYLE_FIELDS,
    TextField,
    merge_additional_metadata,
    parse_slash_separated,
    stale_additional_keys,
)
from .pictures import UNKNOWN_IMAGE_MIME_TYPE, inspect_image, ordered_pictures

__all__ = [
    "PICTURE_FIELD",
    "LEGACY_COVER_FIELD",
    "read_xiph_comment",
    "write_xiph_comment",
    "to_flac_picture",
    "from_flac_picture",
    "remove_picture_fields",
]

PICTURE_FIELD = "METADATA_BLOCK_PICTURE"
LEGACY_COVER_FIELD = "COVERART"

_FIELDS_BY_NAME: dict[str, TextField] = {field.name: field for field in VORBIS_STYLE_FIELDS}
_COMBINED_TOTALS: dict[str, MetadataKey] = {
    "TRACKNUMBER": MetadataKey.TRACK_TOTAL,
    "DISCNUMBER": MetadataKey.DISC_TOTAL,
}


def to_flac_picture(picture: AttachedPicture) -> Picture:
    """Build a FLAC picture block, asking Pillow for the MIME type and raster size."""
    block = Picture()
    block.type = int(picture.picture_type)
    block.data = picture.image_data
    block.desc = picture.description or ""
    info = inspect_image(picture.image_data)
    if info is None:
        block.mime = UNKNOWN_IMAGE_MIME_TYPE
    else:
        block.mime = info.mime_type
        block.width = info.width
        block.height = info.height
        block.depth = info.depth
    return block


def from_flac_picture(block: Picture) -> AttachedPicture:
    return AttachedPicture(
        image_data=block.data,
        picture_type=AttachedPictureType.coerce(block.type),
        description=block.desc or None,
    )


def _decode_picture_field(value: str) -> AttachedPicture | None:
    try:
        return from_flac_picture(Picture(base64.b64decode(value)))
    except (binascii.Error, ValueError, FLACError) as exc:
        logger.debug("Skipping undecodable %s field: %s", PICTURE_FIELD, exc)
        return None


def _decode_legacy_cover(value: str) -> AttachedPicture | None:
    try:
        return AttachedPicture(image_data=base64.b64decode(value))
    except (binascii.Error, ValueError) as exc:
        logger.debug("Skipping undecodable %s field: %s", LEGACY_COVER_FIELD, exc)
        return None


def read_xiph_comment(comment: VComment, metadata: AudioMetadata) -> None:
    """Copy every field of ``comment`` into ``metadata``.

    Field names match case-insensitively and only the first value of a
    repeated field is used. Unknown fields keep their original spelling in
    the additional metadata.
    """
    additional: dict[str, str] = {}
    seen: set[str] = set()
    pending_totals: dict[MetadataKey, int] = {}

    for name, value in comment:
        upper = name.upper()
        if upper == PICTURE_FIELD:
            picture = _decode_picture_field(value)
            if picture is not None:
                metadata.attach_picture(picture)
            continue
        if upper == LEGACY_COVER_FIELD:
            picture = _decode_legacy_cover(value)
            if picture is not None:
                metadata.attach_picture(picture)
            continue

        if upper in seen:
            continue
        seen.add(upper)

        field = _FIELDS_BY_NAME.get(upper)
        if field is None:
            additional[name] = value
            continue

        parsed = field.parse(value)
        if parsed is not None:
            metadata.set_value(field.key, parsed)

        total_key = _COMBINED_TOTALS.get(upper)
        if total_key is not None and "/" in value:
            _, total = parse_slash_separated(value)
            if total is not None:
                pending_totals[total_key] = total

    for key, total in pending_totals.items():
        if metadata.get_value(key) is None:
            metadata.set_value(key, total)

    merge_additional_metadata(metadata, additional)


def _remove_field(comment: VComment, name: str) -> None:
    upper = name.upper()
    for item in [item for item in comment if item[0].upper() == upper]:
        comment.remove(item)


def remove_picture_fields(comment: VComment) -> None:
    """Drop every base64 picture field from ``comment``."""
    _remove_field(comment, PICTURE_FIELD)
    _remove_field(comment, LEGACY_COVER_FIELD)


def write_xiph_comment(
    metadata: AudioMetadata,
    comment: VComment,
    *,
    write_pictures: bool,
) -> None:
    """Install the merged view of ``metadata`` into ``comment``.

    With ``write_pictures`` the picture fields are replaced by the model's
    pictures; otherwise they are left as they are.
    """
    for field in VORBIS_STYLE_FIELDS:
        _remove_field(comment, field.name)
        value = metadata.get_value(field.key)
        if value is not None:
            comment.append((field.name, field.render(value)))

    for name in stale_additional_keys(metadata):
        _remove_field(comment, name)
    for name, value in (metadata.additional_metadata or {}).items():
        if not is_valid_key(name) or name.upper() in (PICTURE_FIELD, LEGACY_COVER_FIELD):
            logger.warning("Skipping additional metadata %r: not a usable Vorbis comment name", name)
            continue
        _remove_field(comment, name)
        comment.append((name, value))

    if write_pictures:
        remove_picture_fields(comment)
        for picture in ordered_pictures(metadata.attached_pictures):
            encoded = base64.b64encode(to_flac_picture(picture).write()).decode("ascii")
            comment.append((PICTURE_FIELD, encoded))
