"""
Summary: Copy fields between mutagen MP4 ilst atoms and AudioMetadata.
Why: iTunes-style atoms need their own table; freeform items reuse the text field grammar.
"""

from __future__ import annotations

from typing import Any

from mutagen.mp4 import AtomDataType, MP4Cover, MP4FreeForm, MP4Tags

from tagbridge.platform.logging import logger

from ..domain.attached_picture import AttachedPicture, AttachedPictureType
from ..domain.audio_metadata import AudioMetadata, MetadataKey
from ._tag_utils import (
    REPLAY_GAIN_GAIN_FORMAT,
    REPLAY_GAIN_LOUDNESS_FORMAT,
    REPLAY_GAIN_PEAK_FORMAT,
    TextField,
    ValueKind,
    first_text,
    merge_additional_metadata,
    stale_additional_keys,
)
from .pictures import inspect_image, ordered_pictures

__all__ = ["FREEFORM_PREFIX", "MP4_TEXT_ATOMS", "MP4_FREEFORM_FIELDS", "read_mp4_tags", "write_mp4_tags"]

FREEFORM_PREFIX = "----:com.apple.iTunes:"
COVER_ATOM = "covr"
TRACK_ATOM = "trkn"
DISC_ATOM = "disk"
COMPILATION_ATOM = "cpil"
BPM_ATOM = "tmpo"

MP4_TEXT_ATOMS: dict[str, MetadataKey] = {
    "\xa9nam": MetadataKey.TITLE,
    "\xa9ART": MetadataKey.ARTIST,
    "\xa9alb": MetadataKey.ALBUM_TITLE,
    "aART": MetadataKey.ALBUM_ARTIST,
    "\xa9gen": MetadataKey.GENRE,
    "\xa9wrt": MetadataKey.COMPOSER,
    "\xa9cmt": MetadataKey.COMMENT,
    "\xa9day": MetadataKey.RELEASE_DATE,
    "\xa9lyr": MetadataKey.LYRICS,
    "sonm": MetadataKey.TITLE_SORT_ORDER,
    "soal": MetadataKey.ALBUM_TITLE_SORT_ORDER,
    "soar": MetadataKey.ARTIST_SORT_ORDER,
    "soaa": MetadataKey.ALBUM_ARTIST_SORT_ORDER,
    "soco": MetadataKey.COMPOSER_SORT_ORDER,
    "\xa9grp": MetadataKey.GROUPING,
}

MP4_FREEFORM_FIELDS: tuple[TextField, ...] = (
    TextField(FREEFORM_PREFIX + "MusicBrainz Album Id", MetadataKey.MUSICBRAINZ_RELEASE_ID),
    TextField(FREEFORM_PREFIX + "MusicBrainz Track Id", MetadataKey.MUSICBRAINZ_RECORDING_ID),
    TextField(FREEFORM_PREFIX + "ISRC", MetadataKey.ISRC),
    TextField(
        FREEFORM_PREFIX + "replaygain_reference_loudness",
        MetadataKey.REPLAY_GAIN_REFERENCE_LOUDNESS,
        ValueKind.DECIMAL,
        REPLAY_GAIN_LOUDNESS_FORMAT,
    ),
    TextField(
        FREEFORM_PREFIX + "replaygain_track_gain",
        MetadataKey.REPLAY_GAIN_TRACK_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        FREEFORM_PREFIX + "replaygain_track_peak",
        MetadataKey.REPLAY_GAIN_TRACK_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
    TextField(
        FREEFORM_PREFIX + "replaygain_album_gain",
        MetadataKey.REPLAY_GAIN_ALBUM_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        FREEFORM_PREFIX + "replaygain_album_peak",
        MetadataKey.REPLAY_GAIN_ALBUM_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
)

_FREEFORM_BY_NAME: dict[str, TextField] = {field.name: field for field in MP4_FREEFORM_FIELDS}
_NUMBER_PAIRS: dict[str, tuple[MetadataKey, MetadataKey]] = {
    TRACK_ATOM: (MetadataKey.TRACK_NUMBER, MetadataKey.TRACK_TOTAL),
    DISC_ATOM: (MetadataKey.DISC_NUMBER, MetadataKey.DISC_TOTAL),
}


def _is_freeform_key(key: str) -> bool:
    return key.startswith("----:") and key.count(":") >= 2


def _freeform_text(values: Any) -> str | None:
    for value in values or ():
        if isinstance(value, MP4FreeForm) and value.dataformat != AtomDataType.UTF8:
            return None
        return bytes(value).decode("utf-8", errors="replace")
    return None


def read_mp4_tags(tags: MP4Tags, metadata: AudioMetadata) -> None:
    """Copy the recognized atoms of ``tags`` into ``metadata``."""
    additional: dict[str, str] = {}

    for key, values in tags.items():
        text_key = MP4_TEXT_ATOMS.get(key)
        if text_key is not None:
            text = first_text(values)
            if text is not None:
                metadata.set_value(text_key, text)
        elif key in _NUMBER_PAIRS:
            number_key, total_key = _NUMBER_PAIRS[key]
            if values:
                number, total = values[0]
                if number:
                    metadata.set_value(number_key, number)
                if total:
                    metadata.set_value(total_key, total)
        elif key == COMPILATION_ATOM:
            metadata.compilation = bool(values)
        elif key == BPM_ATOM:
            if values and values[0]:
                metadata.bpm = int(values[0])
        elif key == COVER_ATOM:
            for cover in values or ():
                metadata.attach_picture(
                    AttachedPicture(image_data=bytes(cover), picture_type=AttachedPictureType.FRONT_COVER)
                )
        elif _is_freeform_key(key):
            text = _freeform_text(values)
            if text is None:
                continue
            field = _FREEFORM_BY_NAME.get(key)
            if field is None:
                additional[key] = text
                continue
            parsed = field.parse(text)
            if parsed is not None:
                metadata.set_value(field.key, parsed)

    merge_additional_metadata(metadata, additional)


def _cover_for(picture: AttachedPicture) -> MP4Cover:
    info = inspect_image(picture.image_data)
    if info is not None and info.mime_type == "image/png":
        return MP4Cover(picture.image_data, imageformat=MP4Cover.FORMAT_PNG)
    return MP4Cover(picture.image_data, imageformat=MP4Cover.FORMAT_JPEG)


def write_mp4_tags(metadata: AudioMetadata, tags: MP4Tags, *, write_pictures: bool) -> None:
    """Install the merged view of ``metadata`` into ``tags``; absent values remove their atom."""
    for atom, key in MP4_TEXT_ATOMS.items():
        value = metadata.get_value(key)
        if value is None:
            tags.pop(atom, None)
        else:
            tags[atom] = [str(value)]

    for atom, (number_key, total_key) in _NUMBER_PAIRS.items():
        number = metadata.get_value(number_key)
        total = metadata.get_value(total_key)
        if number is None and total is None:
            tags.pop(atom, None)
        else:
            tags[atom] = [(number or 0, total or 0)]

    if metadata.compilation is None:
        tags.pop(COMPILATION_ATOM, None)
    else:
        tags[COMPILATION_ATOM] = bool(metadata.compilation)

    if metadata.bpm is None:
        tags.pop(BPM_ATOM, None)
    else:
        tags[BPM_ATOM] = [int(metadata.bpm)]

    for field in MP4_FREEFORM_FIELDS:
        value = metadata.get_value(field.key)
        if value is None:
            tags.pop(field.name, None)
        else:
            tags[field.name] = [MP4FreeForm(field.render(value).encode("utf-8"))]

    for key in stale_additional_keys(metadata):
        if _is_freeform_key(key):
            tags.pop(key, None)
    for key, value in (metadata.additional_metadata or {}).items():
        if not _is_freeform_key(key) or key in _FREEFORM_BY_NAME:
            logger.warning("Skipping additional metadata %r: not a usable MP4 freeform key", key)
            continue
        tags[key] = [MP4FreeForm(value.encode("utf-8"))]

    if write_pictures:
        tags.pop(COVER_ATOM, None)
        pictures = ordered_pictures(metadata.attached_pictures)
        if pictures:
            tags[COVER_ATOM] = [_cover_for(picture) for picture in pictures]
