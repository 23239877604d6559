"""
Summary: Copy fields between mutagen ID3 frames and AudioMetadata.
Why: MP3, WAVE, AIFF, DSF, DSDIFF and True Audio files all embed ID3v2 tags.
"""

from __future__ import annotations

from mutagen.id3 import APIC, COMM, ID3, POPM, RVA2, TXXX, USLT, Encoding, Frames

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
    format_slash_separated,
    merge_additional_metadata,
    parse_slash_separated,
    stale_additional_keys,
)
from .pictures import UNKNOWN_IMAGE_MIME_TYPE, inspect_image, ordered_pictures

__all__ = ["ID3_TEXT_FRAMES", "ID3_USER_TEXT_FIELDS", "read_id3_tags", "write_id3_tags"]

IMPLIED_REFERENCE_LOUDNESS = 89.0
MASTER_VOLUME_CHANNEL = 1
COMMENT_LANGUAGE = "eng"

ID3_TEXT_FRAMES: tuple[TextField, ...] = (
    TextField("TIT2", MetadataKey.TITLE),
    TextField("TALB", MetadataKey.ALBUM_TITLE),
    TextField("TPE1", MetadataKey.ARTIST),
    TextField("TPE2", MetadataKey.ALBUM_ARTIST),
    TextField("TCON", MetadataKey.GENRE),
    TextField("TCOM", MetadataKey.COMPOSER),
    TextField("TDRC", MetadataKey.RELEASE_DATE),
    TextField("TBPM", MetadataKey.BPM, ValueKind.INTEGER),
    TextField("TCMP", MetadataKey.COMPILATION, ValueKind.BOOLEAN),
    TextField("TSRC", MetadataKey.ISRC),
    TextField("TSOT", MetadataKey.TITLE_SORT_ORDER),
    TextField("TSOA", MetadataKey.ALBUM_TITLE_SORT_ORDER),
    TextField("TSOP", MetadataKey.ARTIST_SORT_ORDER),
    TextField("TSO2", MetadataKey.ALBUM_ARTIST_SORT_ORDER),
    TextField("TSOC", MetadataKey.COMPOSER_SORT_ORDER),
    TextField("TIT1", MetadataKey.GROUPING),
)

# TXXX descriptions; matched case-insensitively on read.
ID3_USER_TEXT_FIELDS: tuple[TextField, ...] = (
    TextField("MusicBrainz Album Id", MetadataKey.MUSICBRAINZ_RELEASE_ID),
    TextField("MusicBrainz Track Id", MetadataKey.MUSICBRAINZ_RECORDING_ID),
    TextField(
        "replaygain_reference_loudness",
        MetadataKey.REPLAY_GAIN_REFERENCE_LOUDNESS,
        ValueKind.DECIMAL,
        REPLAY_GAIN_LOUDNESS_FORMAT,
    ),
    TextField(
        "replaygain_track_gain",
        MetadataKey.REPLAY_GAIN_TRACK_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        "replaygain_track_peak",
        MetadataKey.REPLAY_GAIN_TRACK_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
    TextField(
        "replaygain_album_gain",
        MetadataKey.REPLAY_GAIN_ALBUM_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        "replaygain_album_peak",
        MetadataKey.REPLAY_GAIN_ALBUM_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
)

_USER_TEXT_BY_UPPER: dict[str, TextField] = {field.name.upper(): field for field in ID3_USER_TEXT_FIELDS}
_GAIN_KEYS = (MetadataKey.REPLAY_GAIN_TRACK_GAIN, MetadataKey.REPLAY_GAIN_ALBUM_GAIN)
_NUMBER_FRAMES: dict[str, tuple[MetadataKey, MetadataKey]] = {
    "TRCK": (MetadataKey.TRACK_NUMBER, MetadataKey.TRACK_TOTAL),
    "TPOS": (MetadataKey.DISC_NUMBER, MetadataKey.DISC_TOTAL),
}
_RVA2_PEAK_LIMIT = 65535 / 32768
_RVA2_GAIN_LIMIT = 32767 / 512


def _frame_text(tags: ID3, frame_id: str) -> str | None:
    frames = tags.getall(frame_id)
    if not frames:
        return None
    frame = frames[0]
    if frame_id == "TCON":
        return first_text(frame.genres)
    return first_text([str(text) for text in frame.text])


def _preferred_comment(tags: ID3) -> COMM | None:
    frames = tags.getall("COMM")
    for frame in frames:
        if frame.desc == "":
            return frame
    return frames[0] if frames else None


def _read_relative_volume(tags: ID3, metadata: AudioMetadata) -> None:
    for frame in tags.getall("RVA2"):
        if not frame.gain:
            continue
        if frame.desc.lower() == "album":
            metadata.replay_gain_album_gain = frame.gain
        else:
            metadata.replay_gain_track_gain = frame.gain


def read_id3_tags(tags: ID3, metadata: AudioMetadata) -> None:
    """Copy the recognized frames of ``tags`` into ``metadata``.

    Replay gain prefers TXXX frames and falls back to RVA2 frames. A gain
    read from TXXX implies the 89 dB reference loudness unless one is stored.
    """
    for field in ID3_TEXT_FRAMES:
        text = _frame_text(tags, field.name)
        if text is None:
            continue
        if field.kind is ValueKind.BOOLEAN and not text.strip():
            metadata.set_value(field.key, True)
            continue
        parsed = field.parse(text)
        if parsed is not None:
            metadata.set_value(field.key, parsed)

    for frame_id, (number_key, total_key) in _NUMBER_FRAMES.items():
        number, total = parse_slash_separated(_frame_text(tags, frame_id))
        if number is not None:
            metadata.set_value(number_key, number)
        if total is not None:
            metadata.set_value(total_key, total)

    comment = _preferred_comment(tags)
    if comment is not None and comment.text:
        metadata.comment = first_text(comment.text)

    lyrics = tags.getall("USLT")
    if lyrics:
        metadata.lyrics = lyrics[0].text

    popularimeters = tags.getall("POPM")
    if popularimeters:
        metadata.rating = popularimeters[0].rating

    additional: dict[str, str] = {}
    for frame in tags.getall("TXXX"):
        text = first_text(frame.text)
        if text is None:
            continue
        field = _USER_TEXT_BY_UPPER.get(frame.desc.upper())
        if field is None:
            additional[frame.desc] = text
            continue
        parsed = field.parse(text)
        if parsed is not None:
            metadata.set_value(field.key, parsed)
    merge_additional_metadata(metadata, additional)

    if any(metadata.get_value(key) is not None for key in _GAIN_KEYS):
        if metadata.replay_gain_reference_loudness is None:
            metadata.replay_gain_reference_loudness = IMPLIED_REFERENCE_LOUDNESS
    else:
        _read_relative_volume(tags, metadata)

    for frame in tags.getall("APIC"):
        metadata.attach_picture(
            AttachedPicture(
                image_data=frame.data,
                picture_type=AttachedPictureType.coerce(frame.type),
                description=frame.desc or None,
            )
        )


def _text_frame(frame_id: str, text: str):
    return Frames[frame_id](encoding=Encoding.UTF8, text=[text])


def _remove_user_text(tags: ID3, description: str) -> None:
    upper = description.upper()
    for frame in [frame for frame in tags.getall("TXXX") if frame.desc.upper() == upper]:
        del tags[frame.HashKey]


def _clamp(value: float, limit: float, floor: float) -> float:
    return max(floor, min(limit, value))


def _write_relative_volume(metadata: AudioMetadata, tags: ID3) -> None:
    tags.delall("RVA2")
    for description, gain, peak in (
        ("track", metadata.replay_gain_track_gain, metadata.replay_gain_track_peak),
        ("album", metadata.replay_gain_album_gain, metadata.replay_gain_album_peak),
    ):
        if gain is None:
            continue
        tags.add(
            RVA2(
                desc=description,
                channel=MASTER_VOLUME_CHANNEL,
                gain=_clamp(gain, _RVA2_GAIN_LIMIT, -_RVA2_GAIN_LIMIT),
                peak=_clamp(peak or 0.0, _RVA2_PEAK_LIMIT, 0.0),
            )
        )


def _unique_description(description: str, used: set[str]) -> str:
    candidate = description
    counter = 2
    while candidate in used:
        candidate = f"{description} ({counter})".strip()
        counter += 1
    used.add(candidate)
    return candidate


def _write_pictures(metadata: AudioMetadata, tags: ID3) -> None:
    tags.delall("APIC")
    used: set[str] = set()
    for picture in ordered_pictures(metadata.attached_pictures):
        info = inspect_image(picture.image_data)
        tags.add(
            APIC(
                encoding=Encoding.UTF8,
                mime=info.mime_type if info is not None else UNKNOWN_IMAGE_MIME_TYPE,
                type=int(picture.picture_type),
                desc=_unique_description(picture.description or "", used),
                data=picture.image_data,
            )
        )


def write_id3_tags(metadata: AudioMetadata, tags: ID3, *, write_pictures: bool) -> None:
    """Install the merged view of ``metadata`` into ``tags``; absent values delete their frames."""
    for field in ID3_TEXT_FRAMES:
        tags.delall(field.name)
        value = metadata.get_value(field.key)
        if value is not None:
            tags.add(_text_frame(field.name, field.render(value)))

    for frame_id, (number_key, total_key) in _NUMBER_FRAMES.items():
        tags.delall(frame_id)
        text = format_slash_separated(metadata.get_value(number_key), metadata.get_value(total_key))
        if text is not None:
            tags.add(_text_frame(frame_id, text))

    for frame in [frame for frame in tags.getall("COMM") if frame.desc == ""]:
        del tags[frame.HashKey]
    if metadata.comment is not None:
        tags.add(COMM(encoding=Encoding.UTF8, lang=COMMENT_LANGUAGE, desc="", text=[metadata.comment]))

    tags.delall("USLT")
    if metadata.lyrics is not None:
        tags.add(USLT(encoding=Encoding.UTF8, lang=COMMENT_LANGUAGE, desc="", text=metadata.lyrics))

    existing = tags.getall("POPM")
    tags.delall("POPM")
    if metadata.rating is not None:
        count = existing[0].count if existing and hasattr(existing[0], "count") else 0
        tags.add(POPM(email="", rating=int(_clamp(metadata.rating, 255, 0)), count=count))

    for field in ID3_USER_TEXT_FIELDS:
        _remove_user_text(tags, field.name)
        value = metadata.get_value(field.key)
        if value is not None:
            tags.add(TXXX(encoding=Encoding.UTF8, desc=field.name, text=[field.render(value)]))
    _write_relative_volume(metadata, tags)

    for description in stale_additional_keys(metadata):
        _remove_user_text(tags, description)
    for description, value in (metadata.additional_metadata or {}).items():
        if description.upper() in _USER_TEXT_BY_UPPER:
            logger.warning("Skipping additional metadata %r: reserved TXXX description", description)
            continue
        _remove_user_text(tags, description)
        tags.add(TXXX(encoding=Encoding.UTF8, desc=description, text=[value]))

    if write_pictures:
        _write_pictures(metadata, tags)
