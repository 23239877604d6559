"""
Summary: Pure parsing/formatting routines and the declarative text field tables.
Why: Share one value grammar between the Xiph comment, APE and MP4 freeform mappings.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from tagbridge.platform.logging import logger

from ..domain.audio_metadata import AudioMetadata, MetadataKey

__all__ = [
    "ValueKind",
    "TextField",
    "VORBIS_STYLE_FIELDS",
    "first_text",
    "parse_int",
    "parse_float",
    "parse_bool",
    "parse_slash_separated",
    "format_slash_separated",
    "format_bool",
    "merge_additional_metadata",
    "stale_additional_keys",
]

_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PATTERN = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def first_text(values: Any) -> str | None:
    """Return the first value of a single- or multi-valued field as text."""
    if values is None:
        return None
    if isinstance(values, str):
        return values
    if isinstance(values, bytes):
        return values.decode("utf-8", errors="replace")
    if isinstance(values, Iterable):
        for value in values:
            return first_text(value)
        return None
    return str(values)


def parse_int(text: str | None) -> int | None:
    """Parse the leading integer of ``text``, ignoring trailing content."""
    if not text:
        return None
    match = _INT_PATTERN.match(text)
    if match is None:
        logger.debug("Dropping malformed integer value %r", text)
        return None
    return int(match.group(1))


def parse_float(text: str | None) -> float | None:
    """Parse the leading decimal number of ``text`` (e.g. ``"-6.50 dB"``)."""
    if not text:
        return None
    match = _FLOAT_PATTERN.match(text)
    if match is None:
        logger.debug("Dropping malformed decimal value %r", text)
        return None
    return float(match.group(1))


def parse_bool(text: str | None) -> bool | None:
    """Interpret ``1``/``0``, ``true``/``false`` and ``yes``/``no`` style values."""
    if text is None:
        return None
    stripped = text.strip().lower()
    if not stripped:
        return None
    if stripped[0] in "ty":
        return True
    number = parse_int(stripped)
    return bool(number) if number is not None else False


def format_bool(value: bool) -> str:
    return "1" if value else "0"


def parse_slash_separated(value: str | None) -> tuple[int | None, int | None]:
    """Parse a string in 'number/total' format.

    Returns a tuple (number, total); either side is None when absent or not numeric.
    """
    if not value:
        return None, None
    number_part, _, total_part = value.partition("/")
    number = int(number_part) if number_part.strip().isdigit() else None
    total = int(total_part) if total_part.strip().isdigit() else None
    return number, total


def format_slash_separated(number: int | None, total: int | None) -> str | None:
    """Inverse of :func:`parse_slash_separated`; ``None`` when both are absent."""
    if number is not None and total is not None:
        return f"{number}/{total}"
    if number is not None:
        return str(number)
    if total is not None:
        return f"/{total}"
    return None


class ValueKind(enum.Enum):
    """How a text field maps onto a typed metadata value."""

    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"


@dataclass(frozen=True, slots=True)
class TextField:
    """Declarative mapping between a native text field and a metadata key."""

    name: str
    key: MetadataKey
    kind: ValueKind = ValueKind.TEXT
    format: str | None = None

    def parse(self, text: str | None) -> Any:
        if text is None:
            return None
        match self.kind:
            case ValueKind.TEXT:
                return text
            case ValueKind.INTEGER:
                return parse_int(text)
            case ValueKind.BOOLEAN:
                return parse_bool(text)
            case ValueKind.DECIMAL:
                return parse_float(text)

    def render(self, value: Any) -> str:
        match self.kind:
            case ValueKind.BOOLEAN:
                return format_bool(bool(value))
            case ValueKind.INTEGER:
                return str(int(value))
            case ValueKind.DECIMAL:
                return (self.format or "%f") % float(value)
            case ValueKind.TEXT:
                return str(value)


REPLAY_GAIN_LOUDNESS_FORMAT = "%.1f dB"
REPLAY_GAIN_GAIN_FORMAT = "%+.2f dB"
REPLAY_GAIN_PEAK_FORMAT = "%.8f"

# Field names shared by Xiph comments and APE tags.
VORBIS_STYLE_FIELDS: tuple[TextField, ...] = (
    TextField("ALBUM", MetadataKey.ALBUM_TITLE),
    TextField("ARTIST", MetadataKey.ARTIST),
    TextField("ALBUMARTIST", MetadataKey.ALBUM_ARTIST),
    TextField("COMPOSER", MetadataKey.COMPOSER),
    TextField("GENRE", MetadataKey.GENRE),
    TextField("DATE", MetadataKey.RELEASE_DATE),
    TextField("DESCRIPTION", MetadataKey.COMMENT),
    TextField("TITLE", MetadataKey.TITLE),
    TextField("TRACKNUMBER", MetadataKey.TRACK_NUMBER, ValueKind.INTEGER),
    TextField("TRACKTOTAL", MetadataKey.TRACK_TOTAL, ValueKind.INTEGER),
    TextField("COMPILATION", MetadataKey.COMPILATION, ValueKind.BOOLEAN),
    TextField("DISCNUMBER", MetadataKey.DISC_NUMBER, ValueKind.INTEGER),
    TextField("DISCTOTAL", MetadataKey.DISC_TOTAL, ValueKind.INTEGER),
    TextField("LYRICS", MetadataKey.LYRICS),
    TextField("BPM", MetadataKey.BPM, ValueKind.INTEGER),
    TextField("RATING", MetadataKey.RATING, ValueKind.INTEGER),
    TextField("ISRC", MetadataKey.ISRC),
    TextField("MCN", MetadataKey.MCN),
    TextField("MUSICBRAINZ_ALBUMID", MetadataKey.MUSICBRAINZ_RELEASE_ID),
    TextField("MUSICBRAINZ_TRACKID", MetadataKey.MUSICBRAINZ_RECORDING_ID),
    TextField("TITLESORT", MetadataKey.TITLE_SORT_ORDER),
    TextField("ALBUMTITLESORT", MetadataKey.ALBUM_TITLE_SORT_ORDER),
    TextField("ARTISTSORT", MetadataKey.ARTIST_SORT_ORDER),
    TextField("ALBUMARTISTSORT", MetadataKey.ALBUM_ARTIST_SORT_ORDER),
    TextField("COMPOSERSORT", MetadataKey.COMPOSER_SORT_ORDER),
    TextField("GENRESORT", MetadataKey.GENRE_SORT_ORDER),
    TextField("GROUPING", MetadataKey.GROUPING),
    TextField(
        "REPLAYGAIN_REFERENCE_LOUDNESS",
        MetadataKey.REPLAY_GAIN_REFERENCE_LOUDNESS,
        ValueKind.DECIMAL,
        REPLAY_GAIN_LOUDNESS_FORMAT,
    ),
    TextField(
        "REPLAYGAIN_TRACK_GAIN",
        MetadataKey.REPLAY_GAIN_TRACK_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        "REPLAYGAIN_TRACK_PEAK",
        MetadataKey.REPLAY_GAIN_TRACK_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
    TextField(
        "REPLAYGAIN_ALBUM_GAIN",
        MetadataKey.REPLAY_GAIN_ALBUM_GAIN,
        ValueKind.DECIMAL,
        REPLAY_GAIN_GAIN_FORMAT,
    ),
    TextField(
        "REPLAYGAIN_ALBUM_PEAK",
        MetadataKey.REPLAY_GAIN_ALBUM_PEAK,
        ValueKind.DECIMAL,
        REPLAY_GAIN_PEAK_FORMAT,
    ),
)


def merge_additional_metadata(metadata: AudioMetadata, additional: dict[str, str]) -> None:
    """Add ``additional`` to the model's additional metadata, overriding equal keys."""
    if not additional:
        return
    merged = dict(metadata.additional_metadata or {})
    merged.update(additional)
    metadata.additional_metadata = merged


def stale_additional_keys(metadata: AudioMetadata) -> set[str]:
    """Keys read from the file as additional metadata that the model no longer holds."""
    initial = metadata.initial_value(MetadataKey.ADDITIONAL_METADATA) or {}
    current = metadata.additional_metadata or {}
    return set(initial) - set(current)
