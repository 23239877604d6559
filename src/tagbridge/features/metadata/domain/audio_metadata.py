"""
Summary: Normalized audio metadata model with change tracking.
Why: Present one typed view over every tag format while remembering what changed since the last read or save.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar, overload

from .attached_picture import AttachedPicture, AttachedPictureType
from .audio_properties import AudioProperties
from .change_tracking import ChangeTrackingDictionary, ChangeTrackingSet

__all__ = [
    "MetadataKey",
    "MetadataKind",
    "MetadataField",
    "AudioMetadata",
    "ATTACHED_PICTURES_KEY",
]

V = TypeVar("V")

ATTACHED_PICTURES_KEY = "Attached Pictures"


class MetadataKey(enum.StrEnum):
    """Keys of the normalized metadata dictionary."""

    TITLE = "Title"
    ALBUM_TITLE = "Album Title"
    ARTIST = "Artist"
    ALBUM_ARTIST = "Album Artist"
    GENRE = "Genre"
    COMPOSER = "Composer"
    RELEASE_DATE = "Date"
    COMPILATION = "Compilation"
    TRACK_NUMBER = "Track Number"
    TRACK_TOTAL = "Track Total"
    DISC_NUMBER = "Disc Number"
    DISC_TOTAL = "Disc Total"
    LYRICS = "Lyrics"
    BPM = "BPM"
    RATING = "Rating"
    COMMENT = "Comment"
    ISRC = "ISRC"
    MCN = "MCN"
    MUSICBRAINZ_RELEASE_ID = "MusicBrainz Release ID"
    MUSICBRAINZ_RECORDING_ID = "MusicBrainz Recording ID"

    TITLE_SORT_ORDER = "Title Sort Order"
    ALBUM_TITLE_SORT_ORDER = "Album Title Sort Order"
    ARTIST_SORT_ORDER = "Artist Sort Order"
    ALBUM_ARTIST_SORT_ORDER = "Album Artist Sort Order"
    COMPOSER_SORT_ORDER = "Composer Sort Order"
    GENRE_SORT_ORDER = "Genre Sort Order"

    GROUPING = "Grouping"

    ADDITIONAL_METADATA = "Additional Metadata"

    REPLAY_GAIN_REFERENCE_LOUDNESS = "Replay Gain Reference Loudness"
    REPLAY_GAIN_TRACK_GAIN = "Replay Gain Track Gain"
    REPLAY_GAIN_TRACK_PEAK = "Replay Gain Track Peak"
    REPLAY_GAIN_ALBUM_GAIN = "Replay Gain Album Gain"
    REPLAY_GAIN_ALBUM_PEAK = "Replay Gain Album Peak"


class MetadataKind(enum.Flag):
    """Groups of metadata keys used by the bulk copy/remove helpers."""

    BASIC = enum.auto()
    SORTING = enum.auto()
    GROUPING = enum.auto()
    ADDITIONAL = enum.auto()
    REPLAY_GAIN = enum.auto()
    ALL = BASIC | SORTING | GROUPING | ADDITIONAL | REPLAY_GAIN


_SORTING_KEYS = frozenset({
    MetadataKey.TITLE_SORT_ORDER,
    MetadataKey.ALBUM_TITLE_SORT_ORDER,
    MetadataKey.ARTIST_SORT_ORDER,
    MetadataKey.ALBUM_ARTIST_SORT_ORDER,
    MetadataKey.COMPOSER_SORT_ORDER,
    MetadataKey.GENRE_SORT_ORDER,
})
_REPLAY_GAIN_KEYS = frozenset({
    MetadataKey.REPLAY_GAIN_REFERENCE_LOUDNESS,
    MetadataKey.REPLAY_GAIN_TRACK_GAIN,
    MetadataKey.REPLAY_GAIN_TRACK_PEAK,
    MetadataKey.REPLAY_GAIN_ALBUM_GAIN,
    MetadataKey.REPLAY_GAIN_ALBUM_PEAK,
})


def _kind_of(key: MetadataKey) -> MetadataKind:
    if key in _SORTING_KEYS:
        return MetadataKind.SORTING
    if key in _REPLAY_GAIN_KEYS:
        return MetadataKind.REPLAY_GAIN
    if key is MetadataKey.GROUPING:
        return MetadataKind.GROUPING
    if key is MetadataKey.ADDITIONAL_METADATA:
        return MetadataKind.ADDITIONAL
    return MetadataKind.BASIC


def _freeze_mapping(value: Mapping[str, str]) -> dict[str, str] | None:
    copied = {str(k): str(v) for k, v in value.items()}
    return copied or None


class MetadataField(Generic[V]):
    """Descriptor exposing one metadata key as a typed attribute."""

    __slots__ = ("key", "cast", "name")

    def __init__(self, key: MetadataKey, cast: Callable[[Any], V] | None = None) -> None:
        self.key = key
        self.cast = cast
        self.name = key.name.lower()

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    @overload
    def __get__(self, instance: None, owner: type) -> MetadataField[V]: ...

    @overload
    def __get__(self, instance: AudioMetadata, owner: type) -> V | None: ...

    def __get__(self, instance: AudioMetadata | None, owner: type) -> MetadataField[V] | V | None:
        if instance is None:
            return self
        return instance.get_value(self.key)

    def __set__(self, instance: AudioMetadata, value: V | None) -> None:
        if value is not None and self.cast is not None:
            value = self.cast(value)
        instance.set_value(self.key, value)

    def __delete__(self, instance: AudioMetadata) -> None:
        instance.set_value(self.key, None)


class AudioMetadata:
    """Typed, change-tracked view of an audio file's tags and artwork."""

    # region Basic metadata
    title: MetadataField[str] = MetadataField(MetadataKey.TITLE, str)
    album_title: MetadataField[str] = MetadataField(MetadataKey.ALBUM_TITLE, str)
    artist: MetadataField[str] = MetadataField(MetadataKey.ARTIST, str)
    album_artist: MetadataField[str] = MetadataField(MetadataKey.ALBUM_ARTIST, str)
    genre: MetadataField[str] = MetadataField(MetadataKey.GENRE, str)
    composer: MetadataField[str] = MetadataField(MetadataKey.COMPOSER, str)
    release_date: MetadataField[str] = MetadataField(MetadataKey.RELEASE_DATE, str)
    compilation: MetadataField[bool] = MetadataField(MetadataKey.COMPILATION, bool)
    track_number: MetadataField[int] = MetadataField(MetadataKey.TRACK_NUMBER, int)
    track_total: MetadataField[int] = MetadataField(MetadataKey.TRACK_TOTAL, int)
    disc_number: MetadataField[int] = MetadataField(MetadataKey.DISC_NUMBER, int)
    disc_total: MetadataField[int] = MetadataField(MetadataKey.DISC_TOTAL, int)
    lyrics: MetadataField[str] = MetadataField(MetadataKey.LYRICS, str)
    bpm: MetadataField[int] = MetadataField(MetadataKey.BPM, int)
    rating: MetadataField[int] = MetadataField(MetadataKey.RATING, int)
    comment: MetadataField[str] = MetadataField(MetadataKey.COMMENT, str)
    isrc: MetadataField[str] = MetadataField(MetadataKey.ISRC, str)
    mcn: MetadataField[str] = MetadataField(MetadataKey.MCN, str)
    musicbrainz_release_id: MetadataField[str] = MetadataField(MetadataKey.MUSICBRAINZ_RELEASE_ID, str)
    musicbrainz_recording_id: MetadataField[str] = MetadataField(MetadataKey.MUSICBRAINZ_RECORDING_ID, str)
    # endregion
    # region Sorting and grouping
    title_sort_order: MetadataField[str] = MetadataField(MetadataKey.TITLE_SORT_ORDER, str)
    album_title_sort_order: MetadataField[str] = MetadataField(MetadataKey.ALBUM_TITLE_SORT_ORDER, str)
    artist_sort_order: MetadataField[str] = MetadataField(MetadataKey.ARTIST_SORT_ORDER, str)
    album_artist_sort_order: MetadataField[str] = MetadataField(MetadataKey.ALBUM_ARTIST_SORT_ORDER, str)
    composer_sort_order: MetadataField[str] = MetadataField(MetadataKey.COMPOSER_SORT_ORDER, str)
    genre_sort_order: MetadataField[str] = MetadataField(MetadataKey.GENRE_SORT_ORDER, str)
    grouping: MetadataField[str] = MetadataField(MetadataKey.GROUPING, str)
    # endregion
    # region Replay gain
    replay_gain_reference_loudness: MetadataField[float] = MetadataField(
        MetadataKey.REPLAY_GAIN_REFERENCE_LOUDNESS, float
    )
    replay_gain_track_gain: MetadataField[float] = MetadataField(MetadataKey.REPLAY_GAIN_TRACK_GAIN, float)
    replay_gain_track_peak: MetadataField[float] = MetadataField(MetadataKey.REPLAY_GAIN_TRACK_PEAK, float)
    replay_gain_album_gain: MetadataField[float] = MetadataField(MetadataKey.REPLAY_GAIN_ALBUM_GAIN, float)
    replay_gain_album_peak: MetadataField[float] = MetadataField(MetadataKey.REPLAY_GAIN_ALBUM_PEAK, float)
    # endregion

    def __init__(
        self,
        values: Mapping[MetadataKey, Any] | None = None,
        pictures: Iterable[AttachedPicture] | None = None,
        properties: AudioProperties | None = None,
    ) -> None:
        self._metadata: ChangeTrackingDictionary[MetadataKey, Any] = ChangeTrackingDictionary(values)
        self._pictures: ChangeTrackingSet[AttachedPicture] = ChangeTrackingSet(pictures)
        self._properties: AudioProperties = properties or AudioProperties()

    def __repr__(self) -> str:
        fields = ", ".join(f"{key.name.lower()}={value!r}" for key, value in self._metadata.items())
        return f"<{self.__class__.__name__}({fields}, pictures={len(self._pictures)})>"

    # region Generic access

    @property
    def properties(self) -> AudioProperties:
        return self._properties

    def get_value(self, key: MetadataKey) -> Any:
        value = self._metadata.get(key)
        if key is MetadataKey.ADDITIONAL_METADATA and value is not None:
            return MappingProxyType(value)
        return value

    def initial_value(self, key: MetadataKey) -> Any:
        """Return the baseline value of ``key``, ignoring pending changes."""
        value = self._metadata.initial_values.get(key)
        if key is MetadataKey.ADDITIONAL_METADATA and value is not None:
            return MappingProxyType(value)
        return value

    def set_value(self, key: MetadataKey, value: Any) -> None:
        if key is MetadataKey.ADDITIONAL_METADATA and value is not None:
            value = _freeze_mapping(value)
        self._metadata.set(key, value)

    @property
    def additional_metadata(self) -> Mapping[str, str] | None:
        return self.get_value(MetadataKey.ADDITIONAL_METADATA)

    @additional_metadata.setter
    def additional_metadata(self, value: Mapping[str, str] | None) -> None:
        self.set_value(MetadataKey.ADDITIONAL_METADATA, value)

    def values(self) -> dict[MetadataKey, Any]:
        """Return the merged view of every metadata key that holds a value."""
        return self._metadata.merged_values()

    # endregion
    # region Change tracking

    @property
    def has_changes(self) -> bool:
        return self._metadata.has_changes() or self._pictures.has_changes()

    def has_changes_for_key(self, key: MetadataKey) -> bool:
        return self._metadata.has_changes_for_key(key)

    def changed_keys(self) -> set[MetadataKey]:
        return self._metadata.changed_keys()

    @property
    def has_picture_changes(self) -> bool:
        return self._pictures.has_changes()

    def merge_changes(self) -> None:
        self._metadata.merge_changes()
        self._pictures.merge_changes()

    def revert_changes(self) -> None:
        self._metadata.revert_changes()
        self._pictures.revert_changes()

    def reset(self) -> None:
        """Forget both the baseline and pending edits."""
        self._metadata.reset()
        self._pictures.reset()

    # endregion
    # region Bulk helpers

    def copy_metadata_of_kind(self, kind: MetadataKind, other: AudioMetadata) -> None:
        for key in MetadataKey:
            if _kind_of(key) & kind:
                self.set_value(key, other._metadata.get(key))

    def copy_metadata_from(self, other: AudioMetadata) -> None:
        self.copy_metadata_of_kind(MetadataKind.ALL, other)

    def remove_metadata_of_kind(self, kind: MetadataKind) -> None:
        for key in MetadataKey:
            if _kind_of(key) & kind:
                self.set_value(key, None)

    def remove_all_metadata(self) -> None:
        self.remove_metadata_of_kind(MetadataKind.ALL)

    def copy(self) -> AudioMetadata:
        clone = AudioMetadata(properties=self._properties)
        clone._metadata = self._metadata.copy()
        clone._pictures = self._pictures.copy()
        return clone

    # endregion
    # region Attached pictures

    @property
    def attached_pictures(self) -> frozenset[AttachedPicture]:
        return self._pictures.merged_objects()

    def attach_picture(self, picture: AttachedPicture) -> None:
        self._pictures.add(picture)

    def remove_attached_picture(self, picture: AttachedPicture) -> None:
        self._pictures.discard(picture)

    def attached_pictures_of_type(self, picture_type: AttachedPictureType) -> list[AttachedPicture]:
        return [picture for picture in self._pictures if picture.picture_type == picture_type]

    def remove_attached_pictures_of_type(self, picture_type: AttachedPictureType) -> None:
        for picture in self.attached_pictures_of_type(picture_type):
            self._pictures.discard(picture)

    def remove_all_attached_pictures(self) -> None:
        self._pictures.remove_all()

    def copy_attached_pictures_from(self, other: AudioMetadata) -> None:
        for picture in other.attached_pictures:
            self._pictures.add(picture)

    # endregion
    # region External representation

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in self._metadata.merged_values().items():
            result[key.value] = dict(value) if key is MetadataKey.ADDITIONAL_METADATA else value
        result[ATTACHED_PICTURES_KEY] = [picture.to_dict() for picture in self.attached_pictures]
        return result

    def update_from_dict(self, data: Mapping[str, Any]) -> None:
        """Assign every known key found in ``data``; missing keys are cleared."""
        for key in MetadataKey:
            if key is MetadataKey.ADDITIONAL_METADATA:
                self.set_value(key, data.get(key.value))
                continue
            field = self._field_for(key)
            field.__set__(self, data.get(key.value))
        for picture_data in data.get(ATTACHED_PICTURES_KEY, ()):
            self.attach_picture(AttachedPicture.from_dict(picture_data))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AudioMetadata:
        metadata = cls()
        metadata.update_from_dict(data)
        return metadata

    @classmethod
    def _field_for(cls, key: MetadataKey) -> MetadataField[Any]:
        for attr in vars(cls).values():
            if isinstance(attr, MetadataField) and attr.key is key:
                return attr
        raise KeyError(key)

    # endregion
