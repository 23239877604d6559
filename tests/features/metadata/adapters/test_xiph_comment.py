"""
Summary: Tests for the Vorbis comment mapping shared by FLAC and Ogg codecs.
Why: Field names, combined totals and unknown fields must survive a read/write cycle.
"""

from __future__ import annotations

import base64
from io import BytesIO

from mutagen._vorbis import VCommentDict
from PIL import Image

from tagbridge.features.metadata.adapters.xiph_comment import (
    PICTURE_FIELD,
    read_xiph_comment,
    write_xiph_comment,
)
from tagbridge.features.metadata.domain.attached_picture import AttachedPicture, AttachedPictureType
from tagbridge.features.metadata.domain.audio_metadata import AudioMetadata


def _comment(*items: tuple[str, str]) -> VCommentDict:
    comment = VCommentDict()
    for item in items:
        comment.append(item)
    return comment


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (2, 2)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_read_maps_known_and_unknown_fields() -> None:
    """Known names map case-insensitively; the rest land in additional metadata."""

    comment = _comment(
        ("title", "Song"),
        ("TITLE", "Ignored duplicate"),
        ("TRACKNUMBER", "3/12"),
        ("COMPILATION", "1"),
        ("REPLAYGAIN_TRACK_GAIN", "-6.50 dB"),
        ("FooBar", "baz"),
    )
    metadata = AudioMetadata()

    read_xiph_comment(comment, metadata)

    assert metadata.title == "Song"
    assert metadata.track_number == 3
    assert metadata.track_total == 12
    assert metadata.compilation is True
    assert metadata.replay_gain_track_gain == -6.5
    assert metadata.additional_metadata == {"FooBar": "baz"}


def test_explicit_total_wins_over_combined_value() -> None:
    comment = _comment(("TRACKNUMBER", "3/12"), ("TRACKTOTAL", "10"))
    metadata = AudioMetadata()

    read_xiph_comment(comment, metadata)

    assert metadata.track_total == 10


def test_write_replaces_table_fields_and_keeps_unrelated() -> None:
    """Table fields mirror the model; absent values remove their field."""

    comment = _comment(("title", "Old"), ("GENRE", "Rock"), ("ENCODER", "lame"))
    metadata = AudioMetadata()
    read_xiph_comment(comment, metadata)
    metadata.merge_changes()

    metadata.title = "New"
    metadata.genre = None
    metadata.track_number = 4
    metadata.replay_gain_album_peak = 0.5
    write_xiph_comment(metadata, comment, write_pictures=False)

    assert comment["TITLE"] == ["New"]
    assert "GENRE" not in comment
    assert comment["TRACKNUMBER"] == ["4"]
    assert comment["REPLAYGAIN_ALBUM_PEAK"] == ["0.50000000"]
    assert comment["ENCODER"] == ["lame"]


def test_write_removes_stale_additional_fields() -> None:
    comment = _comment(("MOOD", "calm"), ("STYLE", "ambient"))
    metadata = AudioMetadata()
    read_xiph_comment(comment, metadata)
    metadata.merge_changes()

    metadata.additional_metadata = {"MOOD": "dark", "BAD=KEY": "x"}
    write_xiph_comment(metadata, comment, write_pictures=False)

    assert comment["MOOD"] == ["dark"]
    assert "STYLE" not in comment
    assert all(name != "BAD=KEY" for name, _ in comment)


def test_pictures_written_as_picture_blocks() -> None:
    """Pictures are base64 FLAC picture blocks that read back unchanged."""

    picture = AttachedPicture(_png_bytes(), AttachedPictureType.FRONT_COVER, "Front")
    metadata = AudioMetadata()
    metadata.attach_picture(picture)
    comment = _comment(("COVERART", base64.b64encode(b"legacy").decode("ascii")))

    write_xiph_comment(metadata, comment, write_pictures=True)

    assert "COVERART" not in comment
    assert len(comment[PICTURE_FIELD]) == 1

    reread = AudioMetadata()
    read_xiph_comment(comment, reread)
    assert reread.attached_pictures == frozenset({picture})
    (restored,) = reread.attached_pictures
    assert restored.description == "Front"


def test_pictures_untouched_when_disabled() -> None:
    legacy = base64.b64encode(b"legacy").decode("ascii")
    comment = _comment(("COVERART", legacy))
    metadata = AudioMetadata()

    write_xiph_comment(metadata, comment, write_pictures=False)

    assert comment["COVERART"] == [legacy]


def test_undecodable_picture_field_is_skipped() -> None:
    comment = _comment((PICTURE_FIELD, "!!not base64!!"))
    metadata = AudioMetadata()

    read_xiph_comment(comment, metadata)

    assert metadata.attached_pictures == frozenset()


def test_unknown_field_is_reemitted_verbatim() -> None:
    """An unknown field read from a comment is written back unchanged."""

    comment = _comment(("FOOBAR", "baz"))
    metadata = AudioMetadata()
    read_xiph_comment(comment, metadata)
    metadata.merge_changes()

    assert metadata.additional_metadata == {"FOOBAR": "baz"}

    target = _comment()
    write_xiph_comment(metadata, target, write_pictures=False)

    assert list(target) == [("FOOBAR", "baz")]
