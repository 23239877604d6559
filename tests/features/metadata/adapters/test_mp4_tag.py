"""Tests for the MP4 ilst atom mapping."""

from __future__ import annotations

from io import BytesIO

from mutagen.mp4 import AtomDataType, MP4Cover, MP4FreeForm, MP4Tags
from PIL import Image

from tagbridge.features.metadata.adapters.mp4_tag import read_mp4_tags, write_mp4_tags
from tagbridge.features.metadata.domain.attached_picture import AttachedPicture, AttachedPictureType
from tagbridge.features.metadata.domain.audio_metadata import AudioMetadata

MOOD_KEY = "----:com.apple.iTunes:MOOD"
TRACK_GAIN_KEY = "----:com.apple.iTunes:replaygain_track_gain"


def test_read_atoms() -> None:
    """Text, number pair, flag and freeform atoms map to their keys."""

    tags = MP4Tags()
    tags["\xa9nam"] = ["Song"]
    tags["trkn"] = [(3, 0)]
    tags["disk"] = [(1, 2)]
    tags["cpil"] = True
    tags["tmpo"] = [120]
    tags[TRACK_GAIN_KEY] = [MP4FreeForm(b"-6.50 dB")]
    tags[MOOD_KEY] = [MP4FreeForm(b"happy")]
    tags["----:com.example:BLOB"] = [MP4FreeForm(b"\x00\x01", dataformat=AtomDataType.IMPLICIT)]
    tags["covr"] = [MP4Cover(b"jpegdata")]
    metadata = AudioMetadata()

    read_mp4_tags(tags, metadata)

    assert metadata.title == "Song"
    assert metadata.track_number == 3
    assert metadata.track_total is None
    assert (metadata.disc_number, metadata.disc_total) == (1, 2)
    assert metadata.compilation is True
    assert metadata.bpm == 120
    assert metadata.replay_gain_track_gain == -6.5
    assert metadata.additional_metadata == {MOOD_KEY: "happy"}
    assert metadata.attached_pictures == frozenset(
        {AttachedPicture(b"jpegdata", AttachedPictureType.FRONT_COVER)}
    )


def test_cleared_values_remove_atoms() -> None:
    """Absent values drop their atom instead of writing an empty one."""

    tags = MP4Tags()
    tags["\xa9nam"] = ["Song"]
    tags["tmpo"] = [100]
    tags[MOOD_KEY] = [MP4FreeForm(b"happy")]
    metadata = AudioMetadata()
    read_mp4_tags(tags, metadata)
    metadata.merge_changes()

    metadata.title = None
    metadata.bpm = None
    metadata.additional_metadata = None
    write_mp4_tags(metadata, tags, write_pictures=False)

    assert "\xa9nam" not in tags
    assert "tmpo" not in tags
    assert MOOD_KEY not in tags


def test_write_numbers_and_freeform_fields() -> None:
    metadata = AudioMetadata()
    metadata.track_number = 3
    metadata.disc_total = 2
    metadata.replay_gain_track_gain = -6.5
    metadata.additional_metadata = {"plain key": "skipped", MOOD_KEY: "calm"}
    tags = MP4Tags()

    write_mp4_tags(metadata, tags, write_pictures=False)

    assert tags["trkn"] == [(3, 0)]
    assert tags["disk"] == [(0, 2)]
    assert bytes(tags[TRACK_GAIN_KEY][0]) == b"-6.50 dB"
    assert bytes(tags[MOOD_KEY][0]) == b"calm"
    assert "plain key" not in tags


def test_write_covers_detects_png() -> None:
    """PNG pictures are flagged as PNG covers; anything else is written as JPEG."""

    buffer = BytesIO()
    Image.new("RGB", (1, 1)).save(buffer, format="PNG")
    metadata = AudioMetadata()
    metadata.attach_picture(AttachedPicture(buffer.getvalue(), AttachedPictureType.FRONT_COVER))
    metadata.attach_picture(AttachedPicture(b"unknown", AttachedPictureType.BACK_COVER))
    tags = MP4Tags()

    write_mp4_tags(metadata, tags, write_pictures=True)

    formats = [cover.imageformat for cover in tags["covr"]]
    assert formats == [MP4Cover.FORMAT_PNG, MP4Cover.FORMAT_JPEG]


def test_title_atom_set_then_removed() -> None:
    """A title sets the name atom; clearing it removes the atom, not an empty value."""

    metadata = AudioMetadata()
    metadata.title = "Test"
    tags = MP4Tags()

    write_mp4_tags(metadata, tags, write_pictures=False)
    assert tags["\xa9nam"] == ["Test"]

    metadata.merge_changes()
    metadata.title = None
    write_mp4_tags(metadata, tags, write_pictures=False)
    assert "\xa9nam" not in tags
