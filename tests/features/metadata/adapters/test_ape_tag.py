"""Tests for the APEv2 tag mapping."""

from __future__ import annotations

from mutagen.apev2 import BINARY, APEBinaryValue, APEv2, APEValue

from tagbridge.features.metadata.adapters.ape_tag import read_ape_tag, write_ape_tag
from tagbridge.features.metadata.domain.attached_picture import AttachedPicture, AttachedPictureType
from tagbridge.features.metadata.domain.audio_metadata import AudioMetadata


def test_read_text_items_and_cover_art() -> None:
    """Text items map by name; cover art items become pictures."""

    tag = APEv2()
    tag["Title"] = "Song"
    tag["Track"] = "ignored"
    tag["TRACKNUMBER"] = "5"
    tag["Catalog"] = "XYZ-1"
    tag["Cover Art (Front)"] = APEValue(b"front.jpg\0" + b"imagebytes", BINARY)
    metadata = AudioMetadata()

    read_ape_tag(tag, metadata)

    assert metadata.title == "Song"
    assert metadata.track_number == 5
    assert metadata.additional_metadata == {"Track": "ignored", "Catalog": "XYZ-1"}
    (picture,) = metadata.attached_pictures
    assert picture.image_data == b"imagebytes"
    assert picture.picture_type is AttachedPictureType.FRONT_COVER
    assert picture.description == "front.jpg"


def test_write_installs_merged_view() -> None:
    """Values are rendered as text; cleared values delete their item."""

    tag = APEv2()
    tag["Genre"] = "Rock"
    tag["Catalog"] = "XYZ-1"
    metadata = AudioMetadata()
    read_ape_tag(tag, metadata)
    metadata.merge_changes()

    metadata.genre = None
    metadata.compilation = True
    metadata.replay_gain_track_gain = 1.5
    metadata.additional_metadata = None
    write_ape_tag(metadata, tag, write_pictures=False)

    assert "Genre" not in tag
    assert "Catalog" not in tag
    assert str(tag["COMPILATION"]) == "1"
    assert str(tag["replaygain_track_gain"]) == "+1.50 dB"


def test_write_pictures_as_binary_items() -> None:
    """Front and back covers map to their items; other picture types are dropped."""

    metadata = AudioMetadata()
    metadata.attach_picture(AttachedPicture(b"front", AttachedPictureType.FRONT_COVER, "cover"))
    metadata.attach_picture(AttachedPicture(b"back", AttachedPictureType.BACK_COVER))
    metadata.attach_picture(AttachedPicture(b"band", AttachedPictureType.BAND))
    tag = APEv2()

    write_ape_tag(metadata, tag, write_pictures=True)

    front = tag["Cover Art (Front)"]
    assert isinstance(front, APEBinaryValue)
    assert front.value == b"cover\0front"
    assert tag["Cover Art (Back)"].value == b"\0back"
    assert len([key for key in tag.keys() if key.startswith("Cover Art")]) == 2
