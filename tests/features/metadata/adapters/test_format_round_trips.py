"""
Summary: On-disk write and re-read tests for every tag container family.
Why: Savers re-parse the file from the handle position, so each container needs a real file round trip.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from mutagen.apev2 import APENoHeaderError, APEv2
from mutagen.id3 import ID3, TIT2, Encoding, ID3v1SaveOptions
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.oggvorbis import OggVorbis
from mutagen.wave import WAVE

from tagbridge.features.metadata.adapters._base import BaseAudioAdapter
from tagbridge.features.metadata.adapters.formats import (
    MP3Adapter,
    MP4Adapter,
    OggVorbisAdapter,
    WAVEAdapter,
    WavPackAdapter,
)
from tagbridge.features.metadata.domain.audio_metadata import AudioMetadata
from tagbridge.features.metadata.usecases.ports import WriteOptions

ID3V24_HEADER = b"ID3\x04\x00"
ID3V1_SIZE = 128


def _write_title(adapter: BaseAudioAdapter, path: Path, title: str) -> AudioMetadata:
    metadata = adapter.read(path)
    metadata.title = title
    adapter.write(metadata, path)
    return metadata


def _id3v1_title(data: bytes) -> bytes | None:
    tag = data[-ID3V1_SIZE:]
    if not tag.startswith(b"TAG"):
        return None
    return tag[3:33].rstrip(b"\x00")


def _add_id3v1(path: Path, title: str) -> None:
    tags = ID3()
    tags.add(TIT2(encoding=Encoding.UTF8, text=[title]))
    tags.save(path, v1=ID3v1SaveOptions.CREATE)


def _add_ape_tag(path: Path, title: str) -> None:
    tag = APEv2()
    tag["Title"] = title
    tag.save(path)


# region MP3


def test_mp3_write_then_read_back(mp3_path: Path) -> None:
    """A first write prepends exactly one ID3v2 tag that reads back."""

    adapter = MP3Adapter(WriteOptions())
    metadata = adapter.read(mp3_path)
    metadata.title = "Song"
    metadata.artist = "Artist"
    metadata.track_number = 4
    adapter.write(metadata, mp3_path)

    data = mp3_path.read_bytes()
    assert data.startswith(ID3V24_HEADER)
    assert data.count(ID3V24_HEADER) == 1
    reread = adapter.read(mp3_path)
    assert (reread.title, reread.artist, reread.track_number) == ("Song", "Artist", 4)
    assert reread.properties.sample_rate == 44100
    assert MP3(mp3_path).tags["TIT2"].text == ["Song"]


def test_mp3_rewrite_replaces_existing_tag(mp3_path: Path) -> None:
    """Writing a tagged file reuses the tag space instead of stacking a new tag."""

    adapter = MP3Adapter(WriteOptions())
    _ = _write_title(adapter, mp3_path, "Song")
    size = mp3_path.stat().st_size

    _ = _write_title(adapter, mp3_path, "Tune")

    data = mp3_path.read_bytes()
    assert data.count(ID3V24_HEADER) == 1
    assert len(data) == size
    assert adapter.read(mp3_path).title == "Tune"


def test_mp3_write_adds_neither_id3v1_nor_ape(mp3_path: Path) -> None:
    """ID3v1 and APE tags are only written when the file already has them."""

    _ = _write_title(MP3Adapter(WriteOptions()), mp3_path, "Song")

    assert _id3v1_title(mp3_path.read_bytes()) is None
    with pytest.raises(APENoHeaderError):
        _ = APEv2(mp3_path)


def test_mp3_updates_existing_id3v1(mp3_path: Path) -> None:
    _add_id3v1(mp3_path, "Old")

    adapter = MP3Adapter(WriteOptions())
    assert adapter.read(mp3_path).title == "Old"
    _ = _write_title(adapter, mp3_path, "New")

    data = mp3_path.read_bytes()
    assert _id3v1_title(data) == b"New"
    assert data.count(ID3V24_HEADER) == 1


def test_mp3_updates_existing_ape_tag(mp3_path: Path) -> None:
    _add_ape_tag(mp3_path, "Old")

    adapter = MP3Adapter(WriteOptions())
    assert adapter.read(mp3_path).title == "Old"
    _ = _write_title(adapter, mp3_path, "New")

    assert str(APEv2(mp3_path)["Title"]) == "New"
    assert MP3(mp3_path).tags["TIT2"].text == ["New"]
    assert _id3v1_title(mp3_path.read_bytes()) is None


def test_mp3_keeps_id3v1_behind_ape_tag(mp3_path: Path) -> None:
    """Saving the APE tag must not drop the ID3v1 tag that follows it."""

    _add_ape_tag(mp3_path, "Old")
    _add_id3v1(mp3_path, "Old")

    _ = _write_title(MP3Adapter(WriteOptions()), mp3_path, "New")

    data = mp3_path.read_bytes()
    assert _id3v1_title(data) == b"New"
    assert str(APEv2(mp3_path)["Title"]) == "New"
    assert data.count(ID3V24_HEADER) == 1


def test_mp3_id3v23_output(mp3_path: Path) -> None:
    """Version 3 output converts the recording date and reads back unchanged."""

    adapter = MP3Adapter(WriteOptions(id3v2_version=3))
    metadata = adapter.read(mp3_path)
    metadata.title = "Song"
    metadata.release_date = "2024-05-01"
    adapter.write(metadata, mp3_path)

    data = mp3_path.read_bytes()
    assert data[:4] == b"ID3\x03"
    assert data.count(b"ID3\x03\x00") == 1
    reread = adapter.read(mp3_path)
    assert (reread.title, reread.release_date) == ("Song", "2024-05-01")


# endregion
# region Other containers


def test_wave_write_then_read_back(wave_path: Path) -> None:
    adapter = WAVEAdapter(WriteOptions())
    _ = _write_title(adapter, wave_path, "Song")
    _ = _write_title(adapter, wave_path, "Tune")

    reread = adapter.read(wave_path)
    assert reread.title == "Tune"
    assert (reread.properties.channels, reread.properties.sample_rate) == (2, 44100)
    assert WAVE(wave_path).tags["TIT2"].text == ["Tune"]
    assert wave_path.read_bytes().count(b"ID3") == 1


def test_mp4_write_then_read_back(mp4_path: Path) -> None:
    adapter = MP4Adapter(WriteOptions())
    metadata = adapter.read(mp4_path)
    assert metadata.values() == {}
    metadata.title = "Song"
    metadata.track_number = 2
    metadata.track_total = 9
    adapter.write(metadata, mp4_path)
    _ = _write_title(adapter, mp4_path, "Tune")

    reread = adapter.read(mp4_path)
    assert reread.title == "Tune"
    assert (reread.track_number, reread.track_total) == (2, 9)
    assert reread.properties.duration == 2.0
    assert MP4(mp4_path).tags["\xa9nam"] == ["Tune"]


def test_ogg_vorbis_write_then_read_back(ogg_vorbis_path: Path) -> None:
    adapter = OggVorbisAdapter(WriteOptions())
    metadata = adapter.read(ogg_vorbis_path)
    metadata.title = "Song"
    metadata.additional_metadata = {"MOOD": "calm"}
    adapter.write(metadata, ogg_vorbis_path)
    _ = _write_title(adapter, ogg_vorbis_path, "Tune")

    reread = adapter.read(ogg_vorbis_path)
    assert reread.title == "Tune"
    assert reread.additional_metadata == {"MOOD": "calm"}
    assert reread.properties.duration == 1.0
    assert OggVorbis(ogg_vorbis_path).tags["TITLE"] == ["Tune"]


def test_wavpack_write_then_read_back(wavpack_path: Path) -> None:
    """APE hosts gain a tag at the end of the file on first write."""

    adapter = WavPackAdapter(WriteOptions())
    _ = _write_title(adapter, wavpack_path, "Song")
    _ = _write_title(adapter, wavpack_path, "Tune")

    reread = adapter.read(wavpack_path)
    assert reread.title == "Tune"
    assert reread.properties.sample_rate == 44100
    assert reread.properties.bits_per_channel == 16
    assert wavpack_path.read_bytes().count(b"APETAGEX") == 2
    assert str(APEv2(wavpack_path)["Title"]) == "Tune"


# endregion
