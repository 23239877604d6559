"""Shared fixtures building minimal audio files on disk."""

from __future__ import annotations

import struct
from io import BytesIO
from pathlib import Path

import pytest
from mutagen.ogg import OggPage
from PIL import Image

# Last-block flag, STREAMINFO type, 34 byte body.
FLAC_STREAMINFO_HEADER = b"\x80\x00\x00\x22"
# 4096 sample blocks, 44.1 kHz, 2 channels, 16 bits, no samples, zero MD5.
FLAC_STREAMINFO = (
    b"\x10\x00\x10\x00"
    + b"\x00" * 6
    + b"\x0a\xc4\x42\xf0"
    + b"\x00" * 4
    + b"\x00" * 16
)


@pytest.fixture
def flac_path(tmp_path: Path) -> Path:
    """An empty FLAC stream holding only its STREAMINFO block."""

    path = tmp_path / "track.flac"
    _ = path.write_bytes(b"fLaC" + FLAC_STREAMINFO_HEADER + FLAC_STREAMINFO)
    return path


@pytest.fixture
def png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (3, 2), color=(0, 128, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


# MPEG-1 layer III, 128 kbps, 44.1 kHz, no padding, stereo.
MP3_FRAME_HEADER = b"\xff\xfb\x90\x00"
MP3_FRAME_LENGTH = 144 * 128000 // 44100


@pytest.fixture
def mp3_path(tmp_path: Path) -> Path:
    """Ten silent MPEG frames without any tag."""

    frame = MP3_FRAME_HEADER + b"\x00" * (MP3_FRAME_LENGTH - len(MP3_FRAME_HEADER))
    path = tmp_path / "track.mp3"
    _ = path.write_bytes(frame * 10)
    return path


@pytest.fixture
def wave_path(tmp_path: Path) -> Path:
    """PCM stereo 16 bit at 44.1 kHz with 100 silent frames."""

    samples = b"\x00" * 400
    fmt = struct.pack("<HHLLHH", 1, 2, 44100, 176400, 4, 16)
    body = (
        b"WAVE"
        + b"fmt " + struct.pack("<I", len(fmt)) + fmt
        + b"data" + struct.pack("<I", len(samples)) + samples
    )
    path = tmp_path / "track.wav"
    _ = path.write_bytes(b"RIFF" + struct.pack("<I", len(body)) + body)
    return path


def _atom(name: bytes, data: bytes) -> bytes:
    return struct.pack(">I4s", len(data) + 8, name) + data


@pytest.fixture
def mp4_path(tmp_path: Path) -> Path:
    """An M4A with a movie header (two seconds) and no tracks or tags."""

    ftyp = _atom(b"ftyp", b"M4A " + struct.pack(">I", 0) + b"M4A mp42isom")
    # Version 0: creation and modification times, timescale, duration, rest unused.
    mvhd = _atom(b"mvhd", b"\x00" * 4 + b"\x00" * 8 + struct.pack(">LL", 1000, 2000) + b"\x00" * 80)
    path = tmp_path / "track.m4a"
    _ = path.write_bytes(ftyp + _atom(b"moov", mvhd) + _atom(b"mdat", b"\x00" * 8))
    return path


def _vorbis_page(sequence: int, packets: list[bytes], position: int) -> OggPage:
    page = OggPage()
    page.serial = 1
    page.sequence = sequence
    page.position = position
    page.packets = packets
    return page


@pytest.fixture
def ogg_vorbis_path(tmp_path: Path) -> Path:
    """An Ogg Vorbis stream of one second with an empty comment header."""

    # Version, channels, rate, max/nominal/min bitrate, block sizes, framing.
    identification = b"\x01vorbis" + struct.pack("<IBI3iBB", 0, 2, 44100, 0, 128000, 0, 0xB8, 1)
    vendor = b"tagbridge"
    comment = b"\x03vorbis" + struct.pack("<I", len(vendor)) + vendor + struct.pack("<I", 0) + b"\x01"
    setup = b"\x05vorbis" + b"\x00" * 16

    first = _vorbis_page(0, [identification], 0)
    first.first = True
    headers = _vorbis_page(1, [comment, setup], 0)
    audio = _vorbis_page(2, [b"\x00" * 16], 44100)
    audio.last = True

    path = tmp_path / "track.ogg"
    _ = path.write_bytes(first.write() + headers.write() + audio.write())
    return path


@pytest.fixture
def wavpack_path(tmp_path: Path) -> Path:
    """One WavPack block of 44100 stereo 16 bit samples, untagged."""

    payload = b"\x00" * 32
    # 44.1 kHz rate index in bits 23-26, 2 bytes per sample.
    flags = (9 << 23) | 1
    header = b"wvpk" + struct.pack(
        "<IHBBIIIII", 24 + len(payload), 0x410, 0, 0, 44100, 0, 44100, flags, 0
    )
    path = tmp_path / "track.wv"
    _ = path.write_bytes(header + payload)
    return path
