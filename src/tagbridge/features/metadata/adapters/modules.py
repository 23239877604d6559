"""
Summary: mutagen-compatible file types reading the title and channel count of MOD, IT, S3M and XM files.
Why: mutagen ships no tracker support, and module titles live at fixed header offsets.
"""

from __future__ import annotations

import re
import struct
from typing import ClassVar

from mutagen import FileType, MutagenError, StreamInfo
from mutagen._util import loadfile

__all__ = [
    "ModuleHeaderError",
    "ModuleInfo",
    "TrackerModule",
    "ProTrackerModule",
    "ImpulseTrackerModule",
    "ScreamTracker3Module",
    "ExtendedModule",
]

_MOD_SIGNATURE_OFFSET = 1080
_MOD_FIXED_CHANNELS: dict[bytes, int] = {
    b"M.K.": 4,
    b"M!K!": 4,
    b"M&K!": 4,
    b"N.T.": 4,
    b"FLT4": 4,
    b"FLT8": 8,
    b"CD81": 8,
    b"OKTA": 8,
    b"OCTA": 8,
}
_MOD_DIGIT_CHN = re.compile(rb"^(\d)CHN$")
_MOD_DIGITS_CH = re.compile(rb"^(\d\d)C[HN]$")
_XM_SIGNATURE = b"Extended Module: "


class ModuleHeaderError(MutagenError):
    """The header does not match the expected tracker layout."""


def _decode_title(raw: bytes) -> str | None:
    title = raw.split(b"\0", 1)[0].decode("latin-1").strip()
    return title or None


class ModuleInfo(StreamInfo):
    """ModuleInfo()

    Attributes:
        channels (`int` or `None`): Channel count stated by the header
        length (`None`): Modules carry no duration in their header
    """

    length = None

    def __init__(self, format_name: str, channels: int | None) -> None:
        self.format_name = format_name
        self.channels = channels

    def pprint(self) -> str:
        return f"{self.format_name}, {self.channels or '?'} channels"


class TrackerModule(FileType):
    """Base for header-only tracker module file types.

    Attributes:
        info (`ModuleInfo`)
        title (`str` or `None`): Song title from the header
        tags: `None`
    """

    FORMAT_NAME: ClassVar[str] = "Module"
    HEADER_SIZE: ClassVar[int] = 0

    title: str | None = None

    @loadfile()
    def load(self, filething) -> None:
        try:
            header = filething.fileobj.read(self.HEADER_SIZE)
        except OSError as exc:
            raise ModuleHeaderError(exc) from exc
        if len(header) < self.HEADER_SIZE:
            raise ModuleHeaderError("file too short for a %s header" % self.FORMAT_NAME)
        self.title, channels = self._parse_header(header)
        self.info = ModuleInfo(self.FORMAT_NAME, channels)
        self.tags = None

    def _parse_header(self, header: bytes) -> tuple[str | None, int | None]:
        raise NotImplementedError

    def add_tags(self) -> None:
        raise ModuleHeaderError("doesn't support tags")


class ProTrackerModule(TrackerModule):
    """ProTracker style 31-instrument MOD file."""

    FORMAT_NAME = "MOD"
    HEADER_SIZE = _MOD_SIGNATURE_OFFSET + 4
    _mimes = ["audio/mod", "audio/x-mod"]

    def _parse_header(self, header: bytes) -> tuple[str | None, int | None]:
        signature = header[_MOD_SIGNATURE_OFFSET:_MOD_SIGNATURE_OFFSET + 4]
        channels = _MOD_FIXED_CHANNELS.get(signature)
        if channels is None:
            match = _MOD_DIGIT_CHN.match(signature) or _MOD_DIGITS_CH.match(signature)
            if match is None:
                raise ModuleHeaderError("unknown MOD signature %r" % signature)
            channels = int(match.group(1))
        return _decode_title(header[:20]), channels


class ScreamTracker3Module(TrackerModule):
    """ScreamTracker 3 S3M file."""

    FORMAT_NAME = "S3M"
    HEADER_SIZE = 0x60
    _mimes = ["audio/s3m", "audio/x-s3m"]

    def _parse_header(self, header: bytes) -> tuple[str | None, int | None]:
        if header[0x2C:0x30] != b"SCRM":
            raise ModuleHeaderError("missing SCRM signature")
        # Channel settings: values >= 16 are unused, bit 7 marks a disabled channel.
        channels = sum(1 for setting in header[0x40:0x60] if setting < 16)
        return _decode_title(header[:28]), channels


class ImpulseTrackerModule(TrackerModule):
    """Impulse Tracker IT file."""

    FORMAT_NAME = "IT"
    HEADER_SIZE = 0xC0
    _mimes = ["audio/it", "audio/x-it"]

    def _parse_header(self, header: bytes) -> tuple[str | None, int | None]:
        if header[:4] != b"IMPM":
            raise ModuleHeaderError("missing IMPM signature")
        # Channel pan table: bit 7 set marks a disabled channel.
        channels = sum(1 for pan in header[0x40:0x80] if pan < 128)
        return _decode_title(header[4:30]), channels


class ExtendedModule(TrackerModule):
    """FastTracker 2 XM file."""

    FORMAT_NAME = "XM"
    HEADER_SIZE = 70
    _mimes = ["audio/xm", "audio/x-xm"]

    def _parse_header(self, header: bytes) -> tuple[str | None, int | None]:
        if not header.startswith(_XM_SIGNATURE):
            raise ModuleHeaderError("missing XM signature")
        (channels,) = struct.unpack_from("<H", header, 68)
        return _decode_title(header[17:37]), channels
