"""
Summary: Concrete format adapters binding each container to its mutagen file class and tag mapping.
Why: The driver in ``_base`` owns I/O and errors; these classes only declare what differs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO, ClassVar, override

from mutagen import FileType
from mutagen.aiff import AIFF
from mutagen.apev2 import APEv2, error as APEError
from mutagen.dsdiff import DSDIFF
from mutagen.dsf import DSF
from mutagen.flac import FLAC
from mutagen.id3 import ID3v1SaveOptions
from mutagen.monkeysaudio import MonkeysAudio
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4
from mutagen.musepack import Musepack
from mutagen.oggflac import OggFLAC
from mutagen.oggopus import OggOpus
from mutagen.oggspeex import OggSpeex
from mutagen.oggvorbis import OggVorbis
from mutagen.optimfrog import OptimFROG
from mutagen.trueaudio import TrueAudio
from mutagen.wave import WAVE
from mutagen.wavpack import WavPack

from tagbridge.platform.logging import logger

from ..domain.audio_metadata import AudioMetadata
from ..domain.errors import UnsupportedOperationError
from ._base import BaseAudioAdapter
from .ape_tag import read_ape_tag, write_ape_tag
from .id3v2 import read_id3_tags, write_id3_tags
from .modules import ExtendedModule, ImpulseTrackerModule, ProTrackerModule, ScreamTracker3Module
from .mp4_tag import read_mp4_tags, write_mp4_tags
from .pictures import ordered_pictures
from .xiph_comment import (
    from_flac_picture,
    read_xiph_comment,
    remove_picture_fields,
    to_flac_picture,
    write_xiph_comment,
)

__all__ = [
    "XiphCommentAdapter",
    "FLACAdapter",
    "OggVorbisAdapter",
    "OggFLACAdapter",
    "OggOpusAdapter",
    "OggSpeexAdapter",
    "MP4Adapter",
    "ID3Adapter",
    "MP3Adapter",
    "WAVEAdapter",
    "AIFFAdapter",
    "DSFAdapter",
    "DSDIFFAdapter",
    "TrueAudioAdapter",
    "APEAdapter",
    "MonkeysAudioAdapter",
    "WavPackAdapter",
    "MusepackAdapter",
    "OptimFROGAdapter",
    "ModuleAdapter",
    "ProTrackerModuleAdapter",
    "ImpulseTrackerModuleAdapter",
    "ScreamTracker3ModuleAdapter",
    "ExtendedModuleAdapter",
]


# region Xiph comment hosts


class XiphCommentAdapter(BaseAudioAdapter):
    """Formats whose tags are a Vorbis comment block."""

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        if audio.tags is not None:
            read_xiph_comment(audio.tags, metadata)

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        write_xiph_comment(
            metadata,
            self._ensure_tags(audio),
            write_pictures=self.options.write_attached_pictures,
        )


class FLACAdapter(XiphCommentAdapter):
    """FLAC files; pictures live in PICTURE metadata blocks."""

    FILE_CLASS = FLAC
    FORMAT_NAME = "FLAC"
    EXTENSIONS = frozenset({"flac"})
    MIME_TYPES = frozenset({"audio/flac"})

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        super()._read_tags(audio, metadata, fileobj)
        for block in audio.pictures:
            metadata.attach_picture(from_flac_picture(block))

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        comment = self._ensure_tags(audio)
        write_xiph_comment(metadata, comment, write_pictures=False)
        if not self.options.write_attached_pictures:
            return
        remove_picture_fields(comment)
        audio.clear_pictures()
        for picture in ordered_pictures(metadata.attached_pictures):
            audio.add_picture(to_flac_picture(picture))


class OggVorbisAdapter(XiphCommentAdapter):
    FILE_CLASS = OggVorbis
    FORMAT_NAME = "Ogg Vorbis"
    EXTENSIONS = frozenset({"ogg", "oga"})
    MIME_TYPES = frozenset({"audio/ogg; codecs=vorbis"})


class OggFLACAdapter(XiphCommentAdapter):
    FILE_CLASS = OggFLAC
    FORMAT_NAME = "Ogg FLAC"
    EXTENSIONS = frozenset({"oga"})
    MIME_TYPES = frozenset({"audio/ogg; codecs=flac"})


class OggOpusAdapter(XiphCommentAdapter):
    FILE_CLASS = OggOpus
    FORMAT_NAME = "Ogg Opus"
    EXTENSIONS = frozenset({"opus"})
    MIME_TYPES = frozenset({"audio/ogg; codecs=opus"})


class OggSpeexAdapter(XiphCommentAdapter):
    FILE_CLASS = OggSpeex
    FORMAT_NAME = "Ogg Speex"
    EXTENSIONS = frozenset({"spx"})
    MIME_TYPES = frozenset({"audio/ogg; codecs=speex"})


# endregion
# region MP4


class MP4Adapter(BaseAudioAdapter):
    FILE_CLASS = MP4
    FORMAT_NAME = "MP4"
    INVALID_FORMAT_NAME = "MPEG-4"
    EXTENSIONS = frozenset({"m4a", "m4r", "mp4"})
    MIME_TYPES = frozenset({"audio/mpeg-4"})

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        if audio.tags is not None:
            read_mp4_tags(audio.tags, metadata)

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        write_mp4_tags(
            metadata,
            self._ensure_tags(audio),
            write_pictures=self.options.write_attached_pictures,
        )


# endregion
# region ID3v2 hosts


class ID3Adapter(BaseAudioAdapter):
    """Formats carrying a mandatory ID3v2 tag."""

    # Whether the mutagen save call accepts the ``v1`` option
    SUPPORTS_ID3V1: ClassVar[bool] = False

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        if audio.tags is not None:
            read_id3_tags(audio.tags, metadata)

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        tags = self._ensure_tags(audio)
        write_id3_tags(metadata, tags, write_pictures=self.options.write_attached_pictures)
        if self.options.id3v2_version == 3:
            # mutagen only converts v2.4 frames (TDRC, TSOP...) when asked to.
            tags.update_to_v23()

    @override
    def _save_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "v2_version": self.options.id3v2_version,
            "v23_sep": self.options.id3v23_separator,
        }
        if self.SUPPORTS_ID3V1:
            # Update an existing ID3v1 tag, never create one.
            kwargs["v1"] = ID3v1SaveOptions.UPDATE
        return kwargs


def _load_ape_tag(fileobj: BinaryIO) -> APEv2 | None:
    _ = fileobj.seek(0)
    try:
        return APEv2(fileobj)
    except APEError as exc:
        logger.debug("No usable APE tag: %s", exc)
        return None


def _has_id3v1(fileobj: BinaryIO) -> bool:
    _ = fileobj.seek(0, 2)
    if fileobj.tell() < 131:
        return False
    _ = fileobj.seek(-131, 2)
    window = fileobj.read(11)
    # "APETAGEX" also contains "TAG".
    return window[3:6] == b"TAG" and window[:8] != b"APETAGEX"


class MP3Adapter(ID3Adapter):
    """MPEG layer III files; an existing APE tag is read first and kept in sync."""

    FILE_CLASS = MP3
    FORMAT_NAME = "MP3"
    INVALID_FORMAT_NAME = "MPEG"
    EXTENSIONS = frozenset({"mp3"})
    MIME_TYPES = frozenset({"audio/mpeg"})
    SUPPORTS_ID3V1 = True

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        ape = _load_ape_tag(fileobj)
        if ape is not None:
            read_ape_tag(ape, metadata)
        super()._read_tags(audio, metadata, fileobj)

    @override
    def _save(self, metadata: AudioMetadata, audio: FileType, fileobj: BinaryIO) -> None:
        ape = _load_ape_tag(fileobj)
        if ape is None:
            super()._save(metadata, audio, fileobj)
            return

        # APEv2.save truncates whatever follows the APE tag, ID3v1 included.
        had_id3v1 = _has_id3v1(fileobj)
        write_ape_tag(metadata, ape, write_pictures=self.options.write_attached_pictures)
        _ = fileobj.seek(0)
        ape.save(fileobj)

        kwargs = self._save_kwargs()
        if had_id3v1:
            kwargs["v1"] = ID3v1SaveOptions.CREATE
        _ = fileobj.seek(0)
        audio.save(fileobj, **kwargs)


class WAVEAdapter(ID3Adapter):
    FILE_CLASS = WAVE
    FORMAT_NAME = "WAVE"
    EXTENSIONS = frozenset({"wav", "wave"})
    MIME_TYPES = frozenset({"audio/wave"})
    SUPPORTS_ID3V1 = True


class AIFFAdapter(ID3Adapter):
    FILE_CLASS = AIFF
    FORMAT_NAME = "AIFF"
    EXTENSIONS = frozenset({"aiff", "aif"})
    MIME_TYPES = frozenset({"audio/aiff"})


class DSFAdapter(ID3Adapter):
    FILE_CLASS = DSF
    FORMAT_NAME = "DSF"
    EXTENSIONS = frozenset({"dsf"})
    MIME_TYPES = frozenset({"audio/dsf"})


class DSDIFFAdapter(ID3Adapter):
    FILE_CLASS = DSDIFF
    FORMAT_NAME = "DSDIFF"
    EXTENSIONS = frozenset({"dff"})
    MIME_TYPES = frozenset({"audio/dff"})


class TrueAudioAdapter(ID3Adapter):
    FILE_CLASS = TrueAudio
    FORMAT_NAME = "True Audio"
    EXTENSIONS = frozenset({"tta"})
    MIME_TYPES = frozenset({"audio/x-tta"})
    SUPPORTS_ID3V1 = True


# endregion
# region APE hosts


class APEAdapter(BaseAudioAdapter):
    """Formats carrying a mandatory APEv2 tag."""

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        if audio.tags is not None:
            read_ape_tag(audio.tags, metadata)

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        write_ape_tag(
            metadata,
            self._ensure_tags(audio),
            write_pictures=self.options.write_attached_pictures,
        )


class MonkeysAudioAdapter(APEAdapter):
    FILE_CLASS = MonkeysAudio
    FORMAT_NAME = "Monkey's Audio"
    EXTENSIONS = frozenset({"ape"})
    MIME_TYPES = frozenset({"audio/monkeys-audio", "audio/x-monkeys-audio"})


class WavPackAdapter(APEAdapter):
    FILE_CLASS = WavPack
    FORMAT_NAME = "WavPack"
    EXTENSIONS = frozenset({"wv"})
    MIME_TYPES = frozenset({"audio/wavpack", "audio/x-wavpack"})


class MusepackAdapter(APEAdapter):
    FILE_CLASS = Musepack
    FORMAT_NAME = "Musepack"
    EXTENSIONS = frozenset({"mpc"})
    MIME_TYPES = frozenset({"audio/musepack", "audio/x-musepack"})


class OptimFROGAdapter(APEAdapter):
    FILE_CLASS = OptimFROG
    FORMAT_NAME = "OptimFROG"
    EXTENSIONS = frozenset({"ofr", "ofs"})
    MIME_TYPES = frozenset({"audio/x-optimfrog"})


# endregion
# region Tracker modules


class ModuleAdapter(BaseAudioAdapter):
    """Read-only tracker modules; writing always fails without touching the file."""

    @override
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        title = getattr(audio, "title", None)
        if title is not None:
            metadata.title = title

    @override
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        raise NotImplementedError("tracker modules are read-only")

    @override
    def write(self, metadata: AudioMetadata, path: Path) -> None:
        """Always raises :class:`UnsupportedOperationError`."""
        path = Path(path)
        error = UnsupportedOperationError.writing_not_supported(path, self.format_name())
        logger.warning(
            "%s",
            error.description,
            extra={
                "metadata_event": "metadata.write.unsupported",
                "path": str(path),
                "format_name": self.format_name(),
                "error_message": error.failure_reason,
            },
        )
        raise error


class ProTrackerModuleAdapter(ModuleAdapter):
    FILE_CLASS = ProTrackerModule
    FORMAT_NAME = "MOD"
    INVALID_FORMAT_NAME = "ProTracker module"
    EXTENSIONS = frozenset({"mod"})
    MIME_TYPES = frozenset({"audio/mod", "audio/x-mod"})


class ImpulseTrackerModuleAdapter(ModuleAdapter):
    FILE_CLASS = ImpulseTrackerModule
    FORMAT_NAME = "IT"
    INVALID_FORMAT_NAME = "Impulse Tracker module"
    EXTENSIONS = frozenset({"it"})
    MIME_TYPES = frozenset({"audio/it"})


class ScreamTracker3ModuleAdapter(ModuleAdapter):
    FILE_CLASS = ScreamTracker3Module
    FORMAT_NAME = "S3M"
    INVALID_FORMAT_NAME = "ScreamTracker 3 module"
    EXTENSIONS = frozenset({"s3m"})
    MIME_TYPES = frozenset({"audio/s3m"})


class ExtendedModuleAdapter(ModuleAdapter):
    FILE_CLASS = ExtendedModule
    FORMAT_NAME = "XM"
    INVALID_FORMAT_NAME = "extended module"
    EXTENSIONS = frozenset({"xm"})
    MIME_TYPES = frozenset({"audio/xm"})


# endregion
