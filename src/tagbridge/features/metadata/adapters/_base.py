"""
Summary: Generic mutagen-backed adapter driver that opens files, logs outcomes and merges on success.
Why: Each format only declares its mutagen file class and tag hooks; failures become InputOutputError here.
"""

from __future__ import annotations

import abc
from pathlib import Path
from typing import Any, BinaryIO, ClassVar, override

from mutagen import FileType, MutagenError

from tagbridge.platform.logging import logger

from ..domain.audio_metadata import AudioMetadata
from ..domain.audio_properties import AudioProperties
from ..domain.errors import AudioFileError, InputOutputError
from ..usecases.ports import AudioFormatAdapter

__all__ = ["BaseAudioAdapter", "log_failure"]

READ_ERROR_EVENT = "metadata.read.error"
WRITE_ERROR_EVENT = "metadata.write.error"


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def log_failure(event: str, path: Path, format_name: str, error: AudioFileError) -> AudioFileError:
    """Log ``error`` as a structured metadata event and hand it back for raising."""
    logger.error(
        "%s %s",
        error.description,
        error.failure_reason or "",
        extra={
            "metadata_event": event,
            "path": str(path),
            "format_name": format_name,
            "error_message": error.failure_reason,
        },
    )
    return error


class BaseAudioAdapter(AudioFormatAdapter, abc.ABC):
    """Base class for adapters backed by a mutagen file type."""

    # Format specific file class and initialization parameters
    FILE_CLASS: ClassVar[type[FileType] | None] = None
    FILE_INIT_PARAMS: ClassVar[dict[str, Any]] = {}
    # Name used in "not a valid X file" messages
    INVALID_FORMAT_NAME: ClassVar[str] = ""

    @classmethod
    def invalid_format_name(cls) -> str:
        return cls.INVALID_FORMAT_NAME or cls.format_name()

    def _load(self, path: Path, fileobj: BinaryIO, event: str) -> FileType:
        """Parse ``fileobj`` with the mutagen file class.

        Raises:
            InputOutputError: With reason INVALID_FORMAT when mutagen rejects the file.
        """
        if self.FILE_CLASS is None:
            raise NotImplementedError("FILE_CLASS must be defined in subclass")
        try:
            return self.FILE_CLASS(fileobj, **self.FILE_INIT_PARAMS)
        except MutagenError as exc:
            error = InputOutputError.invalid_format(path, self.invalid_format_name())
            raise log_failure(event, path, self.format_name(), error) from exc

    def _read_properties(self, audio: FileType) -> AudioProperties:
        info = audio.info
        total_frames = None
        for attribute in ("total_samples", "sample_count", "samples"):
            total_frames = _optional_int(getattr(info, attribute, None))
            if total_frames is not None:
                break
        duration = getattr(info, "length", None)
        return AudioProperties(
            format_name=self.format_name(),
            total_frames=total_frames,
            channels=_optional_int(getattr(info, "channels", None)),
            bits_per_channel=_optional_int(getattr(info, "bits_per_sample", None)),
            sample_rate=_optional_int(getattr(info, "sample_rate", None)),
            duration=float(duration) if duration is not None else None,
            bitrate=_optional_int(getattr(info, "bitrate", None)),
        )

    @abc.abstractmethod
    def _read_tags(self, audio: FileType, metadata: AudioMetadata, fileobj: BinaryIO) -> None:
        """Copy the tags of ``audio`` into ``metadata``."""

    @abc.abstractmethod
    def _write_tags(self, metadata: AudioMetadata, audio: FileType) -> None:
        """Install the merged view of ``metadata`` into the tags of ``audio``."""

    def _save_kwargs(self) -> dict[str, Any]:
        return {}

    def _save(self, metadata: AudioMetadata, audio: FileType, fileobj: BinaryIO) -> None:
        # Loading left the handle past the old tags; savers parse them again from the start.
        _ = fileobj.seek(0)
        audio.save(fileobj, **self._save_kwargs())

    def _ensure_tags(self, audio: FileType) -> Any:
        if audio.tags is None:
            audio.add_tags()
        return audio.tags

    @override
    def read(self, path: Path) -> AudioMetadata:
        """Read the tags and stream properties of ``path``.

        Raises:
            InputOutputError: OPEN_FOR_READING when the file cannot be opened,
                INVALID_FORMAT when mutagen rejects its structure.
        """
        path = Path(path)
        try:
            fileobj = open(path, "rb")
        except OSError as exc:
            error = InputOutputError.open_for_reading(path)
            raise log_failure(READ_ERROR_EVENT, path, self.format_name(), error) from exc

        with fileobj:
            audio = self._load(path, fileobj, READ_ERROR_EVENT)
            metadata = AudioMetadata(properties=self._read_properties(audio))
            self._read_tags(audio, metadata, fileobj)

        metadata.merge_changes()
        logger.info(
            "Read %s metadata from %s",
            self.format_name(),
            path,
            extra={"metadata_event": "metadata.read.success", "path": str(path), "format_name": self.format_name()},
        )
        return metadata

    @override
    def write(self, metadata: AudioMetadata, path: Path) -> None:
        """Write the merged view of ``metadata`` into ``path`` in place.

        Raises:
            InputOutputError: OPEN_FOR_WRITING, INVALID_FORMAT or SAVE_FAILED.
        """
        path = Path(path)
        try:
            fileobj = open(path, "rb+")
        except OSError as exc:
            error = InputOutputError.open_for_writing(path)
            raise log_failure(WRITE_ERROR_EVENT, path, self.format_name(), error) from exc

        with fileobj:
            audio = self._load(path, fileobj, WRITE_ERROR_EVENT)
            try:
                self._write_tags(metadata, audio)
                self._save(metadata, audio, fileobj)
            except (MutagenError, OSError, ValueError, TypeError) as exc:
                error = InputOutputError.save_failed(path)
                raise log_failure(WRITE_ERROR_EVENT, path, self.format_name(), error) from exc

        changed = len(metadata.changed_keys()) + int(metadata.has_picture_changes)
        metadata.merge_changes()
        logger.info(
            "Wrote %s metadata to %s",
            self.format_name(),
            path,
            extra={
                "metadata_event": "metadata.write.success",
                "path": str(path),
                "format_name": self.format_name(),
                "changed_keys": changed,
            },
        )
