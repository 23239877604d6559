"""
Summary: Audio file facade pairing a path with its metadata and the adapter that reads it.
Why: Let callers read and write tags without choosing a format adapter themselves.
"""

from __future__ import annotations

from functools import cache
from pathlib import Path, PurePath
from urllib.parse import unquote, urlsplit

from tagbridge.platform.logging import logger

from ..domain.audio_metadata import AudioMetadata
from ..domain.audio_properties import AudioProperties
from ..domain.errors import InputOutputError, IOFailure, UnsupportedFormatError
from .defaults import default_registry
from .ports import AudioFormatAdapter, WriteOptions
from .registry import HandlerRegistry

__all__ = ["AudioFile", "read_metadata", "write_metadata", "path_of"]


@cache
def _shared_registry() -> HandlerRegistry:
    return default_registry()


def path_of(location: str | PurePath) -> Path:
    """Turn a path or ``file`` URL into a filesystem path."""
    if isinstance(location, PurePath):
        return Path(location)
    parts = urlsplit(location)
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    return Path(location)


class AudioFile:
    """An audio file on disk together with its metadata.

    ``AudioFile.read`` tries every adapter claiming the file's extension in
    dispatch order; a candidate rejecting the structure hands over to the
    next one, any other failure propagates.
    """

    def __init__(
        self,
        location: str | PurePath,
        registry: HandlerRegistry | None = None,
        options: WriteOptions | None = None,
    ) -> None:
        self._location: str | PurePath = location
        self._path: Path = path_of(location)
        self._registry: HandlerRegistry = registry if registry is not None else _shared_registry()
        self._options: WriteOptions | None = options
        self._metadata: AudioMetadata = AudioMetadata()
        self._adapter: AudioFormatAdapter | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self._path)!r})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def metadata(self) -> AudioMetadata:
        return self._metadata

    @metadata.setter
    def metadata(self, metadata: AudioMetadata) -> None:
        self._metadata = metadata

    @property
    def properties(self) -> AudioProperties:
        return self._metadata.properties

    @property
    def adapter(self) -> AudioFormatAdapter | None:
        """The adapter that read the file, or ``None`` before a read."""
        return self._adapter

    @classmethod
    def read(
        cls,
        location: str | PurePath,
        registry: HandlerRegistry | None = None,
        options: WriteOptions | None = None,
    ) -> AudioFile:
        """Open ``location`` and read its metadata.

        Raises:
            UnsupportedFormatError: When no registered adapter claims the file.
            InputOutputError: When the file cannot be read by any candidate.
        """
        audio_file = cls(location, registry, options)
        audio_file.read_metadata()
        return audio_file

    def read_metadata(self) -> AudioMetadata:
        """(Re)read the metadata from disk, replacing any pending edits."""
        candidates = self._registry.candidates(self._location)
        if not candidates:
            raise UnsupportedFormatError.for_path(self._path)

        *fallbacks, final = candidates
        for adapter_class in fallbacks:
            try:
                return self._read_with(adapter_class)
            except InputOutputError as exc:
                if exc.reason is not IOFailure.INVALID_FORMAT:
                    raise
                logger.debug("%s rejected %s, trying next adapter", adapter_class.format_name(), self._path)
        # The last candidate has no fallback; its rejection reaches the caller.
        return self._read_with(final)

    def _read_with(self, adapter_class: type[AudioFormatAdapter]) -> AudioMetadata:
        adapter = adapter_class(self._options)
        metadata = adapter.read(self._path)
        self._metadata = metadata
        self._adapter = adapter
        return metadata

    def write(self) -> None:
        """Write the metadata back with the adapter that read it.

        Raises:
            UnsupportedFormatError: When the file was never read and no adapter claims it.
        """
        adapter = self._adapter
        if adapter is None:
            adapter_class = self._registry.resolve(self._location)
            if adapter_class is None:
                raise UnsupportedFormatError.for_path(self._path)
            adapter = adapter_class(self._options)
            self._adapter = adapter
        adapter.write(self._metadata, self._path)


def read_metadata(location: str | PurePath, registry: HandlerRegistry | None = None) -> AudioMetadata:
    """Read the metadata of ``location`` using the default registry unless one is given."""
    return AudioFile.read(location, registry).metadata


def write_metadata(
    metadata: AudioMetadata,
    location: str | PurePath,
    registry: HandlerRegistry | None = None,
) -> None:
    """Write ``metadata`` to ``location`` through the first adapter claiming it."""
    audio_file = AudioFile(location, registry)
    audio_file.metadata = metadata
    audio_file.write()
