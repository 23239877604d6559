"""
Summary: Ports defining the format adapter contract.
Why: Let the registry and facade dispatch to adapters without knowing any tag library.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from ..domain.audio_metadata import AudioMetadata


@dataclass(frozen=True, slots=True)
class WriteOptions:
    """Options controlling how adapters serialize metadata."""

    write_attached_pictures: bool = True
    id3v2_version: int = 4
    id3v23_separator: str = "/"

    @classmethod
    def from_settings(cls) -> WriteOptions:
        """Build options from the loaded configuration."""
        from tagbridge.config import settings

        return cls(
            write_attached_pictures=settings.WRITE_ATTACHED_PICTURES,
            id3v2_version=settings.ID3V2_VERSION,
            id3v23_separator=settings.ID3V23_SEPARATOR,
        )


class AudioFormatAdapter(abc.ABC):
    """Translate between one audio format and :class:`AudioMetadata`.

    Subclasses declare the extensions and MIME types they handle as class
    attributes; the registry reads them without instantiating the adapter.
    """

    FORMAT_NAME: ClassVar[str] = ""
    EXTENSIONS: ClassVar[frozenset[str]] = frozenset()
    MIME_TYPES: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, options: WriteOptions | None = None) -> None:
        self.options: WriteOptions = options or WriteOptions.from_settings()

    @classmethod
    def format_name(cls) -> str:
        return cls.FORMAT_NAME or cls.__name__

    @classmethod
    def supported_extensions(cls) -> frozenset[str]:
        return cls.EXTENSIONS

    @classmethod
    def supported_mime_types(cls) -> frozenset[str]:
        return cls.MIME_TYPES

    @abc.abstractmethod
    def read(self, path: Path) -> AudioMetadata:
        """Read the tags of ``path`` into a fresh metadata model."""
        raise NotImplementedError

    @abc.abstractmethod
    def write(self, metadata: AudioMetadata, path: Path) -> None:
        """Write the merged view of ``metadata`` into ``path``."""
        raise NotImplementedError


__all__ = ["AudioFormatAdapter", "WriteOptions"]
