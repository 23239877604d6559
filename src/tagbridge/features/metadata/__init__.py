"""
Summary: Expose the metadata model, errors, registry and file facade.
Why: Provide a cohesive import surface for callers and integration layers.
"""

from .domain.attached_picture import AttachedPicture, AttachedPictureType
from .domain.audio_metadata import AudioMetadata, MetadataKey, MetadataKind
from .domain.audio_properties import AudioProperties
from .domain.errors import (
    AudioFileError,
    ErrorCode,
    InputOutputError,
    IOFailure,
    UnsupportedFormatError,
    UnsupportedOperationError,
)
from .usecases import (
    AudioFile,
    AudioFormatAdapter,
    HandlerRegistry,
    WriteOptions,
    default_registry,
    read_metadata,
    write_metadata,
)

__all__ = [
    "AttachedPicture",
    "AttachedPictureType",
    "AudioFile",
    "AudioFileError",
    "AudioFormatAdapter",
    "AudioMetadata",
    "AudioProperties",
    "ErrorCode",
    "HandlerRegistry",
    "InputOutputError",
    "IOFailure",
    "MetadataKey",
    "MetadataKind",
    "UnsupportedFormatError",
    "UnsupportedOperationError",
    "WriteOptions",
    "default_registry",
    "read_metadata",
    "write_metadata",
]
