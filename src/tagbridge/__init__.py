"""
Summary: Read and write audio file metadata through one format-independent model.
Why: Re-export the public surface of the metadata feature at the package root.
"""

from tagbridge.features.metadata import (
    AttachedPicture,
    AttachedPictureType,
    AudioFile,
    AudioFileError,
    AudioFormatAdapter,
    AudioMetadata,
    AudioProperties,
    ErrorCode,
    HandlerRegistry,
    InputOutputError,
    IOFailure,
    MetadataKey,
    MetadataKind,
    UnsupportedFormatError,
    UnsupportedOperationError,
    WriteOptions,
    default_registry,
    read_metadata,
    write_metadata,
)

__version__ = "0.1.0"

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
