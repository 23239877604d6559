"""
Summary: Package exports for the metadata use cases.
Why: Give the registry, the adapter contract and the file facade one namespace.
"""

from .audio_file import AudioFile, path_of, read_metadata, write_metadata
from .defaults import default_registry
from .ports import AudioFormatAdapter, WriteOptions
from .registry import HandlerRegistration, HandlerRegistry, extension_of

__all__ = [
    "AudioFile",
    "AudioFormatAdapter",
    "HandlerRegistration",
    "HandlerRegistry",
    "WriteOptions",
    "default_registry",
    "extension_of",
    "path_of",
    "read_metadata",
    "write_metadata",
]
