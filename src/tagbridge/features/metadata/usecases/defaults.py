"""
Summary: Build the registry populated with every bundled format adapter.
Why: Give callers a ready-made dispatch table while keeping registries explicit objects.
"""

from __future__ import annotations

from .registry import HandlerRegistry

__all__ = ["default_registry", "OGG_FLAC_PRIORITY"]

# ".oga" is shared with Ogg Vorbis; Vorbis is tried first.
OGG_FLAC_PRIORITY = -10


def default_registry() -> HandlerRegistry:
    """Return a new registry holding every bundled adapter."""
    from ..adapters import formats

    registry = HandlerRegistry()
    for adapter in (
        formats.MP3Adapter,
        formats.FLACAdapter,
        formats.OggVorbisAdapter,
        formats.OggOpusAdapter,
        formats.OggSpeexAdapter,
        formats.MP4Adapter,
        formats.WAVEAdapter,
        formats.AIFFAdapter,
        formats.MonkeysAudioAdapter,
        formats.WavPackAdapter,
        formats.MusepackAdapter,
        formats.OptimFROGAdapter,
        formats.TrueAudioAdapter,
        formats.DSFAdapter,
        formats.DSDIFFAdapter,
        formats.ProTrackerModuleAdapter,
        formats.ImpulseTrackerModuleAdapter,
        formats.ScreamTracker3ModuleAdapter,
        formats.ExtendedModuleAdapter,
    ):
        registry.register(adapter)
    registry.register(formats.OggFLACAdapter, priority=OGG_FLAC_PRIORITY)
    return registry
