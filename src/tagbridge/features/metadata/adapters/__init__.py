"""
Summary: Package marker for format adapters.
Why: Keep the concrete adapter classes together for registration and discovery.
"""

from .formats import (
    AIFFAdapter,
    DSDIFFAdapter,
    DSFAdapter,
    ExtendedModuleAdapter,
    FLACAdapter,
    ImpulseTrackerModuleAdapter,
    MonkeysAudioAdapter,
    MP3Adapter,
    MP4Adapter,
    MusepackAdapter,
    OggFLACAdapter,
    OggOpusAdapter,
    OggSpeexAdapter,
    OggVorbisAdapter,
    OptimFROGAdapter,
    ProTrackerModuleAdapter,
    ScreamTracker3ModuleAdapter,
    TrueAudioAdapter,
    WAVEAdapter,
    WavPackAdapter,
)

__all__ = [
    "AIFFAdapter",
    "DSDIFFAdapter",
    "DSFAdapter",
    "ExtendedModuleAdapter",
    "FLACAdapter",
    "ImpulseTrackerModuleAdapter",
    "MonkeysAudioAdapter",
    "MP3Adapter",
    "MP4Adapter",
    "MusepackAdapter",
    "OggFLACAdapter",
    "OggOpusAdapter",
    "OggSpeexAdapter",
    "OggVorbisAdapter",
    "OptimFROGAdapter",
    "ProTrackerModuleAdapter",
    "ScreamTracker3ModuleAdapter",
    "TrueAudioAdapter",
    "WAVEAdapter",
    "WavPackAdapter",
]
