"""
Summary: Read-only audio stream properties reported by the tag library.
Why: Keep format-derived values out of the writable metadata diff.
"""

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class AudioProperties:
    """Properties of the audio stream, populated once at read time."""

    format_name: str | None = None
    total_frames: int | None = None
    channels: int | None = None
    bits_per_channel: int | None = None
    sample_rate: int | None = None
    duration: float | None = None
    bitrate: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


__all__ = ["AudioProperties"]
