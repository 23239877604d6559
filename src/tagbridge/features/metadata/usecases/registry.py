"""
Summary: Priority-ordered registry mapping extensions and MIME types to adapters.
Why: Dispatch a file to the adapter responsible for its format, letting higher priorities override.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePath
from urllib.parse import unquote, urlsplit

from tagbridge.platform.logging import logger

from .ports import AudioFormatAdapter

__all__ = ["HandlerRegistration", "HandlerRegistry", "extension_of"]

AdapterType = type[AudioFormatAdapter]


@dataclass(frozen=True, slots=True)
class HandlerRegistration:
    """One adapter registration and the capabilities captured when it was made."""

    adapter: AdapterType
    priority: int
    extensions: frozenset[str]
    mime_types: frozenset[str]


def extension_of(location: str | PurePath) -> str | None:
    """Return the lowercased extension of a path or ``file`` URL.

    Returns ``None`` for URLs with any scheme other than ``file`` and for
    paths without an extension.
    """
    if isinstance(location, PurePath):
        path = location
    else:
        parts = urlsplit(location)
        if parts.scheme == "file":
            path = PurePath(unquote(parts.path))
        elif parts.scheme and len(parts.scheme) > 1:
            return None
        else:
            # No scheme, or a Windows drive letter parsed as one.
            path = PurePath(location)

    suffix = path.suffix
    if not suffix or suffix == ".":
        return None
    return suffix[1:].lower()


class HandlerRegistry:
    """Registrations kept sorted by descending priority.

    Equal priorities keep their registration order. Registering the same
    adapter twice records it twice.
    """

    def __init__(self) -> None:
        self._registrations: list[HandlerRegistration] = []

    def __len__(self) -> int:
        return len(self._registrations)

    def __iter__(self) -> Iterator[HandlerRegistration]:
        return iter(self._registrations)

    @property
    def registrations(self) -> tuple[HandlerRegistration, ...]:
        return tuple(self._registrations)

    def register(self, adapter: AdapterType, priority: int = 0) -> None:
        """Register ``adapter`` with ``priority``.

        Raises:
            TypeError: If ``adapter`` is not an :class:`AudioFormatAdapter` subclass.
        """
        if not isinstance(adapter, type) or not issubclass(adapter, AudioFormatAdapter):
            raise TypeError(f"{adapter!r} is not an AudioFormatAdapter subclass")

        registration = HandlerRegistration(
            adapter=adapter,
            priority=priority,
            extensions=frozenset(ext.lower() for ext in adapter.supported_extensions()),
            mime_types=frozenset(mime.lower() for mime in adapter.supported_mime_types()),
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority, reverse=True)
        logger.debug("Registered %s with priority %d", adapter.__name__, priority)

    def candidates(self, location: str | Path) -> list[AdapterType]:
        """Return every adapter claiming the extension of ``location``, in dispatch order."""
        extension = extension_of(location)
        if extension is None:
            return []
        return [r.adapter for r in self._registrations if extension in r.extensions]

    def resolve(self, location: str | Path) -> AdapterType | None:
        """Return the adapter that handles ``location``, or ``None``."""
        matches = self.candidates(location)
        return matches[0] if matches else None

    def candidates_by_mime_type(self, mime_type: str) -> list[AdapterType]:
        wanted = mime_type.strip().lower()
        return [r.adapter for r in self._registrations if wanted in r.mime_types]

    def resolve_by_mime_type(self, mime_type: str) -> AdapterType | None:
        """Return the adapter that handles ``mime_type``, or ``None``."""
        matches = self.candidates_by_mime_type(mime_type)
        return matches[0] if matches else None

    def supported_extensions(self) -> frozenset[str]:
        return frozenset().union(*(r.extensions for r in self._registrations))

    def supported_mime_types(self) -> frozenset[str]:
        return frozenset().union(*(r.mime_types for r in self._registrations))

    def handles_extension(self, extension: str) -> bool:
        return extension.lstrip(".").lower() in self.supported_extensions()

    def handles_mime_type(self, mime_type: str) -> bool:
        return mime_type.strip().lower() in self.supported_mime_types()
