"""
Summary: Render structured ``metadata_event`` log records with icons and compact paths.
Why: Keep read/write outcomes scannable on the console without changing call sites.
"""

from __future__ import annotations

import logging
from pathlib import PurePath, PurePosixPath, PureWindowsPath
from typing import Any, ClassVar, override

from rich.console import ConsoleRenderable
from rich.logging import RichHandler
from rich.style import Style
from rich.text import Text


class MetadataRichHandler(RichHandler):
    """Rich handler that renders metadata read/write events."""

    _METADATA_STYLES: ClassVar[dict[str, tuple[str, str]]] = {
        "metadata.read.success": ("🎧", "green"),
        "metadata.read.error": ("❌", "red"),
        "metadata.write.success": ("💾", "green"),
        "metadata.write.error": ("⛔", "red"),
        "metadata.write.unsupported": ("🚫", "yellow"),
    }
    _EVENT_PREFIXES: ClassVar[dict[str, str]] = {
        "metadata.read.success": "Read ",
        "metadata.read.error": "Failed to read ",
        "metadata.write.success": "Wrote ",
        "metadata.write.error": "Failed to write ",
        "metadata.write.unsupported": "Cannot write ",
    }
    _PATH_SEGMENT_LIMIT: ClassVar[int] = 3

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs["show_time"] = False
        kwargs["show_path"] = False
        kwargs["show_level"] = False
        kwargs["rich_tracebacks"] = True
        kwargs["markup"] = False
        kwargs["omit_repeated_times"] = False
        super().__init__(*args, **kwargs)

    @staticmethod
    def _to_pure_path(raw_path: str) -> PurePath:
        if "\\" in raw_path:
            return PureWindowsPath(raw_path)
        return PurePosixPath(raw_path)

    def _format_path(self, path: str) -> Text:
        """Render the trailing path segments, eliding the rest with an ellipsis."""

        pure_path = self._to_pure_path(path)
        separator = "\\" if isinstance(pure_path, PureWindowsPath) else "/"
        parts = [part for part in pure_path.parts if part and part != pure_path.anchor]

        if len(parts) > self._PATH_SEGMENT_LIMIT:
            display = "…" + separator + separator.join(parts[-self._PATH_SEGMENT_LIMIT:])
        else:
            display = pure_path.anchor + separator.join(parts) if parts else str(pure_path)

        text = Text()
        for char in display:
            if char in {separator, "…"}:
                _ = text.append(char, style=Style(color="magenta"))
            else:
                _ = text.append(char, style=Style(color="white"))
        return text

    def _render_metadata_message(self, record: logging.LogRecord) -> Text | None:
        """Render structured metadata events with dedicated styling."""

        event = getattr(record, "metadata_event", None)
        if not isinstance(event, str):
            return None

        icon, color = self._METADATA_STYLES.get(event, ("ℹ️", "blue"))
        text = Text()
        _ = text.append(f"{icon} ", style=Style(color=color, bold=True))

        body = Text(style=Style(color=color))
        prefix = self._EVENT_PREFIXES.get(event)
        if prefix:
            _ = body.append(prefix)

        path = getattr(record, "path", None)
        if path:
            _ = body.append_text(self._format_path(str(path)))

        details: list[str] = []
        format_name = getattr(record, "format_name", None)
        if format_name:
            details.append(str(format_name))
        changed = getattr(record, "changed_keys", None)
        if isinstance(changed, int) and event == "metadata.write.success":
            details.append(f"{changed} changed")
        error_message = getattr(record, "error_message", None)
        if error_message and event.endswith((".error", ".unsupported")):
            details.append(str(error_message))
        if details:
            _ = body.append(" (" + ", ".join(details) + ")")

        _ = text.append_text(body)
        return text

    @override
    def render_message(self, record: logging.LogRecord, message: str) -> ConsoleRenderable:
        metadata_text = self._render_metadata_message(record)
        if metadata_text is not None:
            return metadata_text
        return super().render_message(record, message)


__all__ = ["MetadataRichHandler"]
