"""
Summary: Error types raised while reading or writing audio metadata.
Why: Give callers a description, failure reason and recovery suggestion together with a programmatic code.
"""

from __future__ import annotations

import enum
from pathlib import Path

__all__ = [
    "ErrorCode",
    "IOFailure",
    "AudioFileError",
    "InputOutputError",
    "UnsupportedOperationError",
    "UnsupportedFormatError",
]

RECOVERY_CHECK_FILE = (
    "The file may have been renamed, moved, deleted, or you may not have appropriate permissions."
)
RECOVERY_CHECK_EXTENSION = "The file's extension may not match the file's type."


class ErrorCode(enum.IntEnum):
    """Programmatic error codes carried by :class:`AudioFileError`."""

    INPUT_OUTPUT = 1
    UNSUPPORTED_OPERATION = 2
    UNSUPPORTED_FORMAT = 3


class IOFailure(enum.StrEnum):
    """Cause of an :class:`InputOutputError`."""

    OPEN_FOR_READING = "open_for_reading"
    OPEN_FOR_WRITING = "open_for_writing"
    INVALID_FORMAT = "invalid_format"
    SAVE_FAILED = "save_failed"


class AudioFileError(Exception):
    """Base class for every audio file error."""

    code: ErrorCode = ErrorCode.INPUT_OUTPUT

    def __init__(
        self,
        path: Path | str | None,
        description: str,
        failure_reason: str | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        super().__init__(description)
        self.path: Path | None = Path(path) if path is not None else None
        self.description: str = description
        self.failure_reason: str | None = failure_reason
        self.recovery_suggestion: str | None = recovery_suggestion


class InputOutputError(AudioFileError):
    """A file could not be opened, was not valid, or could not be saved."""

    code = ErrorCode.INPUT_OUTPUT

    def __init__(
        self,
        path: Path | str | None,
        reason: IOFailure,
        description: str,
        failure_reason: str | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        super().__init__(path, description, failure_reason, recovery_suggestion)
        self.reason: IOFailure = reason

    @classmethod
    def open_for_reading(cls, path: Path | str) -> InputOutputError:
        return cls(
            path,
            IOFailure.OPEN_FOR_READING,
            f"The file “{Path(path).name}” could not be opened for reading.",
            "Input/output error",
            RECOVERY_CHECK_FILE,
        )

    @classmethod
    def open_for_writing(cls, path: Path | str) -> InputOutputError:
        return cls(
            path,
            IOFailure.OPEN_FOR_WRITING,
            f"The file “{Path(path).name}” could not be opened for writing.",
            "Input/output error",
            RECOVERY_CHECK_FILE,
        )

    @classmethod
    def invalid_format(cls, path: Path | str, format_name: str) -> InputOutputError:
        return cls(
            path,
            IOFailure.INVALID_FORMAT,
            f"The file “{Path(path).name}” is not a valid {format_name} file.",
            f"Not a {format_name} file",
            RECOVERY_CHECK_EXTENSION,
        )

    @classmethod
    def save_failed(cls, path: Path | str) -> InputOutputError:
        return cls(
            path,
            IOFailure.SAVE_FAILED,
            f"The file “{Path(path).name}” could not be saved.",
            "Unable to write metadata",
            RECOVERY_CHECK_EXTENSION,
        )


class UnsupportedOperationError(AudioFileError):
    """The format offers no way to perform the requested operation."""

    code = ErrorCode.UNSUPPORTED_OPERATION

    @classmethod
    def writing_not_supported(cls, path: Path | str, format_name: str) -> UnsupportedOperationError:
        return cls(
            path,
            f"Writing metadata is not supported for {format_name} files.",
            "Unsupported operation",
            "The file's format does not support metadata writing.",
        )


class UnsupportedFormatError(AudioFileError):
    """No registered adapter handles the file."""

    code = ErrorCode.UNSUPPORTED_FORMAT

    @classmethod
    def for_path(cls, path: Path | str) -> UnsupportedFormatError:
        return cls(
            path,
            f"The file “{Path(path).name}” is not a supported audio format.",
            "Unsupported format",
            RECOVERY_CHECK_EXTENSION,
        )
