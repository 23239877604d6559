"""
Summary: Derived runtime settings (ID3 output, pictures, log file) sourced from persisted configuration.
Why: Expose validated constants to adapters without file I/O and attach the configured log file.
"""

from __future__ import annotations

from pathlib import Path

from tagbridge.config.config import (
    ID3V2_VERSION_DEFAULT,
    ID3V23_SEPARATOR_DEFAULT,
    config as app_config,
)
from tagbridge.config.paths import env_log_file
from tagbridge.platform.logging import DEFAULT_LOG_FILE, setup_logger

# ID3v2 output ---------------------------------------------------------------

# mutagen can only write ID3v2.3 and ID3v2.4.
_id3v2_version = getattr(app_config, "id3v2_version", ID3V2_VERSION_DEFAULT)
ID3V2_VERSION: int = _id3v2_version if _id3v2_version in (3, 4) else ID3V2_VERSION_DEFAULT

_separator = getattr(app_config, "id3v23_separator", ID3V23_SEPARATOR_DEFAULT)
ID3V23_SEPARATOR: str = (
    _separator if isinstance(_separator, str) and _separator else ID3V23_SEPARATOR_DEFAULT
)

# Pictures -------------------------------------------------------------------

WRITE_ATTACHED_PICTURES: bool = bool(getattr(app_config, "write_attached_pictures", True))

# Logging --------------------------------------------------------------------

# The environment variable wins over the configured value.
LOG_FILE: Path | None = env_log_file() or app_config.log_file

# The package logger starts from the environment alone; attach the configured file.
if LOG_FILE is not None and LOG_FILE != DEFAULT_LOG_FILE:
    _ = setup_logger(log_file=LOG_FILE)


__all__ = [
    "ID3V2_VERSION",
    "ID3V23_SEPARATOR",
    "WRITE_ATTACHED_PICTURES",
    "LOG_FILE",
]
