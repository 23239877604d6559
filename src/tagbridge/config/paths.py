"""
Summary: Shared path utilities for configuration and log locations.
Why: Keep the portable policy in one place: config at <repo_root>/config/config.toml unless TAGBRIDGE_CONFIG overrides it, console-only logs unless TAGBRIDGE_LOG_FILE names a file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Final

ENV_CONFIG_FILE: Final[str] = "TAGBRIDGE_CONFIG"
ENV_LOG_FILE: Final[str] = "TAGBRIDGE_LOG_FILE"


def resolve_overridable_path(
    *,
    explicit_path: Path | str | None,
    env: Mapping[str, str] | None,
    env_var: str | None,
    default_factory: Callable[[], Path],
) -> Path:
    """Resolve a path honoring explicit and environment overrides."""

    if explicit_path is not None:
        return Path(explicit_path).expanduser().resolve()

    mapping = env if env is not None else os.environ
    if env_var:
        candidate = (mapping.get(env_var) or "").strip()
        if candidate:
            return Path(candidate).expanduser().resolve()

    return default_factory().expanduser().resolve()


def _detect_repo_root(start: Path | None = None) -> Path:
    """Detect the repository root by walking up parents.

    Looks for markers like ``pyproject.toml`` or ``.git`` and falls back to
    the current working directory.
    """
    here = (start or Path(__file__).resolve()).parent
    for p in [here, *here.parents]:
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return Path.cwd()


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Get the path of the TOML config file."""

    return resolve_overridable_path(
        explicit_path=None,
        env=env,
        env_var=ENV_CONFIG_FILE,
        default_factory=lambda: _detect_repo_root() / "config" / "config.toml",
    )


def default_log_dir() -> Path:
    """Get the suggested directory for log files."""

    return (_detect_repo_root() / "logs").resolve()


def env_log_file(env: Mapping[str, str] | None = None) -> Path | None:
    """Return the log file named by ``TAGBRIDGE_LOG_FILE``, if any."""

    mapping = env if env is not None else os.environ
    candidate = (mapping.get(ENV_LOG_FILE) or "").strip()
    if not candidate:
        return None
    return Path(candidate).expanduser().resolve()


__all__ = [
    "ENV_CONFIG_FILE",
    "ENV_LOG_FILE",
    "default_config_path",
    "default_log_dir",
    "env_log_file",
    "resolve_overridable_path",
]
