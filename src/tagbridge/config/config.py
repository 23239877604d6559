"""
Summary: TOML-backed configuration singleton for tagbridge.
Why: Persist user choices (ID3 output, pictures, log file) outside the code and load them once per process.
"""

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from tagbridge.config.paths import default_config_path
from tagbridge.platform.logging import logger

ID3V2_VERSION_DEFAULT = 4
ID3V23_SEPARATOR_DEFAULT = "/"


def _path_field(default: Path | None = None) -> Any:
    """Create a field for Path objects converted in ``__post_init__``."""
    return field(default=default, metadata={"path": True})


@dataclass
class Config:
    """Package configuration."""

    # Log file path
    log_file: Path | None = _path_field()

    # ID3v2 output settings
    id3v2_version: int = ID3V2_VERSION_DEFAULT
    id3v23_separator: str = ID3V23_SEPARATOR_DEFAULT

    # Whether attached pictures replace the pictures embedded in a file on write
    write_attached_pictures: bool = True

    # Singleton instance
    _instance: ClassVar["Config | None"] = None
    _loaded_from: ClassVar[Path | None] = None

    def __post_init__(self) -> None:
        """Convert string paths to ``Path`` objects using field metadata."""
        for f in fields(self):
            if not f.metadata.get("path", False):
                continue
            value = getattr(self, f.name)
            if isinstance(value, str):
                setattr(self, f.name, Path(value) if value.strip() else None)

    def save(self, path: Path | None = None) -> Path:
        """Save configuration to ``path`` (the default config location when omitted)."""
        config_dict = asdict(self)
        for key, value in config_dict.items():
            if isinstance(value, Path):
                config_dict[key] = str(value)

        target = path or default_config_path()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _ = target.write_text(self._render_toml(config_dict), encoding="utf-8")
            logger.info("Configuration saved to %s", target)
        except OSError as e:
            logger.error("Failed to save configuration: %s", e)
            raise
        return target

    def _render_toml(self, config: dict[str, Any]) -> str:
        """Render configuration as TOML with inline guidance."""

        lines: list[str] = []

        lines.append("# tagbridge Configuration File")
        lines.append("")

        lines.append("# Log file path (optional)")
        lines.append("# TAGBRIDGE_LOG_FILE takes precedence when set")
        lines.append('# Example: log_file = "/path/to/logs/tagbridge.log"')
        if config["log_file"] is not None:
            lines.append(f"log_file = {self._format_toml_value(config['log_file'])}")
        lines.append("")

        lines.append("# ID3v2 version written to MP3, WAVE, AIFF and DSD files (3 or 4)")
        lines.append(f"id3v2_version = {self._format_toml_value(config['id3v2_version'])}")
        lines.append("")

        lines.append("# Separator joining multiple values when writing ID3v2.3")
        lines.append(f"id3v23_separator = {self._format_toml_value(config['id3v23_separator'])}")
        lines.append("")

        lines.append("# Replace embedded pictures with the attached pictures on write (default true)")
        lines.append(
            "write_attached_pictures = "
            f"{self._format_toml_value(config['write_attached_pictures'])}"
        )
        lines.append("")

        return "\n".join(lines)

    def _format_toml_value(self, value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, Path)):
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration, returning the cached instance when present.

        A missing file yields the defaults; nothing is written to disk.
        """
        if cls._instance is not None and path is None:
            return cls._instance

        config_file = path or default_config_path()

        if not config_file.exists():
            logger.debug("No configuration at %s, using defaults", config_file)
            instance = cls()
        else:
            try:
                with open(config_file, "rb") as f:
                    config_dict = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.error("Failed to load configuration: %s", e)
                raise

            known = {f.name for f in fields(cls)}
            for key in sorted(set(config_dict) - known):
                logger.warning("Ignoring unknown configuration key %r in %s", key, config_file)
                del config_dict[key]

            logger.info("Configuration loaded from %s", config_file)
            instance = cls(**config_dict)

        cls._instance = instance
        cls._loaded_from = config_file
        return instance


# Global configuration instance
config = Config.load()
