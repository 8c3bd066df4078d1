"""Runtime settings loaded from YAML, the environment and CLI flags.

Precedence, lowest first: dataclass defaults, the ``settings`` mapping of the
YAML file, ``GOPROCONCAT_*`` environment variables, command-line flags.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .utils import env_bool, env_str, load_yaml_file

CONFIG_ENV_VAR = "GOPROCONCAT_CONFIG"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_KNOWN_KEYS = {
    "ffmpeg_binary",
    "setfile_binary",
    "require_macos",
    "metadata_tag",
    "overwrite",
    "dry_run",
    "log_level",
    "log_file",
}


@dataclass
class Settings:
    ffmpeg_binary: str = "ffmpeg"
    setfile_binary: str = "SetFile"
    require_macos: bool = True
    metadata_tag: str = "gpmd"
    overwrite: bool = True
    dry_run: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None


def _require_str(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'settings.{key}' must be a non-empty string")
    return value.strip()


def _require_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'settings.{key}' must be true or false")
    return value


def _normalize_log_level(value: str, *, field_name: str) -> str:
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"'{field_name}' must be one of {', '.join(sorted(_LOG_LEVELS))}")
    return level


def _build_settings(data: dict[str, Any]) -> Settings:
    if not isinstance(data, dict):
        raise ValueError("'settings' must be provided as a mapping when specified")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")

    defaults = Settings()
    log_file_raw = data.get("log_file")
    if log_file_raw is not None and not isinstance(log_file_raw, str):
        raise ValueError("'settings.log_file' must be a path string")

    return Settings(
        ffmpeg_binary=_require_str(data, "ffmpeg_binary", defaults.ffmpeg_binary),
        setfile_binary=_require_str(data, "setfile_binary", defaults.setfile_binary),
        require_macos=_require_bool(data, "require_macos", defaults.require_macos),
        metadata_tag=_require_str(data, "metadata_tag", defaults.metadata_tag),
        overwrite=_require_bool(data, "overwrite", defaults.overwrite),
        dry_run=_require_bool(data, "dry_run", defaults.dry_run),
        log_level=_normalize_log_level(
            _require_str(data, "log_level", defaults.log_level),
            field_name="settings.log_level",
        ),
        log_file=Path(log_file_raw).expanduser() if log_file_raw else None,
    )


def apply_env_overrides(settings: Settings) -> Settings:
    overrides: dict[str, Any] = {}

    ffmpeg = env_str("GOPROCONCAT_FFMPEG")
    if ffmpeg is not None:
        overrides["ffmpeg_binary"] = ffmpeg
    setfile = env_str("GOPROCONCAT_SETFILE")
    if setfile is not None:
        overrides["setfile_binary"] = setfile

    dry_run = env_bool("GOPROCONCAT_DRY_RUN")
    if dry_run is not None:
        overrides["dry_run"] = dry_run
    require_macos = env_bool("GOPROCONCAT_REQUIRE_MACOS")
    if require_macos is not None:
        overrides["require_macos"] = require_macos

    log_level = env_str("GOPROCONCAT_LOG_LEVEL")
    if log_level is not None:
        overrides["log_level"] = _normalize_log_level(log_level, field_name="GOPROCONCAT_LOG_LEVEL")

    return replace(settings, **overrides) if overrides else settings


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path`` (or ``$GOPROCONCAT_CONFIG``) and the environment."""
    if path is None:
        env_path = env_str(CONFIG_ENV_VAR)
        path = Path(env_path).expanduser() if env_path else None

    if path is None:
        settings = Settings()
    else:
        data = load_yaml_file(path)
        settings = _build_settings(data.get("settings", {}) or {})

    return apply_env_overrides(settings)
