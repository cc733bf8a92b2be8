"""Tool configuration loading (.starlight-i18n.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .content import DEFAULT_MAX_WORKERS

CONFIG_FILENAME = ".starlight-i18n.yml"
DEFAULT_CONTENT_DIRECTORY = "src/content/docs"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolConfig:
    """Settings read from .starlight-i18n.yml at the workspace root."""

    root: Path
    config_directories: List[str] = field(default_factory=lambda: ["."])
    content_directory: str = DEFAULT_CONTENT_DIRECTORY
    max_workers: int = DEFAULT_MAX_WORKERS
    history_timeout: Optional[float] = None


def load_config(config_path: Path) -> ToolConfig:
    """Load configuration from a workspace directory or an explicit file path."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return ToolConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ToolConfig(root=root)

    directories = _as_str_list(data.get("config_directories"))
    if directories:
        config.config_directories = directories

    content_directory = _as_str(data.get("content_directory"))
    if content_directory:
        config.content_directory = content_directory

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is not None:
        if max_workers < 1:
            raise ConfigError("max_workers must be a positive integer")
        config.max_workers = max_workers

    timeout = _as_float(data.get("history_timeout"))
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError("history_timeout must be a positive number of seconds")
        config.history_timeout = timeout

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser().resolve()
    if config_path.is_dir():
        return config_path / CONFIG_FILENAME
    return config_path


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "ToolConfig", "load_config"]
