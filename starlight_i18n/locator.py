"""Locating the Astro configuration and content directory of a Starlight site."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .config import DEFAULT_CONTENT_DIRECTORY
from .extractor import JSONReader
from .logging import get_logger

# https://docs.astro.build/en/guides/configuring-astro/#supported-config-file-types
CONFIG_FILE_NAMES = ("astro.config.mjs", "astro.config.ts", "astro.config.cjs", "astro.config.js")

_LOGGER = get_logger("locator")


@dataclass(frozen=True)
class StarlightPaths:
    """Filesystem anchors of a Starlight instance."""

    config: Path
    content: Path
    workspace: Path


def find_astro_config(workspace: Path, config_directories: Sequence[str]) -> Optional[Path]:
    """Return the first Astro configuration file found in the candidate directories."""
    for directory in config_directories:
        candidate_dir = workspace / directory
        try:
            entries = {entry.name for entry in candidate_dir.iterdir() if entry.is_file()}
        except OSError:
            # Missing or unreadable directories just move on to the next candidate.
            _LOGGER.debug("Skipping config directory %s", candidate_dir)
            continue
        for name in CONFIG_FILE_NAMES:
            if name in entries:
                return candidate_dir / name
    return None


def get_starlight_paths(
    workspace: Path,
    config_directories: Sequence[str] = (".",),
    content_directory: str = DEFAULT_CONTENT_DIRECTORY,
) -> Optional[StarlightPaths]:
    """Resolve the config file, content root and workspace of a Starlight site."""
    workspace = workspace.expanduser().resolve()
    config = find_astro_config(workspace, config_directories)
    if config is None:
        return None
    _LOGGER.debug("Found Astro configuration at %s", config)
    return StarlightPaths(
        config=config,
        content=config.parent / content_directory,
        workspace=workspace,
    )


def json_import_reader(config: Path) -> JSONReader:
    """Return a reader resolving JSON imports relative to the config file."""

    def _read(relative_path: str) -> str:
        return (config.parent / relative_path).read_text(encoding="utf-8")

    return _read


__all__ = [
    "CONFIG_FILE_NAMES",
    "StarlightPaths",
    "find_astro_config",
    "get_starlight_paths",
    "json_import_reader",
]
