"""Pipeline orchestration for the status and prepare flows."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .config import ToolConfig, load_config
from .content import FileFinder, discover_content_files, get_content_pages_statuses
from .errors import I18nError, ParseError, TranslationError
from .extractor import extract_locales_config_from_code
from .git.history import GitHistory
from .locator import StarlightPaths, get_starlight_paths, json_import_reader
from .logging import get_logger
from .models import LocalesConfig, PageStatusesByLocale
from .translation import PreparedTranslation, prepare_translation

HistoryFactory = Callable[[Path], GitHistory]


@dataclass
class StatusReport:
    """Result of a status run."""

    paths: StarlightPaths
    locales_config: LocalesConfig
    statuses: PageStatusesByLocale


class Orchestrator:
    """Coordinates config extraction, inventory and translation preparation."""

    def __init__(
        self,
        history_factory: HistoryFactory | None = None,
        find_files: FileFinder = discover_content_files,
    ) -> None:
        self._history_factory = history_factory or GitHistory
        self._histories: dict[Path, GitHistory] = {}
        self._find_files = find_files
        self.logger = get_logger("orchestrator")

    def locate(self, path: str | Path) -> tuple[ToolConfig, StarlightPaths]:
        workspace = Path(path).expanduser().resolve()
        config = load_config(workspace)
        paths = get_starlight_paths(
            workspace, config.config_directories, config.content_directory
        )
        if paths is None:
            raise I18nError("Failed to find a Starlight instance in the current workspace.")
        return config, paths

    def load_locales_config(self, paths: StarlightPaths) -> LocalesConfig:
        """Extract the locales configuration; never cached, the file may change."""
        try:
            code = paths.config.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(
                f"Failed to read Astro configuration file at '{paths.config}'."
            ) from exc
        return extract_locales_config_from_code(code, json_import_reader(paths.config))

    def run_status(
        self, path: str | Path, *, cancel_event: threading.Event | None = None
    ) -> StatusReport:
        config, paths = self.locate(path)
        self.logger.info("Using Astro configuration at %s", paths.config)
        locales_config = self.load_locales_config(paths)
        statuses = get_content_pages_statuses(
            paths.content,
            paths.workspace,
            locales_config,
            history=self._history(paths.workspace),
            find_files=self._find_files,
            max_workers=config.max_workers,
            timeout=config.history_timeout,
            cancel_event=cancel_event,
        )
        return StatusReport(paths=paths, locales_config=locales_config, statuses=statuses)

    def run_prepare(
        self, path: str | Path, locale_directory: str, page_id: str
    ) -> Optional[PreparedTranslation]:
        """Prepare ``page_id`` for ``locale_directory``; None when already up to date."""
        report = self.run_status(path)
        entry = report.statuses.get(locale_directory)
        if entry is None:
            raise TranslationError(f"Unknown locale '{locale_directory}'.")

        status = next((item for item in entry.statuses if item.source.id == page_id), None)
        if status is None:
            raise TranslationError(f"Failed to find the page '{page_id}' in the default locale.")
        if status.up_to_date:
            self.logger.info("%s is up to date in %s", page_id, entry.locale.label)
            return None

        return prepare_translation(
            report.paths, self._history(report.paths.workspace), locale_directory, status
        )

    def _history(self, workspace: Path) -> GitHistory:
        history = self._histories.get(workspace)
        if history is None:
            history = self._history_factory(workspace)
            self._histories[workspace] = history
        return history


__all__ = ["Orchestrator", "StatusReport"]
