"""Content inventory and translation status computation."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .errors import ComputationCancelled, InvariantViolation
from .git.history import GitHistory
from .logging import get_logger
from .models import (
    GitFileChanges,
    LocalesConfig,
    LocaleStatuses,
    Page,
    PageStatus,
    PageStatusesByLocale,
)

# https://github.com/withastro/astro/blob/c23ddb9ab31c34633b3a0f163fd4c24c852073de/packages/astro/src/core/constants.ts#L5
CONTENT_EXTENSIONS = ("md", "mdx", "mdoc", "markdown", "mdown", "mkdn", "mkd", "mdwn")

DEFAULT_MAX_WORKERS = 8

_EXCLUDED_DIRS = {".git", ".hg", ".svn", "node_modules", "__pycache__"}

_LOGGER = get_logger("content")


class FileHistory(Protocol):
    def get_file_changes(self, path: Path) -> GitFileChanges:
        ...


FileFinder = Callable[[Path], Sequence[Path]]
PagesByLocale = Dict[str, Dict[str, Page]]


def discover_content_files(content_root: Path) -> List[Path]:
    """Return content files below ``content_root`` in a stable walk order."""
    if not content_root.is_dir():
        return []

    suffixes = {f".{extension}" for extension in CONTENT_EXTENSIONS}
    files: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(content_root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current = Path(dirpath)
        for filename in sorted(filenames):
            if Path(filename).suffix.lower() in suffixes:
                files.append(current / filename)
    return files


def build_inventory(
    content_root: Path,
    workspace_root: Path,
    locales_config: LocalesConfig,
    *,
    history: FileHistory | None = None,
    find_files: FileFinder = discover_content_files,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> List[Page]:
    """Discover content pages and attach their git history.

    History lookups run concurrently; pages come back in discovery order. A
    history failure, an expired ``timeout`` or a set ``cancel_event`` aborts the
    whole inventory.
    """
    history = history or GitHistory(workspace_root)
    files = list(find_files(content_root))
    _LOGGER.debug("Discovered %d content files under %s", len(files), content_root)

    def _check_cancelled() -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ComputationCancelled("The content pages status computation was cancelled.")

    def _build(file: Path) -> Page:
        _check_cancelled()
        return _make_page(content_root, file, locales_config, history.get_file_changes(file))

    if not files:
        _check_cancelled()
        return []

    executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="starlight-i18n")
    try:
        pages = list(executor.map(_build, files, timeout=timeout))
    except FuturesTimeoutError as exc:
        raise ComputationCancelled(
            f"Collecting the content pages history exceeded {timeout} seconds."
        ) from exc
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    # The event may have been set while the last lookups were running.
    _check_cancelled()
    return pages


def partition_pages(pages: Sequence[Page], locales_config: LocalesConfig) -> PagesByLocale:
    """Group pages by locale directory, then by id; later pages win on id clashes."""
    pages_by_locale: PagesByLocale = {}
    for page in pages:
        locale_directory = page.locale_directory or locales_config.default_locale
        pages_by_locale.setdefault(locale_directory, {})[page.id] = page
    return pages_by_locale


def compute_statuses(
    locales_config: LocalesConfig, inventory: Mapping[str, Mapping[str, Page]]
) -> PageStatusesByLocale:
    """Compare every default-locale page against each locale to translate."""
    default_pages = inventory.get(locales_config.default_locale)
    if not default_pages:
        raise InvariantViolation("Failed to find content pages matching the default locale.")

    statuses: PageStatusesByLocale = {}
    for locale_directory, locale in locales_config.locales.items():
        translated_pages = inventory.get(locale_directory, {})
        entry = LocaleStatuses(locale=locale)
        for page_id, source in default_pages.items():
            entry.statuses.append(_page_status(source, translated_pages.get(page_id)))
        statuses[locale_directory] = entry
        _LOGGER.debug(
            "%s: %d missing, %d outdated out of %d pages",
            locale_directory,
            len(entry.missing),
            len(entry.outdated),
            len(entry.statuses),
        )
    return statuses


def get_content_pages_statuses(
    content_root: Path,
    workspace_root: Path,
    locales_config: LocalesConfig,
    *,
    history: FileHistory | None = None,
    find_files: FileFinder = discover_content_files,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> PageStatusesByLocale:
    """Build the inventory and compute statuses in one call."""
    pages = build_inventory(
        content_root,
        workspace_root,
        locales_config,
        history=history,
        find_files=find_files,
        max_workers=max_workers,
        timeout=timeout,
        cancel_event=cancel_event,
    )
    return compute_statuses(locales_config, partition_pages(pages, locales_config))


# ----------------------------------------------------------------------
# Internals


def _make_page(
    content_root: Path, file: Path, locales_config: LocalesConfig, changes: GitFileChanges
) -> Page:
    relative_path = file.relative_to(content_root).as_posix()
    directory, _, remainder = relative_path.partition("/")

    if remainder and directory in locales_config.locales:
        return Page(
            id=remainder,
            file=file,
            changes=changes,
            locale_directory=directory,
            locale=locales_config.locales[directory],
        )
    if remainder and directory == locales_config.default_locale:
        # Non-root default locale: its pages live in their own directory.
        return Page(id=remainder, file=file, changes=changes, locale_directory=directory)
    return Page(id=relative_path, file=file, changes=changes)


def _page_status(source: Page, translated: Optional[Page]) -> PageStatus:
    if translated is None:
        return PageStatus(missing=True, outdated=False, source=source)
    return PageStatus(
        missing=False,
        outdated=source.changes.previous.date > translated.changes.previous.date,
        source=source,
        page=translated,
    )


__all__ = [
    "CONTENT_EXTENSIONS",
    "DEFAULT_MAX_WORKERS",
    "build_inventory",
    "compute_statuses",
    "discover_content_files",
    "get_content_pages_statuses",
    "partition_pages",
]
