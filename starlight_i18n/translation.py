"""Preparing a page for translation once a status has been picked."""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Protocol, Union

from .errors import TranslationError
from .locator import StarlightPaths
from .logging import get_logger
from .models import Commit, PageStatus

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(?:.*?\r?\n)?---[ \t]*(?=\r?\n|\Z)", re.DOTALL)

_LOGGER = get_logger("translation")


class RevisionHistory(Protocol):
    def commit_before_date(self, path: Path, date: datetime) -> Commit | None:
        ...

    def show_at_ref(self, path: Path, ref: str) -> str:
        ...


@dataclass(frozen=True)
class MissingTranslation:
    """A freshly created translation file seeded with the source frontmatter."""

    source: Path
    translation: Path


@dataclass(frozen=True)
class OutdatedTranslation:
    """Source changes made since the translation was last updated."""

    source: Path
    translation: Path
    reference_ref: str
    latest_ref: str
    reference_text: str
    latest_text: str
    diff: str


PreparedTranslation = Union[MissingTranslation, OutdatedTranslation]


def get_page_raw_frontmatter(path: Path) -> str:
    """Return the leading ``---`` delimited block of a page, or an empty string."""
    # Bytes are decoded as-is so CRLF line endings survive.
    text = path.read_bytes().decode("utf-8")
    match = _FRONTMATTER_PATTERN.match(text)
    return match.group(0) if match else ""


def prepare_missing_translation(
    paths: StarlightPaths, locale_directory: str, status: PageStatus
) -> MissingTranslation:
    frontmatter = get_page_raw_frontmatter(status.source.file)
    translation = paths.content / locale_directory / status.source.id
    translation.parent.mkdir(parents=True, exist_ok=True)
    translation.write_bytes(f"{frontmatter}\n\n".encode("utf-8"))
    _LOGGER.info("Created %s", translation)
    return MissingTranslation(source=status.source.file, translation=translation)


def prepare_outdated_translation(
    history: RevisionHistory, status: PageStatus
) -> OutdatedTranslation:
    """Diff the source between the translation's last update and its latest revision."""
    if status.page is None:
        raise TranslationError("Missing page reference to prepare outdated translation.")

    source = status.source
    reference = history.commit_before_date(source.file, status.page.changes.last.date)
    if reference is None:
        raise TranslationError(f"Failed to find the reference commit to translate '{source.id}'.")

    latest_ref = source.changes.last.ref
    reference_text = history.show_at_ref(source.file, reference.hash)
    latest_text = history.show_at_ref(source.file, latest_ref)
    diff = "".join(
        difflib.unified_diff(
            _diff_lines(reference_text),
            _diff_lines(latest_text),
            fromfile=f"{source.id}@{reference.hash[:7]}",
            tofile=f"{source.id}@{latest_ref[:7]}",
        )
    )
    _LOGGER.debug("Prepared diff of %s from %s to %s", source.id, reference.hash, latest_ref)
    return OutdatedTranslation(
        source=source.file,
        translation=status.page.file,
        reference_ref=reference.hash,
        latest_ref=latest_ref,
        reference_text=reference_text,
        latest_text=latest_text,
        diff=diff,
    )


def prepare_translation(
    paths: StarlightPaths,
    history: RevisionHistory,
    locale_directory: str,
    status: PageStatus,
) -> PreparedTranslation:
    if status.missing:
        return prepare_missing_translation(paths, locale_directory, status)
    return prepare_outdated_translation(history, status)


def _diff_lines(text: str) -> List[str]:
    lines = text.splitlines(keepends=True)
    if lines and not lines[-1].endswith(("\n", "\r")):
        lines[-1] += "\n"
    return lines


__all__ = [
    "MissingTranslation",
    "OutdatedTranslation",
    "PreparedTranslation",
    "get_page_raw_frontmatter",
    "prepare_missing_translation",
    "prepare_outdated_translation",
    "prepare_translation",
]
