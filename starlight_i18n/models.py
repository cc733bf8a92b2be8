"""Core data models shared across starlight-i18n components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .errors import InvariantViolation

ROOT_LOCALE = "root"


@dataclass(frozen=True)
class Locale:
    """A translatable locale as declared in the Starlight configuration."""

    label: str
    lang: Optional[str] = None
    dir: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, str]) -> Optional["Locale"]:
        """Return a locale when ``record`` carries a string label, else None."""
        label = record.get("label")
        if not isinstance(label, str):
            return None
        lang = record.get("lang")
        direction = record.get("dir")
        return cls(
            label=label,
            lang=lang if isinstance(lang, str) else None,
            dir=direction if isinstance(direction, str) else None,
        )


@dataclass(frozen=True)
class LocalesConfig:
    """Default locale plus every locale that still needs translating."""

    default_locale: str
    locales: Dict[str, Locale]

    def __post_init__(self) -> None:
        if ROOT_LOCALE in self.locales or self.default_locale in self.locales:
            raise InvariantViolation(
                "The locales to translate cannot include the root or default locale."
            )
        if not self.locales:
            raise InvariantViolation("Failed to find any Starlight locale to translate.")


@dataclass(frozen=True)
class Commit:
    """A single commit touching a file, as reported by git log."""

    hash: str
    message: str
    date: Optional[datetime]


@dataclass(frozen=True)
class GitFileChange:
    date: datetime
    ref: str


@dataclass(frozen=True)
class GitFileChanges:
    """Most recent commit and most recent translation-relevant commit for a file."""

    last: GitFileChange
    previous: GitFileChange


@dataclass(frozen=True)
class Page:
    """A content file keyed by its locale-relative identity."""

    id: str
    file: Path
    changes: GitFileChanges
    locale_directory: Optional[str] = None
    locale: Optional[Locale] = None


@dataclass(frozen=True)
class PageStatus:
    """Translation state of one default-locale page for a target locale."""

    missing: bool
    outdated: bool
    source: Page
    page: Optional[Page] = None

    @property
    def up_to_date(self) -> bool:
        return not self.missing and not self.outdated


@dataclass
class LocaleStatuses:
    """Ordered page statuses for a single target locale."""

    locale: Locale
    statuses: List[PageStatus] = field(default_factory=list)

    @property
    def missing(self) -> List[PageStatus]:
        return [status for status in self.statuses if status.missing]

    @property
    def outdated(self) -> List[PageStatus]:
        return [status for status in self.statuses if status.outdated]

    @property
    def done(self) -> bool:
        return all(status.up_to_date for status in self.statuses)


PageStatusesByLocale = Dict[str, LocaleStatuses]


__all__ = [
    "Commit",
    "GitFileChange",
    "GitFileChanges",
    "Locale",
    "LocaleStatuses",
    "LocalesConfig",
    "Page",
    "PageStatus",
    "PageStatusesByLocale",
    "ROOT_LOCALE",
]
