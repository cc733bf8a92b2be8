"""Exception hierarchy shared by the starlight-i18n components."""

from __future__ import annotations

from typing import Sequence


class I18nError(RuntimeError):
    """Base class for every failure raised by starlight-i18n."""


class ParseError(I18nError):
    """Raised when source text is not syntactically valid."""

    def __init__(self, message: str, diagnostics: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class ImportReadError(ParseError):
    """Raised when an imported JSON locales table cannot be read or parsed."""


class ExtractionError(I18nError):
    """Raised when a required structure is missing from the Astro configuration."""


class InvariantViolation(I18nError):
    """Raised when extracted or discovered data leaves nothing to compare."""


class HistoryError(I18nError):
    """Raised when version-control history is unavailable for a file."""


class ComputationCancelled(I18nError):
    """Raised when a status computation is cancelled or exceeds its deadline."""


class TranslationError(I18nError):
    """Raised when a translation cannot be prepared."""


__all__ = [
    "ComputationCancelled",
    "ExtractionError",
    "HistoryError",
    "I18nError",
    "ImportReadError",
    "InvariantViolation",
    "ParseError",
    "TranslationError",
]
