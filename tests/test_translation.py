"""Tests for starlight_i18n.translation."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from starlight_i18n.errors import TranslationError
from starlight_i18n.locator import StarlightPaths
from starlight_i18n.models import Commit, Page, PageStatus
from starlight_i18n.translation import (
    MissingTranslation,
    OutdatedTranslation,
    get_page_raw_frontmatter,
    prepare_missing_translation,
    prepare_outdated_translation,
    prepare_translation,
)
from tests._fixtures.site_builder import EPOCH, SiteBuilder, changes


class FakeRevisions:
    def __init__(self, reference: Optional[Commit], texts: Dict[str, str]) -> None:
        self.reference = reference
        self.texts = texts
        self.before_calls: List[Tuple[Path, datetime]] = []

    def commit_before_date(self, path: Path, date: datetime) -> Optional[Commit]:
        self.before_calls.append((path, date))
        return self.reference

    def show_at_ref(self, path: Path, ref: str) -> str:
        return self.texts[ref]


def _paths(site_builder: SiteBuilder) -> StarlightPaths:
    config = site_builder.write_config("export default {};\n")
    return StarlightPaths(config=config, content=site_builder.content, workspace=site_builder.root)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("---\ntitle: Home\n---\n\n# Home\n", "---\ntitle: Home\n---"),
        ("---\r\ntitle: Home\r\n---\r\nBody", "---\r\ntitle: Home\r\n---"),
        ("---\n---\nBody", "---\n---"),
        ("---\ntitle: Only\n---", "---\ntitle: Only\n---"),
        ("# No frontmatter\n---\n", ""),
        ("---\ntitle: Unclosed\n", ""),
    ],
)
def test_get_page_raw_frontmatter(tmp_path: Path, text: str, expected: str) -> None:
    page = tmp_path / "page.md"
    page.write_bytes(text.encode("utf-8"))

    assert get_page_raw_frontmatter(page) == expected


def test_prepare_missing_translation_seeds_frontmatter(site_builder: SiteBuilder) -> None:
    written = site_builder.write_pages(
        {
            "guides/intro.md": """
            ---
            title: Introduction
            description: Getting started
            ---

            Welcome.
            """
        }
    )
    status = PageStatus(
        missing=True,
        outdated=False,
        source=Page(id="guides/intro.md", file=written["guides/intro.md"], changes=changes(1)),
    )

    prepared = prepare_missing_translation(_paths(site_builder), "fr", status)

    assert isinstance(prepared, MissingTranslation)
    assert prepared.translation == site_builder.content / "fr" / "guides" / "intro.md"
    assert prepared.translation.read_text(encoding="utf-8") == (
        "---\ntitle: Introduction\ndescription: Getting started\n---\n\n"
    )


def test_prepare_missing_translation_without_frontmatter(site_builder: SiteBuilder) -> None:
    written = site_builder.write_pages({"index.md": "# Home\n"})
    status = PageStatus(
        missing=True,
        outdated=False,
        source=Page(id="index.md", file=written["index.md"], changes=changes(1)),
    )

    prepared = prepare_missing_translation(_paths(site_builder), "ja", status)

    assert prepared.translation.read_text(encoding="utf-8") == "\n\n"


def _outdated_status(site_builder: SiteBuilder) -> PageStatus:
    written = site_builder.write_pages({"index.md": "# Home\n", "fr/index.md": "# Accueil\n"})
    return PageStatus(
        missing=False,
        outdated=True,
        source=Page(id="index.md", file=written["index.md"], changes=changes(9, 8)),
        page=Page(
            id="index.md",
            file=written["fr/index.md"],
            changes=changes(4),
            locale_directory="fr",
        ),
    )


def test_prepare_outdated_translation_diffs_source(site_builder: SiteBuilder) -> None:
    status = _outdated_status(site_builder)
    reference = Commit(hash="abcdef0123", message="Add home", date=EPOCH)
    history = FakeRevisions(
        reference,
        {
            "abcdef0123": "# Home\n\nOld intro.\n",
            "last0009": "# Home\n\nNew intro.\n",
        },
    )

    prepared = prepare_outdated_translation(history, status)

    assert isinstance(prepared, OutdatedTranslation)
    assert history.before_calls == [(status.source.file, status.page.changes.last.date)]
    assert prepared.translation == status.page.file
    assert prepared.reference_ref == "abcdef0123"
    assert prepared.latest_ref == "last0009"
    assert "-Old intro." in prepared.diff
    assert "+New intro." in prepared.diff
    assert "index.md@abcdef0" in prepared.diff


def test_prepare_outdated_translation_without_reference(site_builder: SiteBuilder) -> None:
    status = _outdated_status(site_builder)

    with pytest.raises(TranslationError, match="reference commit to translate 'index.md'"):
        prepare_outdated_translation(FakeRevisions(None, {}), status)


def test_prepare_outdated_translation_requires_page(site_builder: SiteBuilder) -> None:
    status = _outdated_status(site_builder)
    orphan = PageStatus(missing=False, outdated=True, source=status.source)

    with pytest.raises(TranslationError, match="Missing page reference"):
        prepare_outdated_translation(FakeRevisions(None, {}), orphan)


def test_prepare_translation_dispatches_on_status(site_builder: SiteBuilder) -> None:
    status = _outdated_status(site_builder)
    missing = PageStatus(missing=True, outdated=False, source=status.source)
    history = FakeRevisions(
        Commit(hash="ref0", message="", date=EPOCH), {"ref0": "a\n", "last0009": "a\n"}
    )
    paths = _paths(site_builder)

    created = prepare_translation(paths, history, "ja", missing)
    updated = prepare_translation(paths, history, "fr", status)

    assert isinstance(created, MissingTranslation)
    assert isinstance(updated, OutdatedTranslation)
    assert updated.diff == ""


def test_prepare_missing_translation_keeps_crlf_frontmatter(site_builder: SiteBuilder) -> None:
    source = site_builder.content / "index.md"
    source.parent.mkdir(parents=True, exist_ok=True)
    source.write_bytes(b"---\r\ntitle: Home\r\n---\r\n\r\n# Home\r\n")
    status = PageStatus(
        missing=True,
        outdated=False,
        source=Page(id="index.md", file=source, changes=changes(1)),
    )

    prepared = prepare_missing_translation(_paths(site_builder), "fr", status)

    assert prepared.translation.read_bytes() == b"---\r\ntitle: Home\r\n---\n\n"


def test_prepare_outdated_translation_diff_without_trailing_newline(
    site_builder: SiteBuilder,
) -> None:
    status = _outdated_status(site_builder)
    history = FakeRevisions(
        Commit(hash="ref0", message="", date=EPOCH), {"ref0": "a\nb", "last0009": "a\nb3"}
    )

    prepared = prepare_outdated_translation(history, status)

    assert "-b\n+b3\n" in prepared.diff
    assert all(not line.startswith("-b+") for line in prepared.diff.splitlines())
