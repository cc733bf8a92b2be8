"""Helpers for laying out throwaway Starlight sites in tests."""

from __future__ import annotations

import textwrap
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Mapping

from starlight_i18n.models import GitFileChange, GitFileChanges

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def changes(last_day: int, previous_day: int | None = None) -> GitFileChanges:
    """Build file changes dated ``N`` days after a fixed epoch."""
    previous_day = last_day if previous_day is None else previous_day
    return GitFileChanges(
        last=GitFileChange(date=EPOCH + timedelta(days=last_day), ref=f"last{last_day:04d}"),
        previous=GitFileChange(
            date=EPOCH + timedelta(days=previous_day), ref=f"prev{previous_day:04d}"
        ),
    )


class FakeHistory:
    """File history keyed by path relative to the site content root."""

    def __init__(self, content_root: Path, dates: Mapping[str, GitFileChanges]) -> None:
        self._content_root = content_root
        self._dates = dict(dates)
        self.calls: list[Path] = []

    def get_file_changes(self, path: Path) -> GitFileChanges:
        self.calls.append(path)
        return self._dates[path.relative_to(self._content_root).as_posix()]


class SiteBuilder:
    """Writes files into a throwaway workspace holding a Starlight site."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "site"
        self.root.mkdir()

    @property
    def content(self) -> Path:
        return self.root / "src" / "content" / "docs"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the workspace root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def write_config(self, source: str, name: str = "astro.config.mjs") -> Path:
        self.write({name: source})
        return self.root / name

    def write_pages(self, pages: Mapping[str, str]) -> Dict[str, Path]:
        """Write content pages relative to the content root."""
        written: Dict[str, Path] = {}
        for relative, body in pages.items():
            path = self.content / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(body).lstrip("\n"), encoding="utf-8")
            written[relative] = path
        return written


__all__ = ["EPOCH", "FakeHistory", "SiteBuilder", "changes"]
