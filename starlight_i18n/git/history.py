"""Git history queries used to date content pages."""

from __future__ import annotations

import re
import subprocess
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..errors import HistoryError
from ..logging import get_logger
from ..models import Commit, GitFileChange, GitFileChanges

# Commits whose message matches are irrelevant to translation staleness.
IGNORED_COMMIT_PATTERN = re.compile(r"(en-only|typo|broken link|i18nready|i18nignore)", re.IGNORECASE)

_FIELD_SEPARATOR = "\x1f"
_RECORD_SEPARATOR = "\x1e"
_LOG_FORMAT = "%H%x1f%cI%x1f%B%x1e"

Runner = Callable[..., str]


class GitHistory:
    """Reads commit history for files of a single git repository."""

    def __init__(self, workspace: Path | str, runner: Runner | None = None) -> None:
        self._workspace = Path(workspace)
        self._runner = runner or self._default_runner
        self._toplevel: Optional[Path] = None
        self._lock = threading.Lock()
        self.logger = get_logger("git")

    def repository_root(self) -> Path:
        """Return the repository top-level, resolved once per instance."""
        with self._lock:
            if self._toplevel is None:
                try:
                    output = self._run(
                        ["git", "rev-parse", "--show-toplevel"], cwd=self._workspace
                    )
                except (OSError, subprocess.CalledProcessError) as exc:
                    raise HistoryError("Failed to find a unique git repository.") from exc
                toplevel = output.strip()
                if not toplevel:
                    raise HistoryError("Failed to find a unique git repository.")
                self._toplevel = Path(toplevel)
                self.logger.debug("Using git repository at %s", self._toplevel)
            return self._toplevel

    def log(self, path: Path | str) -> List[Commit]:
        """Return the commits touching ``path``, most recent first."""
        root = self.repository_root()
        relative = self._relative(root, Path(path))
        try:
            output = self._run(
                ["git", "log", f"--format={_LOG_FORMAT}", "--", relative], cwd=root
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise HistoryError(f"Failed to read the git history of '{path}'.") from exc
        return _parse_log(output)

    def get_file_changes(self, path: Path | str) -> GitFileChanges:
        """Return the last commit and the last translation-relevant commit."""
        commits = self.log(path)
        if not commits:
            raise HistoryError(f"Failed to find the last commit for the file at '{path}'.")

        last = commits[0]
        previous = next(
            (commit for commit in commits if not IGNORED_COMMIT_PATTERN.search(commit.message)),
            last,
        )
        if last.date is None or previous.date is None:
            raise HistoryError(f"Failed to find commit dates for the file at '{path}'.")

        return GitFileChanges(
            last=GitFileChange(date=last.date, ref=last.hash),
            previous=GitFileChange(date=previous.date, ref=previous.hash),
        )

    def commit_before_date(self, path: Path | str, date: datetime) -> Optional[Commit]:
        """Return the newest commit older than ``date``, or the oldest dated one."""
        current: Optional[Commit] = None
        for commit in self.log(path):
            if commit.date is None:
                continue
            current = commit
            if commit.date < date:
                break
        return current

    def show_at_ref(self, path: Path | str, ref: str) -> str:
        """Return the content of ``path`` as recorded in commit ``ref``."""
        root = self.repository_root()
        relative = self._relative(root, Path(path))
        try:
            return self._run(["git", "show", f"{ref}:{relative}"], cwd=root)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise HistoryError(f"Failed to read '{path}' at revision {ref}.") from exc

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _relative(root: Path, path: Path) -> str:
        candidate = path if path.is_absolute() else root / path
        try:
            return candidate.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def _run(self, args: Iterable[str], *, cwd: Path) -> str:
        return self._runner(args, cwd=cwd, capture_output=True)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _parse_log(output: str) -> List[Commit]:
    commits: List[Commit] = []
    for record in output.split(_RECORD_SEPARATOR):
        record = record.lstrip("\n")
        if not record.strip():
            continue
        parts = record.split(_FIELD_SEPARATOR, 2)
        if len(parts) != 3:
            continue
        ref, raw_date, message = parts
        commits.append(Commit(hash=ref.strip(), message=message.strip(), date=_parse_date(raw_date)))
    return commits


def _parse_date(value: str) -> Optional[datetime]:
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


__all__ = ["GitHistory", "IGNORED_COMMIT_PATTERN"]
