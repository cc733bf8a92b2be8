"""CLI entrypoints for starlight-i18n commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ConfigError
from .errors import I18nError
from .logging import configure_logging
from .models import LocaleStatuses, Page, PageStatus
from .orchestrator import Orchestrator
from .translation import MissingTranslation


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the workspace root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="starlight-i18n",
        description="Find missing and outdated translations of a Starlight documentation site.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser(
        "status",
        help="List missing and outdated pages for every locale.",
    )
    _add_verbose_option(status_parser, suppress_default=True)
    _add_path_argument(status_parser)
    status_parser.add_argument(
        "--locale",
        help="Only report the given locale directory (for example `fr`).",
    )
    status_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the statuses as JSON.",
    )

    prepare_parser = subparsers.add_parser(
        "prepare",
        help="Create a missing translation or show the source changes of an outdated one.",
    )
    _add_verbose_option(prepare_parser, suppress_default=True)
    _add_path_argument(prepare_parser)
    prepare_parser.add_argument("--locale", required=True, help="Locale directory to translate.")
    prepare_parser.add_argument(
        "--page", required=True, help="Page id relative to the locale directory."
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for starlight-i18n commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    as_json = bool(getattr(args, "json", False))
    configure_logging(verbose=bool(args.verbose), quiet=as_json)

    orchestrator = Orchestrator()

    if args.command == "status":
        try:
            report = orchestrator.run_status(args.path)
        except (I18nError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        statuses = report.statuses
        if args.locale:
            if args.locale not in statuses:
                parser.exit(1, f"Unknown locale '{args.locale}'.\n")
            statuses = {args.locale: statuses[args.locale]}
        if as_json:
            payload = {name: _locale_to_dict(entry) for name, entry in statuses.items()}
            print(json.dumps(payload, indent=2, ensure_ascii=False))
        else:
            for name, entry in statuses.items():
                print(_format_locale(name, entry))
    elif args.command == "prepare":
        try:
            prepared = orchestrator.run_prepare(args.path, args.locale, args.page)
        except (I18nError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        if prepared is None:
            print(f"'{args.page}' is already up to date.")
        elif isinstance(prepared, MissingTranslation):
            print(f"Translation created at {_relativize(prepared.translation)}")
            print(f"Source: {_relativize(prepared.source)}")
        else:
            print(f"Translation to update: {_relativize(prepared.translation)}")
            print(prepared.diff or "(no source changes)")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _format_locale(name: str, entry: LocaleStatuses) -> str:
    title = f"{entry.locale.label} ({entry.locale.lang or name})"
    if entry.done:
        return f"{title}: nothing left to translate"
    lines = [f"{title}:"]
    for label, group in (("Outdated", entry.outdated), ("Missing", entry.missing)):
        if group:
            lines.append(f"  {label}:")
            lines.extend(f"    {status.source.id}" for status in group)
    return "\n".join(lines)


def _locale_to_dict(entry: LocaleStatuses) -> Dict[str, Any]:
    return {
        "label": entry.locale.label,
        "lang": entry.locale.lang,
        "statuses": [_status_to_dict(status) for status in entry.statuses],
    }


def _status_to_dict(status: PageStatus) -> Dict[str, Any]:
    return {
        "id": status.source.id,
        "missing": status.missing,
        "outdated": status.outdated,
        "source": _page_to_dict(status.source),
        "page": _page_to_dict(status.page),
    }


def _page_to_dict(page: Optional[Page]) -> Optional[Dict[str, Any]]:
    if page is None:
        return None
    return {
        "file": str(page.file),
        "last": {"date": page.changes.last.date.isoformat(), "ref": page.changes.last.ref},
        "previous": {
            "date": page.changes.previous.date.isoformat(),
            "ref": page.changes.previous.ref,
        },
    }


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
