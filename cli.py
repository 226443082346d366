#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from connectors import ConnectorException, ForgeConnector, GitHubConnector, GitLabConnector
from connectors.base import MAX_PER_PAGE
from processors.history import ExportConfig, export_history
from sinks import DELIMITERS, DelimitedRowSink
from sinks.delimited import HEADER
from utils import _parse_since, default_since

REPO_ROOT = Path(__file__).resolve().parent

logger = logging.getLogger(__name__)


def _load_dotenv(path: Path) -> int:
    """
    Load KEY=VALUE lines from a .env file into os.environ.

    Variables already set in the environment win. Returns the number of
    variables loaded.
    """
    if not path.exists():
        return 0
    loaded = 0
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key or key in os.environ:
            continue
        if (len(value) >= 2) and ((value[0] == value[-1]) and value[0] in {"'", '"'}):
            value = value[1:-1]
        os.environ[key] = value
        loaded += 1
    return loaded


def _parse_since_arg(value: str) -> datetime:
    try:
        return _parse_since(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}', expected YYYY-MM-DD"
        ) from exc


def _parse_per_page(value: str) -> int:
    try:
        per_page = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid page size '{value}'") from exc
    if not 1 <= per_page <= MAX_PER_PAGE:
        raise argparse.ArgumentTypeError(
            f"--per-page must be between 1 and {MAX_PER_PAGE}"
        )
    return per_page


def _config_from_args(ns: argparse.Namespace) -> ExportConfig:
    return ExportConfig(
        owner=ns.owner,
        repo=ns.repo,
        since=ns.since,
        per_page=ns.per_page,
        include_pull_request_issues=ns.include_pr_issues,
    )


def _run_export(ns: argparse.Namespace, connector: ForgeConnector) -> int:
    config = _config_from_args(ns)
    sink = DelimitedRowSink(
        sys.stdout,
        delimiter=DELIMITERS["tab" if ns.tab else "comma"],
        header=HEADER if ns.header else None,
    )
    logger.info(
        f"Exporting {config.scope.full_name} history since {config.since.date().isoformat()}"
    )
    try:
        summary = export_history(connector, config, sink)
    except ConnectorException as e:
        logger.error(f"Export of {config.scope.full_name} failed: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1
    finally:
        connector.close()

    logger.info(f"Wrote {sink.rows_written} rows ({summary.total} items)")
    return 0


def _cmd_export_github(ns: argparse.Namespace) -> int:
    token = ns.auth or os.getenv("GITHUB_TOKEN") or os.getenv("GITHUBTOKEN") or ""
    username = ns.username or os.getenv("GITHUB_USERNAME") or ""
    password = ns.password or os.getenv("GITHUB_PASSWORD") or ""

    connector = GitHubConnector(
        token=token or None,
        login=username or None,
        password=password or None,
        base_url=ns.base_url,
        per_page=ns.per_page,
    )
    if not connector.authenticated:
        logger.warning(
            "No GitHub credentials (pass --auth or set GITHUB_TOKEN); "
            "requests are unauthenticated and heavily rate limited."
        )
    return _run_export(ns, connector)


def _cmd_export_gitlab(ns: argparse.Namespace) -> int:
    token = ns.auth or os.getenv("GITLAB_TOKEN") or ""

    connector = GitLabConnector(
        url=ns.gitlab_url,
        private_token=token or None,
        per_page=ns.per_page,
    )
    if not connector.authenticated:
        logger.warning(
            "No GitLab token (pass --auth or set GITLAB_TOKEN); "
            "only public projects are visible."
        )
    return _run_export(ns, connector)


def _add_export_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--owner", required=True, help="Repository owner/org.")
    parser.add_argument("-r", "--repo", required=True, help="Repository name.")
    parser.add_argument(
        "-s",
        "--since",
        type=_parse_since_arg,
        default=default_since(),
        help="Export items created on or after this UTC day (YYYY-MM-DD). "
        "Defaults to one month ago.",
    )
    parser.add_argument(
        "-t", "--tab", action="store_true", help="Use tab-separated output."
    )
    parser.add_argument(
        "--header", action="store_true", help="Write a header row first."
    )
    parser.add_argument(
        "--per-page",
        type=_parse_per_page,
        default=MAX_PER_PAGE,
        help=f"Items per API page (1-{MAX_PER_PAGE}).",
    )
    parser.add_argument(
        "--include-pr-issues",
        action="store_true",
        help="Keep pull requests that the issues listing also returns.",
    )
    parser.add_argument("--auth", help="API token.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forge-history",
        description="Export a repository's issue and pull request history as CSV/TSV.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING). Defaults to env LOG_LEVEL or INFO.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- export ----
    export = sub.add_parser("export", help="Write history rows to stdout.")
    export_sub = export.add_subparsers(dest="source", required=True)

    gh = export_sub.add_parser("github", help="Export from GitHub.")
    _add_export_arguments(gh)
    gh.add_argument(
        "--username", help="GitHub username (defaults to GITHUB_USERNAME)."
    )
    gh.add_argument(
        "--password", help="GitHub password (defaults to GITHUB_PASSWORD)."
    )
    gh.add_argument("--base-url", help="GitHub Enterprise API URL.")
    gh.set_defaults(func=_cmd_export_github)

    gl = export_sub.add_parser("gitlab", help="Export from GitLab.")
    _add_export_arguments(gl)
    gl.add_argument(
        "--gitlab-url",
        default=os.getenv("GITLAB_URL", "https://gitlab.com"),
        help="GitLab instance URL.",
    )
    gl.set_defaults(func=_cmd_export_gitlab)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if os.getenv("DISABLE_DOTENV", "").strip().lower() not in {
        "1",
        "true",
        "yes",
        "on",
    }:
        _load_dotenv(REPO_ROOT / ".env")

    parser = build_parser()
    ns = parser.parse_args(argv)

    level_name = str(getattr(ns, "log_level", "") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    func = getattr(ns, "func", None)
    if func is None:
        parser.print_help()
        return 2
    return int(func(ns))


if __name__ == "__main__":
    raise SystemExit(main())
