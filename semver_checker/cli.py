from __future__ import annotations

import argparse
import logging
import os
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler

from .config import INPUT_KEYS, CheckerConfig, ConfigError
from .display import (
    display_issues,
    display_manual_commands,
    display_summary,
    emit_annotations,
    export_issues_json,
)
from .github_client import GitHubAPIError, GitHubClient
from .remediation import RemediationSummary, execute_remediation, run_checks, unresolved_errors
from .snapshot import load_repository_state

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_ERROR = 2


def _option_dest(key: str) -> str:
    return key.replace("-", "_")


def _env_input(key: str) -> Optional[str]:
    """Read an action input the way the runner exports it (INPUT_<NAME>)."""
    upper = key.upper()
    for name in (f"INPUT_{upper}", f"INPUT_{upper.replace('-', '_')}"):
        value = os.environ.get(name)
        if value is not None:
            return value
    return None


def collect_inputs(args: argparse.Namespace) -> dict[str, str]:
    inputs = {}
    for key in INPUT_KEYS:
        value = getattr(args, _option_dest(key))
        if value is None:
            value = _env_input(key)
        if value is not None:
            inputs[key] = value
    return inputs


def _split_repository(name: str) -> tuple[str, str]:
    if "/" not in name:
        raise ConfigError(f"Repository '{name}' must use owner/repo format.")
    owner, repo = (part.strip() for part in name.split("/", maxsplit=1))
    if not owner or not repo:
        raise ConfigError(f"Repository '{name}' must name both an owner and a repo.")
    return owner, repo


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Check a GitHub Actions repository's version tags, branches and releases"
            " against semantic versioning conventions, and optionally fix them."
        )
    )
    parser.add_argument(
        "--repository",
        default=os.environ.get("GITHUB_REPOSITORY"),
        help="owner/repo to check. Defaults to GITHUB_REPOSITORY.",
    )
    parser.add_argument("--token", default=None, help="GitHub token. Defaults to GITHUB_TOKEN or the gh CLI.")
    parser.add_argument("--api-url", default=None, help="GitHub API base URL. Defaults to GITHUB_API_URL.")
    parser.add_argument("--floating-versions-use", choices=("tags", "branches"), default=None)
    parser.add_argument("--ignore-preview-releases", default=None, help="true or false")
    parser.add_argument("--check-releases", choices=("error", "warning", "none"), default=None)
    parser.add_argument("--check-release-immutability", choices=("error", "warning", "none"), default=None)
    parser.add_argument("--check-marketplace", choices=("error", "warning", "none"), default=None)
    parser.add_argument("--check-minor-version", default=None, help="true or false")
    parser.add_argument(
        "--ignore-versions",
        default=None,
        help="Versions to skip: comma or newline separated, or a JSON array. Globs allowed.",
    )
    parser.add_argument("--auto-fix", default=None, help="true or false")
    parser.add_argument(
        "--json-out",
        default=None,
        help="Optional output path to write the issues as JSON.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # urllib3 debug output drowns out our own at -v
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = CheckerConfig.from_inputs(collect_inputs(args))
        if not args.repository:
            raise ConfigError("No repository given. Pass --repository or set GITHUB_REPOSITORY.")
        owner, repo = _split_repository(args.repository)
    except ConfigError as error:
        logger.error("Configuration error: %s", error)
        return EXIT_ERROR

    summary = RemediationSummary()
    try:
        client = GitHubClient(owner, repo, token=args.token, api_url=args.api_url)
        state = load_repository_state(client, config)
        issues = run_checks(state, config)
        if config.auto_fix:
            summary = execute_remediation(state)
    except GitHubAPIError as error:
        logger.error("GitHub API error: %s", error)
        return EXIT_ERROR

    display_issues(issues)
    display_summary(summary)
    display_manual_commands(state, issues)
    emit_annotations(issues)

    if args.json_out:
        export_issues_json(state, issues, args.json_out)

    return EXIT_ISSUES if unresolved_errors(issues) else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
