"""Command-line parsing and immutable run settings for the report pipeline."""

from __future__ import annotations

import argparse
import getpass
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, NoReturn, Optional, Tuple

from gitlog_report.errors import ConfigurationError
from gitlog_report.report.codec import CSV_KIND, SQLITE_KIND
from gitlog_report.secrets import resolve_token
from gitlog_report.sync.repository import DEFAULT_CLONE_URL

TOOL_NAME = "git-report"
DEFAULT_PROJECTS_ROOT = Path("~/Projects")
DEFAULT_REPORT_DIR = DEFAULT_PROJECTS_ROOT / TOOL_NAME
TOKEN_URL = "https://github.com/settings/tokens/new"

# (prompt text, secret) -> answer; returning "" means the user gave nothing.
Prompter = Callable[[str, bool], str]


@dataclass(frozen=True)
class RunSettings:
    """Resolved, read-only settings shared by every stage of a run."""

    formats: Tuple[str, ...]
    organization: str
    token: str
    projects_root: Path
    report_dir: Path
    clone_url_template: str = DEFAULT_CLONE_URL
    quiet: bool = False
    verbose: bool = False

    @property
    def projects_path(self) -> Path:
        """Directory holding one clone per repository of the organization."""
        return self.projects_root / self.organization

    @property
    def brand_name(self) -> str:
        return self.organization[:1].upper() + self.organization[1:]


class ReportArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit through ConfigurationError (code 1)."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise ConfigurationError(f"{self.prog}: {message}")


def build_arg_parser() -> argparse.ArgumentParser:
    """Return the CLI parser used by the report entry point."""

    parser = ReportArgumentParser(
        prog=TOOL_NAME,
        description="Sync every repository of a GitHub organization and export its git logs.",
        epilog=(
            "examples:\n"
            f"  {TOOL_NAME} --org-name <organization> --sqlite --csv\n"
            f"  {TOOL_NAME} --org-name <organization> --sqlite --quiet\n"
            f"  {TOOL_NAME} --org-name <organization> --csv --token-file ~/{TOOL_NAME}.token"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--csv", action="store_true", help="write a CSV report")
    parser.add_argument("-s", "--sqlite", action="store_true", help="write an SQLite database")
    parser.add_argument("-o", "--org-name", dest="org_name", help="github.com organization name")
    parser.add_argument("-t", "--token", help=f"personal access token ({TOKEN_URL})")
    parser.add_argument("-f", "--token-file", dest="token_file", help="path to a file holding the token")
    parser.add_argument("-q", "--quiet", action="store_true", help="only print the final summary")
    parser.add_argument("-v", "--verbose", action="store_true", help="echo git commands and output")
    parser.add_argument("--projects-root", default=None,
                        help="parent directory of the per-organization clone folder (default ~/Projects)")
    parser.add_argument("--report-dir", default=None,
                        help=f"where reports are written (default ~/Projects/{TOOL_NAME})")
    parser.add_argument("--clone-url", default=None,
                        help="clone URL template with {org} and {repo} placeholders")
    parser.add_argument("--no-prompt", action="store_true",
                        help="fail instead of prompting for missing values")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; accepts argv overrides for testing."""

    parser = build_arg_parser()
    return parser.parse_args(argv)


def console_prompter(message: str, secret: bool = False) -> str:
    """Default prompter reading from the terminal."""

    reader = getpass.getpass if secret else input
    try:
        return reader(f"{message} ").strip()
    except EOFError:
        return ""


def _prompt_formats(prompter: Prompter) -> Tuple[str, ...]:
    answer = prompter("Select report format(s) [csv, sqlite, both]:", False).lower()
    if answer in ("both", "all"):
        return (CSV_KIND, SQLITE_KIND)
    chosen = [kind for kind in (CSV_KIND, SQLITE_KIND) if kind in answer.replace(",", " ").split()]
    return tuple(chosen)


def resolve_settings(args: Optional[argparse.Namespace] = None,
                     prompter: Optional[Prompter] = None,
                     interactive: Optional[bool] = None) -> RunSettings:
    """Build RunSettings, prompting for missing values when allowed.

    Prompting happens only when ``interactive`` is true (default: stdin is a TTY
    and ``--no-prompt`` was not given). Anything still missing afterwards is a
    ConfigurationError.
    """

    args = args or parse_args()
    if interactive is None:
        interactive = not args.no_prompt and sys.stdin.isatty()
    prompter = prompter or console_prompter

    formats: Tuple[str, ...] = tuple(
        kind for kind, enabled in ((CSV_KIND, args.csv), (SQLITE_KIND, args.sqlite)) if enabled
    )
    if not formats and interactive:
        formats = _prompt_formats(prompter)
    if not formats:
        raise ConfigurationError("Report format not specified")

    organization = (args.org_name or "").strip()
    if not organization and interactive:
        organization = prompter("Please enter an organization name:", False)
    if not organization:
        raise ConfigurationError("Organization name not specified")

    token, source = resolve_token(args.token, args.token_file)
    if token and args.verbose:
        print(f"using access token from {source}")
    if not token and interactive:
        token = prompter(f"Please enter a personal access token ({TOKEN_URL}):", True)
    if not token:
        raise ConfigurationError("Personal access token not specified")

    projects_root = Path(args.projects_root or DEFAULT_PROJECTS_ROOT).expanduser()
    report_dir = Path(args.report_dir or DEFAULT_REPORT_DIR).expanduser()

    return RunSettings(
        formats=formats,
        organization=organization.lower(),
        token=token,
        projects_root=projects_root,
        report_dir=report_dir,
        clone_url_template=args.clone_url or DEFAULT_CLONE_URL,
        quiet=bool(args.quiet),
        verbose=bool(args.verbose),
    )


__all__ = [
    "TOOL_NAME",
    "DEFAULT_PROJECTS_ROOT",
    "DEFAULT_REPORT_DIR",
    "Prompter",
    "RunSettings",
    "ReportArgumentParser",
    "build_arg_parser",
    "parse_args",
    "console_prompter",
    "resolve_settings",
]
