"""Entry points for syncing an organization's repositories and exporting their logs."""

from __future__ import annotations

import shutil
import sqlite3
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from gitlog_report.errors import DependencyError, ReportError, SinkError, ValidationError
from gitlog_report.report.codec import CSV_KIND
from gitlog_report.report.sinks import ReportSink, build_sinks, ensure_dir, write_records
from gitlog_report.retrieval.http_client import check_connectivity, set_token
from gitlog_report.retrieval.organization import get_repo_counts, get_repo_name, validate_organization
from gitlog_report.sync.log_parser import LogParseStats, parse_commit_log
from gitlog_report.sync.repository import SyncState, repo_path, sync_repository

from .config import TOOL_NAME, RunSettings, parse_args, resolve_settings

REQUIRED_TOOLS = ("git",)
REPORT_DATE_FORMAT = "%Y-%m-%d-%H%M%S"


@dataclass
class RunSummary:
    """Aggregate counters for one invocation."""

    organization: str
    public_repo_count: int = 0
    private_repo_count: int = 0
    new_repo_count: int = 0
    record_count: int = 0
    skipped_line_count: int = 0
    report_file: Optional[Path] = None
    database_file: Optional[Path] = None

    @property
    def total_repo_count(self) -> int:
        return self.public_repo_count + self.private_repo_count


def check_dependencies(tools=REQUIRED_TOOLS) -> None:
    """Fail once, up front, when a required executable is not on PATH."""
    for tool in tools:
        if shutil.which(tool) is None:
            raise DependencyError(f"{tool} required")


def _say(settings: RunSettings, message: str) -> None:
    if not settings.quiet:
        print(message)


def process_repo(settings: RunSettings, repo_name: str, sinks: List[ReportSink],
                 summary: RunSummary) -> SyncState:
    """Sync one repository and stream its log into every sink."""
    state = sync_repository(
        settings.organization,
        repo_name,
        settings.projects_path,
        clone_url_template=settings.clone_url_template,
        verbose=settings.verbose,
    )
    if state is SyncState.NEW:
        summary.new_repo_count += 1

    stats = LogParseStats()
    records = parse_commit_log(
        repo_path(settings.projects_path, repo_name),
        repo_name,
        stats=stats,
        verbose=settings.verbose,
    )
    written = write_records(records, sinks)
    summary.record_count += written
    summary.skipped_line_count += stats.skipped
    _say(settings, f"    {state.value}: {written} commits")
    return state


def finalize_sinks(sinks: List[ReportSink], summary: RunSummary) -> None:
    """Seal every sink, check each holds ``record_count`` rows, then promote them all.

    Nothing reaches a final path until every working copy has passed the count
    check; the caller discards already promoted files if a later promotion fails.
    """
    for sink in sinks:
        sink.seal()

    for sink in sinks:
        try:
            stored = sink.count_records(sink.working_path)
        except (OSError, sqlite3.Error) as exc:
            raise SinkError(f"Unable to count {sink.kind} records: {exc}") from exc
        if sink.count != summary.record_count or stored != summary.record_count:
            raise SinkError(
                f"{sink.kind} report holds {stored} records, expected {summary.record_count}"
            )

    for sink in sinks:
        final_path = sink.promote()
        if sink.kind == CSV_KIND:
            summary.report_file = final_path
        else:
            summary.database_file = final_path


def run_pipeline(settings: RunSettings, timestamp: Optional[str] = None) -> RunSummary:
    """Validate, enumerate, sync, parse and write; any ReportError aborts the run."""
    check_dependencies()
    set_token(settings.token)

    org = settings.organization
    if not validate_organization(org):
        raise ValidationError(f"Organization {org} does not exist")

    summary = RunSummary(organization=org)
    _say(settings, f"Loading {org} repositories...")
    summary.public_repo_count, summary.private_repo_count = get_repo_counts(org)
    total = summary.total_repo_count

    timestamp = timestamp or datetime.now().strftime(REPORT_DATE_FORMAT)
    sinks = build_sinks(settings.formats, settings.report_dir, TOOL_NAME, timestamp)
    ensure_dir(settings.projects_path)
    completed = False
    try:
        for sink in sinks:
            sink.open()

        for page in range(1, total + 1):
            check_connectivity()
            repo_name = get_repo_name(org, page)
            if not repo_name:
                print(f"[warn] page {page} of {total} returned no repository; stopping early")
                break
            _say(settings, f"  parsing {repo_name} repository ({page} of {total})...")
            process_repo(settings, repo_name, sinks, summary)

        finalize_sinks(sinks, summary)
        completed = True
    finally:
        for sink in sinks:
            sink.cleanup(discard_final=not completed)
    return summary


def format_summary(summary: RunSummary) -> str:
    org = summary.organization
    lines = [
        f"{summary.new_repo_count} new {org} repositories cloned",
        f"{summary.public_repo_count} public {org} repositories",
        f"{summary.private_repo_count} private {org} repositories",
        "",
        f"{summary.total_repo_count} total {org} repositories",
        "",
        f"{summary.record_count} logs parsed",
    ]
    if summary.skipped_line_count:
        lines.append(f"{summary.skipped_line_count} malformed log lines skipped")
    for path in (summary.report_file, summary.database_file):
        if path is not None:
            lines.append(f"wrote {path}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    try:
        settings = resolve_settings(parse_args(argv))
        summary = run_pipeline(settings)
    except ReportError as exc:
        print(f"[error] {exc.message}", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("[error] interrupted", file=sys.stderr)
        return 130
    print(format_summary(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
