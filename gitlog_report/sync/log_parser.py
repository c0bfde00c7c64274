"""Turn ``git log`` output for a synchronized clone into CommitRecord values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional

from gitlog_report.errors import ParseError
from gitlog_report.report.codec import FIELDS, CommitRecord, capitalize_first, sanitize

from .gitcommands import GitCommandError, run_git, stream_git

# ASCII unit separator; git renders %x1f as this byte and subjects never carry it.
FIELD_SEPARATOR = "\x1f"
LOG_FIELDS = ("%h", "%cn", "%ce", "%cd", "%s")


@dataclass
class LogParseStats:
    """Per-repository counters filled in while the record stream is consumed."""

    parsed: int = 0
    skipped: int = 0


def log_format(repo_name: str) -> str:
    """Build the ``--pretty=format:`` template, repository name first."""
    literal = repo_name.replace("%", "%%")
    return "%x1f".join([literal, *LOG_FIELDS])


def log_command(repo_name: str) -> list:
    return ["--no-pager", "log", "--date=short", f"--pretty=format:{log_format(repo_name)}"]


def parse_log_line(line: str) -> Optional[CommitRecord]:
    """Sanitize and split one raw log line; None when it is not six fields."""
    fields = sanitize(line).split(FIELD_SEPARATOR)
    if len(fields) != len(FIELDS):
        return None
    repository, commit_hash, committer, email, date, comments = fields
    return CommitRecord(
        repository=repository,
        hash=commit_hash,
        committer=capitalize_first(committer),
        email=email,
        date=date,
        comments=comments,
    )


def parse_log_lines(lines: Iterable[str], stats: Optional[LogParseStats] = None,
                    strict: bool = False) -> Iterator[CommitRecord]:
    """Yield a record per well-formed line; malformed lines are skipped or fatal."""
    stats = stats if stats is not None else LogParseStats()
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        record = parse_log_line(line)
        if record is None:
            if strict:
                raise ParseError(f"Malformed log line {lineno}: {line[:120]!r}")
            stats.skipped += 1
            print(f"[warn] skipping malformed log line {lineno}: {line[:120]!r}")
            continue
        stats.parsed += 1
        yield record


def has_commits(path: Path, verbose: bool = False) -> bool:
    """True when the clone has a resolvable HEAD (i.e. at least one commit)."""
    try:
        run_git(["rev-parse", "--quiet", "--verify", "HEAD"], cwd=path, verbose=verbose)
    except GitCommandError:
        return False
    return True


def parse_commit_log(repo_path: str | Path, repo_name: str, *,
                     stats: Optional[LogParseStats] = None, strict: bool = False,
                     verbose: bool = False) -> Iterator[CommitRecord]:
    """Lazily stream records for ``repo_name``, newest commit first.

    A missing or empty directory, or a clone without commits, yields nothing.
    """
    path = Path(repo_path)
    if not path.is_dir() or not any(path.iterdir()):
        return
    if not has_commits(path, verbose):
        return

    lines = stream_git(log_command(repo_name), cwd=path, verbose=verbose)
    try:
        yield from parse_log_lines(lines, stats=stats, strict=strict)
    except GitCommandError as exc:
        raise ParseError(f"Unable to parse git log for {repo_name}: {exc}") from exc


__all__ = [
    "FIELD_SEPARATOR",
    "LOG_FIELDS",
    "LogParseStats",
    "log_format",
    "log_command",
    "parse_log_line",
    "parse_log_lines",
    "has_commits",
    "parse_commit_log",
]
