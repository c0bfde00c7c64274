"""Tests for gitlog_report.sync.log_parser covering line splitting and edge cases.

Run with coverage:
    pytest tests/test_log_parser.py --maxfail=1 -v --cov=gitlog_report.sync.log_parser --cov-report=term-missing
"""

from unittest.mock import patch

import pytest

from gitlog_report.errors import ParseError
from gitlog_report.sync import log_parser
from gitlog_report.sync.gitcommands import GitCommandError

SEP = log_parser.FIELD_SEPARATOR


def _line(*fields):
    return SEP.join(fields)


def test_log_format_puts_repository_first():
    fmt = log_parser.log_format("demo")
    assert fmt == "demo%x1f%h%x1f%cn%x1f%ce%x1f%cd%x1f%s"
    assert log_parser.log_format("100%").startswith("100%%")


def test_log_command_requests_short_dates():
    cmd = log_parser.log_command("demo")
    assert cmd[:2] == ["--no-pager", "log"]
    assert "--date=short" in cmd


def test_parse_log_line_capitalizes_committer():
    record = log_parser.parse_log_line(_line("demo", "abc1234", "jane doe", "jane@x.io", "2024-05-01", "init"))
    assert record.committer == "Jane doe"
    assert record.repository == "demo"
    assert record.comments == "init"


def test_parse_log_line_sanitizes_before_split():
    record = log_parser.parse_log_line(
        _line("demo", "abc", "bob", "b@x.io", "2024-05-01", 'fix: "quoted" (thing) & don\'t')
    )
    assert record.comments == "fix quoted thing  don\\'t"


def test_parse_log_line_keeps_pipes_in_subject():
    record = log_parser.parse_log_line(_line("demo", "abc", "bob", "b@x.io", "2024-05-01", "a | b"))
    assert record.comments == "a | b"


def test_parse_log_line_allows_empty_subject():
    record = log_parser.parse_log_line(_line("demo", "abc", "bob", "b@x.io", "2024-05-01", ""))
    assert record is not None
    assert record.comments == ""


def test_parse_log_line_rejects_wrong_field_count():
    assert log_parser.parse_log_line(_line("demo", "abc", "bob")) is None


def test_parse_log_lines_skips_malformed_with_warning(capsys):
    stats = log_parser.LogParseStats()
    lines = [
        _line("demo", "a1", "ann", "a@x", "2024-01-02", "second"),
        "garbage",
        "",
        _line("demo", "a0", "ann", "a@x", "2024-01-01", "first"),
    ]
    records = list(log_parser.parse_log_lines(lines, stats=stats))
    assert [r.hash for r in records] == ["a1", "a0"]
    assert records[1].comments == "first"
    assert stats.parsed == 2 and stats.skipped == 1
    assert "[warn]" in capsys.readouterr().out


def test_parse_log_lines_strict_mode_raises():
    with pytest.raises(ParseError):
        list(log_parser.parse_log_lines(["garbage"], strict=True))


def test_parse_commit_log_missing_directory_is_empty(tmp_path):
    assert list(log_parser.parse_commit_log(tmp_path / "absent", "absent")) == []


def test_parse_commit_log_empty_directory_is_empty(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    with patch("gitlog_report.sync.log_parser.stream_git") as mock_stream:
        assert list(log_parser.parse_commit_log(empty, "empty")) == []
    mock_stream.assert_not_called()


@patch("gitlog_report.sync.log_parser.has_commits", return_value=False)
def test_parse_commit_log_without_commits_is_empty(mock_has, tmp_path):
    repo = tmp_path / "fresh"
    (repo / ".git").mkdir(parents=True)
    assert list(log_parser.parse_commit_log(repo, "fresh")) == []


@patch("gitlog_report.sync.log_parser.has_commits", return_value=True)
@patch("gitlog_report.sync.log_parser.stream_git")
def test_parse_commit_log_streams_records(mock_stream, mock_has, tmp_path):
    repo = tmp_path / "demo"
    (repo / ".git").mkdir(parents=True)
    mock_stream.return_value = iter([
        _line("demo", "b2", "jane doe", "j@x", "2024-02-01", "second"),
        _line("demo", "b1", "jane doe", "j@x", "2024-01-01", "first"),
    ])
    records = list(log_parser.parse_commit_log(repo, "demo"))
    assert [r.hash for r in records] == ["b2", "b1"]
    assert all(r.committer == "Jane doe" for r in records)
    args, kwargs = mock_stream.call_args
    assert args[0] == log_parser.log_command("demo")
    assert kwargs["cwd"] == repo


@patch("gitlog_report.sync.log_parser.has_commits", return_value=True)
@patch("gitlog_report.sync.log_parser.stream_git")
def test_parse_commit_log_wraps_git_failure(mock_stream, mock_has, tmp_path):
    repo = tmp_path / "demo"
    (repo / ".git").mkdir(parents=True)

    def broken(*_args, **_kwargs):
        yield _line("demo", "b1", "x", "x@x", "2024-01-01", "ok")
        raise GitCommandError(["log"], 128, "fatal: bad object")

    mock_stream.side_effect = broken
    with pytest.raises(ParseError):
        list(log_parser.parse_commit_log(repo, "demo"))


@patch("gitlog_report.sync.log_parser.run_git", side_effect=GitCommandError(["rev-parse"], 1, ""))
def test_has_commits_false_when_head_missing(mock_run, tmp_path):
    assert log_parser.has_commits(tmp_path) is False
