"""Tests for gitlog_report.report.codec covering sanitizing and row encoding.

Run with coverage:
    pytest tests/test_codec.py --maxfail=1 -v --cov=gitlog_report.report.codec --cov-report=term-missing
"""

import pytest

from gitlog_report.report import codec
from gitlog_report.report.codec import CommitRecord


def _record(**overrides):
    values = {
        "repository": "demo",
        "hash": "abc1234",
        "committer": "Jane doe",
        "email": "jane@example.com",
        "date": "2024-01-02",
        "comments": "fix parser",
    }
    values.update(overrides)
    return CommitRecord(**values)


def test_sanitize_strips_every_blacklisted_character():
    dirty = 'a=b;c:d`e"f“g”h&i\tj\\k[l]m{n}o(p)q%r$s'
    cleaned = codec.sanitize(dirty)
    assert cleaned == "abcdefghijklmnopqrs"
    assert not any(ch in cleaned for ch in codec.BLACKLIST)


def test_sanitize_escapes_single_quotes():
    assert codec.sanitize("don't") == "don\\'t"
    # a backslash in the input is stripped before quotes are escaped
    assert codec.sanitize("it\\'s") == "it\\'s"


def test_sanitize_handles_empty_and_none():
    assert codec.sanitize("") == ""
    assert codec.sanitize(None) == ""


def test_capitalize_first_only_touches_first_character():
    assert codec.capitalize_first("jane doe") == "Jane doe"
    assert codec.capitalize_first("") == ""


def test_report_header_matches_columns():
    assert codec.REPORT_HEADER == '"Repository","Hash","Committer","Email","Date","Comments"'


def test_encode_csv_row_quotes_every_field():
    line = codec.encode_row(_record(), codec.CSV_KIND)
    assert line == '"demo","abc1234","Jane doe","jane@example.com","2024-01-02","fix parser"'
    assert "\n" not in line


def test_csv_round_trip_keeps_commas_inside_fields():
    record = _record(comments="merge a, b and c", committer="Doe, Jane")
    decoded = codec.decode_csv_row(codec.encode_row(record, codec.CSV_KIND))
    assert decoded == record


def test_csv_round_trip_with_empty_subject():
    record = _record(comments="")
    assert codec.decode_csv_row(codec.encode_row(record, codec.CSV_KIND)) == record


def test_encode_sqlite_row_uses_bound_parameters():
    record = _record(comments="drop table gitlog\\' --")
    sql, params = codec.encode_row(record, codec.SQLITE_KIND)
    assert sql == codec.INSERT_SQL
    assert sql.count("?") == 6
    assert params == record.values()


def test_encode_row_rejects_unknown_kind():
    with pytest.raises(ValueError):
        codec.encode_row(_record(), "xml")


def test_decode_csv_row_rejects_wrong_column_count():
    with pytest.raises(ValueError):
        codec.decode_csv_row('"a","b"')


def test_commit_record_is_immutable():
    record = _record()
    with pytest.raises(Exception):
        record.hash = "other"
