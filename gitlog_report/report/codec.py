"""Commit record type plus the escaping contract shared by the CSV and SQLite sinks."""

from __future__ import annotations

import csv
import io
from dataclasses import astuple, dataclass
from typing import Any, Optional, Tuple

FIELDS = ("Repository", "Hash", "Committer", "Email", "Date", "Comments")
REPORT_HEADER = ",".join(f'"{name}"' for name in FIELDS)

# Characters that could break row framing in either sink.
BLACKLIST = "=;:`\"“”&\t\\[]{}()%$"
_STRIP_TABLE = str.maketrans("", "", BLACKLIST)

CSV_KIND = "csv"
SQLITE_KIND = "sqlite"

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS gitlog("
    "ID INTEGER PRIMARY KEY AUTOINCREMENT, "
    "Repository VARCHAR(100), "
    "Hash VARCHAR(10), "
    "Committer VARCHAR(255), "
    "Email VARCHAR(254), "
    "Date DATE, "
    "Comments TEXT)"
)
INSERT_SQL = (
    "INSERT INTO gitlog(Repository, Hash, Committer, Email, Date, Comments) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)


@dataclass(frozen=True)
class CommitRecord:
    """One commit, already sanitized, in report column order."""

    repository: str
    hash: str
    committer: str
    email: str
    date: str
    comments: str

    def values(self) -> Tuple[str, ...]:
        return astuple(self)


def sanitize(value: Optional[str]) -> str:
    """Strip blacklisted characters and backslash-escape single quotes."""
    if not value:
        return ""
    return value.translate(_STRIP_TABLE).replace("'", "\\'")


def capitalize_first(value: str) -> str:
    """Uppercase only the first character, leaving the rest untouched."""
    return value[:1].upper() + value[1:]


def _csv_line(values: Tuple[str, ...]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="")
    writer.writerow(values)
    return buffer.getvalue()


def encode_row(record: CommitRecord, sink_kind: str) -> Any:
    """Render a record for the given sink.

    CSV gets a quoted, comma separated line without a trailing newline. SQLite
    gets an ``(sql, params)`` pair so values are always bound, never spliced.
    """
    if sink_kind == CSV_KIND:
        return _csv_line(record.values())
    if sink_kind == SQLITE_KIND:
        return INSERT_SQL, record.values()
    raise ValueError(f"unknown sink kind: {sink_kind!r}")


def decode_csv_row(line: str) -> CommitRecord:
    """Split a CSV report line back into a record."""
    rows = list(csv.reader([line]))
    if not rows or len(rows[0]) != len(FIELDS):
        raise ValueError(f"expected {len(FIELDS)} columns: {line!r}")
    return CommitRecord(*rows[0])


__all__ = [
    "FIELDS",
    "REPORT_HEADER",
    "BLACKLIST",
    "CSV_KIND",
    "SQLITE_KIND",
    "CREATE_TABLE_SQL",
    "INSERT_SQL",
    "CommitRecord",
    "sanitize",
    "capitalize_first",
    "encode_row",
    "decode_csv_row",
]
