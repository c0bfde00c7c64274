"""Append-only report writers that stage into temp files and promote on success."""

from __future__ import annotations

import os
import shutil
import sqlite3
import tempfile
from pathlib import Path
from typing import IO, Iterable, List, Optional, Sequence

from gitlog_report.errors import SinkError

from .codec import (
    CREATE_TABLE_SQL,
    CSV_KIND,
    REPORT_HEADER,
    SQLITE_KIND,
    CommitRecord,
    encode_row,
)


def ensure_dir(path: str | Path) -> None:
    """Create output directories as-needed without raising for existing folders."""
    os.makedirs(path, exist_ok=True)


def _working_path(final_path: Path) -> Path:
    fd, name = tempfile.mkstemp(prefix=f".{final_path.name}-")
    os.close(fd)
    return Path(name)


class ReportSink:
    """Common lifecycle: open, append per record, seal, promote, always clean up.

    ``seal`` flushes everything into the working copy; ``promote`` copies the
    sealed working copy to ``final_path``. ``finalize`` does both. A sink
    cleaned up with ``discard_final=True`` removes a final file it promoted.
    """

    kind = ""

    def __init__(self, final_path: str | Path) -> None:
        self.final_path = Path(final_path)
        self.working_path: Optional[Path] = None
        self.count = 0
        self.promoted = False

    def open(self) -> "ReportSink":
        raise NotImplementedError

    def append_record(self, record: CommitRecord) -> None:
        raise NotImplementedError

    def seal(self) -> Path:
        raise NotImplementedError

    def count_records(self, path: Optional[Path] = None) -> int:
        raise NotImplementedError

    def promote(self) -> Path:
        """Copy the sealed working copy to the named final path."""
        if self.working_path is None:
            raise SinkError(f"{self.kind} sink was never opened")
        try:
            ensure_dir(self.final_path.parent)
            shutil.copyfile(self.working_path, self.final_path)
        except OSError as exc:
            raise SinkError(f"Unable to write {self.final_path}: {exc}") from exc
        self.promoted = True
        return self.final_path

    def finalize(self) -> Path:
        self.seal()
        return self.promote()

    def close(self) -> None:
        """Release open handles; safe to call more than once."""

    def cleanup(self, discard_final: bool = False) -> None:
        """Close handles, delete the working copy, and optionally the promoted file."""
        self.close()
        if self.working_path is not None and self.working_path.exists():
            self.working_path.unlink()
        self.working_path = None
        if discard_final and self.promoted:
            if self.final_path.exists():
                self.final_path.unlink()
            self.promoted = False


class CsvSink(ReportSink):
    """Quoted CSV report with a fixed six-column header."""

    kind = CSV_KIND

    def __init__(self, final_path: str | Path) -> None:
        super().__init__(final_path)
        self._handle: Optional[IO[str]] = None

    def open(self) -> "CsvSink":
        try:
            self.working_path = _working_path(self.final_path)
            self._handle = self.working_path.open("w", encoding="utf-8", newline="")
            self._handle.write(REPORT_HEADER + "\n")
        except OSError as exc:
            raise SinkError(f"Unable to create report template: {exc}") from exc
        return self

    def append_record(self, record: CommitRecord) -> None:
        if self._handle is None:
            raise SinkError("CSV sink is not open")
        try:
            self._handle.write(encode_row(record, CSV_KIND) + "\n")
        except OSError as exc:
            raise SinkError(f"Unable to append {record.hash} record to report: {exc}") from exc
        self.count += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def seal(self) -> Path:
        """Close the working file and strip blank lines from it in place."""
        self.close()
        if self.working_path is None:
            raise SinkError("CSV sink was never opened")
        normalized = _working_path(self.final_path)
        try:
            with self.working_path.open("r", encoding="utf-8", newline="") as src, \
                    normalized.open("w", encoding="utf-8", newline="") as dst:
                for line in src:
                    if line.strip():
                        dst.write(line if line.endswith("\n") else line + "\n")
            os.replace(normalized, self.working_path)
        except OSError as exc:
            if normalized.exists():
                normalized.unlink()
            raise SinkError(f"Unable to normalize report: {exc}") from exc
        return self.working_path

    def count_records(self, path: Optional[Path] = None) -> int:
        """Count data rows (header excluded); defaults to the final report."""
        target = Path(path or self.final_path)
        with target.open("r", encoding="utf-8", newline="") as handle:
            lines = sum(1 for _ in handle)
        return max(0, lines - 1)


class SqliteSink(ReportSink):
    """SQLite database holding one ``gitlog`` row per record."""

    kind = SQLITE_KIND

    def __init__(self, final_path: str | Path) -> None:
        super().__init__(final_path)
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> "SqliteSink":
        try:
            self.working_path = _working_path(self.final_path)
            self._conn = sqlite3.connect(str(self.working_path))
            self._conn.execute(CREATE_TABLE_SQL)
            self._conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise SinkError(f"Unable to create database: {exc}") from exc
        return self

    def append_record(self, record: CommitRecord) -> None:
        if self._conn is None:
            raise SinkError("SQLite sink is not open")
        sql, params = encode_row(record, SQLITE_KIND)
        try:
            self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise SinkError(f"Unable to insert {record.hash} record: {exc}") from exc
        self.count += 1

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def seal(self) -> Path:
        """Commit pending inserts and close the working database."""
        if self.working_path is None:
            raise SinkError("SQLite sink was never opened")
        try:
            if self._conn is not None:
                self._conn.commit()
            self.close()
        except sqlite3.Error as exc:
            raise SinkError(f"Unable to commit database: {exc}") from exc
        return self.working_path

    def count_records(self, path: Optional[Path] = None) -> int:
        target = Path(path or self.final_path)
        conn = sqlite3.connect(str(target))
        try:
            (count,) = conn.execute("SELECT COUNT(*) FROM gitlog").fetchone()
        finally:
            conn.close()
        return int(count)


def build_sinks(formats: Sequence[str], report_dir: str | Path, tool_name: str,
                timestamp: str) -> List[ReportSink]:
    """Construct one sink per enabled format, named ``<tool>-<timestamp>.<ext>``."""
    report_dir = Path(report_dir)
    sinks: List[ReportSink] = []
    if CSV_KIND in formats:
        sinks.append(CsvSink(report_dir / f"{tool_name}-{timestamp}.csv"))
    if SQLITE_KIND in formats:
        sinks.append(SqliteSink(report_dir / f"{tool_name}-{timestamp}.db"))
    return sinks


def write_records(records: Iterable[CommitRecord], sinks: Sequence[ReportSink]) -> int:
    """Fan a single pass over ``records`` out to every sink; return records seen."""
    written = 0
    for record in records:
        for sink in sinks:
            sink.append_record(record)
        written += 1
    return written


__all__ = [
    "ensure_dir",
    "ReportSink",
    "CsvSink",
    "SqliteSink",
    "build_sinks",
    "write_records",
]
