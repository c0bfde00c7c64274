"""Commit record codec and the CSV / SQLite report sinks."""

from .codec import CommitRecord, encode_row, sanitize
from .sinks import CsvSink, SqliteSink, build_sinks, write_records

__all__ = ["CommitRecord", "encode_row", "sanitize", "CsvSink", "SqliteSink", "build_sinks", "write_records"]
