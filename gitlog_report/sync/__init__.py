"""Local clone synchronization and commit log parsing."""

from .log_parser import parse_commit_log
from .repository import SyncState, sync_repository

__all__ = ["parse_commit_log", "SyncState", "sync_repository"]
