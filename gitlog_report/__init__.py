"""Sync a GitHub organization's repositories and export their commit logs."""

__version__ = "1.0.0"
