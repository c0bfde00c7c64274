"""Orchestration for the organization git log report."""

from .runner import RunSummary, main, run_pipeline

__all__ = ["RunSummary", "main", "run_pipeline"]
