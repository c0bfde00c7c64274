"""Convenience shim to run the organization git log report."""

from __future__ import annotations

import sys

from gitlog_report.pipeline.runner import main as report_main


if __name__ == "__main__":
    sys.exit(report_main(sys.argv[1:]))
