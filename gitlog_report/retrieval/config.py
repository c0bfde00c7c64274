"""Central configuration constants for talking to the GitHub REST API."""

from __future__ import annotations

import os
from urllib.parse import urlparse

USER_AGENT = "git-report/1.0"
BASE_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
API_HOST = urlparse(BASE_URL).hostname or "api.github.com"
API_PORT = urlparse(BASE_URL).port or (443 if BASE_URL.startswith("https") else 80)
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "90"))
CONNECT_TIMEOUT = float(os.getenv("CONNECT_TIMEOUT", "5"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "6"))
BACKOFF_BASE_SEC = 2
MAX_WAIT_ON_403 = int(os.getenv("MAX_WAIT_ON_403", "180"))

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "API_HOST",
    "API_PORT",
    "REQUEST_TIMEOUT",
    "CONNECT_TIMEOUT",
    "MAX_RETRIES",
    "BACKOFF_BASE_SEC",
    "MAX_WAIT_ON_403",
]
