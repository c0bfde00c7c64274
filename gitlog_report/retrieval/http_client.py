"""HTTP helpers with rate-limit backoff and a fail-fast connectivity check."""

from __future__ import annotations

import os
import socket
import time
from typing import Optional

import requests

from gitlog_report.errors import ConnectivityError

from .config import (
    API_HOST,
    API_PORT,
    BACKOFF_BASE_SEC,
    CONNECT_TIMEOUT,
    MAX_RETRIES,
    MAX_WAIT_ON_403,
    REQUEST_TIMEOUT,
    USER_AGENT,
)

SESSION = requests.Session()
SESSION.headers.update(
    {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }
)


def sleep_with_jitter(base: float) -> None:
    """Pause execution with +/- 25% jitter to avoid synchronized retries."""
    jitter = base * 0.25 * (0.5 - (os.urandom(1)[0] / 255.0))
    time.sleep(max(0.0, base + jitter))


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    try:
        body = resp.json()
    except Exception:
        body = {"text": (resp.text or "")[:300]}
    if not isinstance(body, dict):
        body = {"text": str(body)[:300]}
    msg = body.get("message") or body.get("error") or body.get("text")
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {msg}")


def set_token(token: Optional[str]) -> None:
    """Set or clear the SESSION Authorization header."""
    if token:
        SESSION.headers["Authorization"] = f"token {token}"
    else:
        SESSION.headers.pop("Authorization", None)


def check_connectivity(host: str = API_HOST, port: int = API_PORT,
                       timeout: float = CONNECT_TIMEOUT) -> None:
    """Open and close a TCP connection to the API host; no retry on failure."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as exc:
        raise ConnectivityError(f"Unable to establish tcp connection to {host}: {exc}") from exc


def _rate_limit_wait(resp: requests.Response, attempt: int) -> int:
    headers_resp = resp.headers or {}
    reset = headers_resp.get("X-RateLimit-Reset")
    retry_after = headers_resp.get("Retry-After")
    if retry_after and str(retry_after).isdigit():
        wait_sec = int(retry_after)
    elif reset and str(reset).isdigit():
        wait_sec = max(0, int(reset) - int(time.time())) + 1
    else:
        wait_sec = BACKOFF_BASE_SEC * (2 ** (attempt - 1))
    return min(wait_sec, MAX_WAIT_ON_403)


def request_with_backoff(method: str, url: str, **kwargs) -> requests.Response:
    """Perform a REST call, waiting out rate limits and retrying server errors.

    Network exceptions are not retried: losing the API host ends the run.
    Terminal client errors are logged and handed back to the caller.
    """
    timeout = kwargs.pop("timeout", REQUEST_TIMEOUT)
    terminal_errors = {400, 401, 404, 410, 422}
    resp: Optional[requests.Response] = None

    for attempt in range(1, MAX_RETRIES + 1):
        try:
            resp = SESSION.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException as exc:
            raise ConnectivityError(f"Request to {url} failed: {exc}") from exc

        if 200 <= resp.status_code < 300:
            return resp

        if resp.status_code in terminal_errors:
            log_http_error(resp, url)
            return resp

        if attempt == MAX_RETRIES:
            break

        if resp.status_code in (403, 429):
            wait_sec = _rate_limit_wait(resp, attempt)
            print(f"[backoff {resp.status_code}] waiting {wait_sec}s for {url}")
            sleep_with_jitter(wait_sec)
            continue

        if resp.status_code >= 500:
            delay = BACKOFF_BASE_SEC * (2 ** (attempt - 1))
            print(f"[retry {attempt}/{MAX_RETRIES}] HTTP {resp.status_code} -> sleep {delay:.1f}s")
            sleep_with_jitter(delay)
            continue

        break

    if resp is None:
        raise RuntimeError("Request failed after retries.")
    log_http_error(resp, url)
    return resp


__all__ = [
    "SESSION",
    "sleep_with_jitter",
    "log_http_error",
    "set_token",
    "check_connectivity",
    "request_with_backoff",
]
