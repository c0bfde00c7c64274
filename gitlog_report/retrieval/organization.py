"""Organization lookups: type validation, repository counts, one name per page."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

from gitlog_report.errors import ConfigurationError, ValidationError

from .config import BASE_URL
from .http_client import request_with_backoff

AUTH_FAILURE_STATUSES = (401, 403)


def org_url(organization: str) -> str:
    return f"{BASE_URL}/orgs/{quote(organization, safe='')}"


def _raise_for_status(resp, action: str) -> None:
    """Map an unexpected status: rejected credentials are a configuration problem."""
    if resp.status_code in AUTH_FAILURE_STATUSES:
        raise ConfigurationError(
            f"GitHub rejected the access token while trying to {action}: HTTP {resp.status_code}"
        )
    raise ValidationError(f"Unable to {action}: HTTP {resp.status_code}")


def get_org_meta(organization: str) -> Dict[str, Any]:
    """Return the organization resource, or {} when GitHub does not know it."""
    resp = request_with_backoff("GET", org_url(organization))
    if resp.status_code == 404:
        return {}
    if resp.status_code != 200:
        _raise_for_status(resp, f"look up organization {organization}")
    data = resp.json()
    return data if isinstance(data, dict) else {}


def validate_organization(organization: str) -> bool:
    """True only when the name resolves to an account of type organization."""
    meta = get_org_meta(organization)
    return str(meta.get("type") or "").lower() == "organization"


def get_repo_counts(organization: str) -> Tuple[int, int]:
    """Return ``(public_repos, total_private_repos)``; absent counts become 0."""
    meta = get_org_meta(organization)
    if not meta:
        raise ValidationError(f"Organization {organization} does not exist")
    public = int(meta.get("public_repos") or 0)
    private = int(meta.get("total_private_repos") or 0)
    return public, private


def get_repo_name(organization: str, page: int) -> Optional[str]:
    """Resolve a 1-based page index (one repository per page) to a name."""
    url = f"{org_url(organization)}/repos?per_page=1&page={page}"
    resp = request_with_backoff("GET", url)
    if resp.status_code != 200:
        _raise_for_status(resp, f"get repo name for page {page}")
    batch = resp.json()
    if not isinstance(batch, list) or not batch:
        return None
    return batch[0].get("name") or None


__all__ = [
    "org_url",
    "get_org_meta",
    "validate_organization",
    "get_repo_counts",
    "get_repo_name",
]
