"""Bring one local clone to parity with its GitHub remote: clone once, fetch after."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import List, Set

from gitlog_report.errors import SyncError

from .gitcommands import GitCommandError, run_git

DEFAULT_CLONE_URL = "git@github.com:{org}/{repo}.git"


class SyncState(str, enum.Enum):
    NEW = "new"
    EXISTING = "existing"


def repo_path(projects_root: str | Path, repo_name: str) -> Path:
    return Path(projects_root) / repo_name


def clone_url(organization: str, repo_name: str, template: str = DEFAULT_CLONE_URL) -> str:
    return template.format(org=organization, repo=repo_name)


def _local_branches(path: Path, verbose: bool) -> Set[str]:
    output = run_git(["branch", "--format=%(refname:short)"], cwd=path, verbose=verbose)
    return {line.strip() for line in output.splitlines() if line.strip()}


def remote_branches_to_track(remote_listing: str, local: Set[str]) -> List[str]:
    """Pick remote branches that need a local tracking branch.

    ``remote_listing`` is ``git branch -r`` output. Symbolic HEAD refs and any
    branch already present locally (the checked-out default included) are skipped.
    """
    wanted: List[str] = []
    for raw in remote_listing.splitlines():
        ref = raw.strip()
        if not ref or "->" in ref or ref.endswith("/HEAD"):
            continue
        branch = ref.split("/", 1)[1] if "/" in ref else ref
        if branch in local or branch in wanted:
            continue
        wanted.append(branch)
    return wanted


def clone_repo(organization: str, repo_name: str, projects_root: str | Path, *,
               clone_url_template: str = DEFAULT_CLONE_URL, verbose: bool = False) -> Path:
    """Clone, create tracking branches for every remote branch, then pull all."""
    root = Path(projects_root)
    root.mkdir(parents=True, exist_ok=True)
    target = repo_path(root, repo_name)
    url = clone_url(organization, repo_name, clone_url_template)

    run_git(["clone", url, str(target)], cwd=root, verbose=verbose)

    local = _local_branches(target, verbose)
    remote_listing = run_git(["branch", "-r"], cwd=target, verbose=verbose)
    for branch in remote_branches_to_track(remote_listing, local):
        run_git(["branch", "--track", branch, f"origin/{branch}"], cwd=target, verbose=verbose)

    run_git(["pull", "--all"], cwd=target, verbose=verbose)
    return target


def fetch_repo(repo_name: str, projects_root: str | Path, *, verbose: bool = False) -> Path:
    """Fetch every remote; local history is left alone (no merge)."""
    target = repo_path(projects_root, repo_name)
    run_git(["fetch", "--all"], cwd=target, verbose=verbose)
    return target


def sync_repository(organization: str, repo_name: str, projects_root: str | Path, *,
                    clone_url_template: str = DEFAULT_CLONE_URL,
                    verbose: bool = False) -> SyncState:
    """Clone ``repo_name`` when absent locally, otherwise fetch it."""
    target = repo_path(projects_root, repo_name)
    if not target.is_dir():
        try:
            clone_repo(organization, repo_name, projects_root,
                       clone_url_template=clone_url_template, verbose=verbose)
        except GitCommandError as exc:
            raise SyncError(f"Unable to clone {repo_name}: {exc}") from exc
        return SyncState.NEW

    try:
        fetch_repo(repo_name, projects_root, verbose=verbose)
    except GitCommandError as exc:
        raise SyncError(f"Unable to fetch {repo_name}: {exc}") from exc
    return SyncState.EXISTING


__all__ = [
    "DEFAULT_CLONE_URL",
    "SyncState",
    "repo_path",
    "clone_url",
    "remote_branches_to_track",
    "clone_repo",
    "fetch_repo",
    "sync_repository",
]
