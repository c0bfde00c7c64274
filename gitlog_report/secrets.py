"""Where the GitHub access token comes from when it is not typed at a prompt.

Sources are consulted in order: ``--token``, ``--token-file``, the
``GITHUB_TOKEN`` environment variable, then the ``github_token`` key of a
gitignored ``local_secrets.json`` (or the file named by ``LOCAL_SECRETS_FILE``).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from gitlog_report.errors import ConfigurationError

SECRETS_FILENAME = "local_secrets.json"
SECRETS_FILE_ENV = "LOCAL_SECRETS_FILE"
TOKEN_ENV = "GITHUB_TOKEN"
TOKEN_KEY = "github_token"


def secrets_path(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    override = env.get(SECRETS_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parents[1] / SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Read the secrets JSON object; a missing, unparsable or non-object file yields {}."""
    target = Path(path).expanduser() if path else secrets_path()
    if not target.exists():
        return {}
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        print(f"[warn] ignoring unreadable secrets file {target}: {exc}")
        return {}
    return data if isinstance(data, dict) else {}


def read_token_file(path: str | Path) -> str:
    """Return the first non-empty line of a token file; raises OSError if unreadable."""
    with Path(path).expanduser().open("r", encoding="utf-8") as handle:
        for line in handle:
            token = line.strip()
            if token:
                return token
    return ""


def resolve_token(token: Optional[str] = None, token_file: Optional[str] = None,
                  env: Optional[Mapping[str, str]] = None) -> Tuple[str, str]:
    """Return ``(token, source)`` from the first source that yields one.

    ``("", "")`` means no source had a token. An unreadable ``token_file`` is a
    ConfigurationError, since the user asked for it explicitly.
    """
    env = os.environ if env is None else env
    if token and token.strip():
        return token.strip(), "--token"
    if token_file:
        try:
            value = read_token_file(token_file)
        except OSError as exc:
            raise ConfigurationError(f"Unable to read token file {token_file}: {exc}") from exc
        if value:
            return value, "--token-file"
    value = (env.get(TOKEN_ENV) or "").strip()
    if value:
        return value, TOKEN_ENV
    value = str(load_local_secrets(secrets_path(env)).get(TOKEN_KEY) or "").strip()
    if value:
        return value, SECRETS_FILENAME
    return "", ""


__all__ = [
    "SECRETS_FILENAME",
    "TOKEN_ENV",
    "TOKEN_KEY",
    "secrets_path",
    "load_local_secrets",
    "read_token_file",
    "resolve_token",
]
