"""Thin subprocess wrappers for the git CLI (no shell, argument lists only)."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional

GIT_BINARY = "git"


class GitCommandError(RuntimeError):
    """A git invocation exited non-zero."""

    def __init__(self, args: List[str], returncode: int, stderr: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else f"exit {returncode}"
        super().__init__(f"git {' '.join(args)} failed: {detail}")


def run_git(args: List[str], cwd: Optional[str | Path] = None, verbose: bool = False) -> str:
    """Run ``git <args>`` and return stdout; raise GitCommandError on failure."""
    cmd = [GIT_BINARY, *args]
    if verbose:
        print(f">> {' '.join(cmd)}")
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise GitCommandError(args, -1, str(exc)) from exc
    if verbose:
        output = (proc.stdout or "") + (proc.stderr or "")
        if output.strip():
            print(output.rstrip("\n"))
    if proc.returncode != 0:
        raise GitCommandError(args, proc.returncode, proc.stderr or "")
    return proc.stdout or ""


def stream_git(args: List[str], cwd: Optional[str | Path] = None, verbose: bool = False) -> Iterator[str]:
    """Yield stdout lines of ``git <args>`` lazily, newline stripped.

    stderr is spooled to a temporary file so a chatty child never blocks on a
    full pipe. The exit status is checked once the stream is exhausted.
    """
    cmd = [GIT_BINARY, *args]
    if verbose:
        print(f">> {' '.join(cmd)}")
    with tempfile.TemporaryFile() as err_file:
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=err_file,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise GitCommandError(args, -1, str(exc)) from exc

        try:
            for line in proc.stdout:
                yield line.rstrip("\r\n")
            returncode = proc.wait()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdout.close()
        err_file.seek(0)
        stderr = err_file.read().decode("utf-8", errors="replace")
    if returncode != 0:
        raise GitCommandError(args, returncode, stderr)


__all__ = ["GIT_BINARY", "GitCommandError", "run_git", "stream_git"]
