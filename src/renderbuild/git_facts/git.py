# git.py
# Small wrapper around the Git CLI, used only to label a run with the
# repository and revision being deployed.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Raises subprocess.CalledProcessError on a non-zero exit and
    FileNotFoundError when git is not installed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str] = None) -> Path:
    """Return the absolute path to the root of the enclosing Git repository."""
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def head_sha(cwd: Optional[str] = None) -> str:
    """Return the full SHA of HEAD."""
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def get_remote_url(remote: str = "origin", cwd: Optional[str] = None) -> str:
    """Return the configured URL of a remote."""
    return _git(["remote", "get-url", remote], cwd=cwd)


def repository_name(cwd: str = ".") -> str:
    """
    Best-effort display name for the repository being deployed.

    Prefers the origin remote, then the git top-level directory, then the
    working directory itself.
    """
    try:
        url = get_remote_url("origin", cwd=cwd)
        return url.rstrip("/").split("/")[-1].removesuffix(".git")
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        pass
    try:
        return repo_root(cwd=cwd).name
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return Path(cwd).resolve().name


def current_revision(cwd: str = ".") -> Optional[str]:
    """HEAD SHA, or None outside a git checkout."""
    try:
        return head_sha(cwd=cwd)
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return None
