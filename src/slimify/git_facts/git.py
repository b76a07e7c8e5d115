# git.py
# Small, focused wrapper around the Git CLI.
# The scanner only needs to know which GitHub repository it is looking at,
# so this module answers exactly that.

from __future__ import annotations

import re
import subprocess
from typing import Optional


def _git(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Args:
        args: List of git arguments (e.g. ["remote", "get-url", "origin"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: git exited non-zero
        FileNotFoundError: git is not installed
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def get_remote_url(remote: str = "origin", cwd: Optional[str] = None) -> str:
    return _git(["remote", "get-url", remote], cwd=cwd)


# git@github.com:owner/repo.git, https://github.com/owner/repo(.git), ssh://git@github.com/owner/repo
_GITHUB_URL = re.compile(r"github\.com[:/]+(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$")


def github_repo_from_url(url: str) -> Optional[str]:
    """
    Extract "owner/name" from a GitHub remote URL.

    Returns None for remotes that are not hosted on github.com.
    """
    match = _GITHUB_URL.search(url.strip())
    if not match:
        return None
    return f"{match.group('owner')}/{match.group('name')}"


def current_github_repo(cwd: Optional[str] = None) -> Optional[str]:
    """"owner/name" of the origin remote, or None if it cannot be determined."""
    try:
        return github_repo_from_url(get_remote_url("origin", cwd=cwd))
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
