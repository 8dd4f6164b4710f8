# git.py
# Small wrapper around the Git CLI.
# The generator only needs one fact from git: where the repository root is,
# because that is where .github/workflows lives.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    Args:
        args: List of git arguments (e.g. ["rev-parse", "--show-toplevel"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError: git exited non-zero (e.g. not a repo).
        FileNotFoundError: git is not installed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,  # "not a git repository" is expected noise here
    )
    return out.strip()


def repo_root(cwd: Optional[str | Path] = None) -> Path:
    """
    Return the absolute path to the root of the current Git repository.

    `git rev-parse --show-toplevel` prints the repo root regardless of where
    inside the repo it runs.
    """
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def repo_root_or_cwd(cwd: Optional[str | Path] = None) -> Path:
    """Repository root if we are inside one, otherwise the working directory itself."""
    start = Path(cwd) if cwd is not None else Path.cwd()
    try:
        return repo_root(start)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return start.resolve()
