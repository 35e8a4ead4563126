# git.py
# Small, focused wrapper around the Git CLI.
# This module centralizes all Git interactions so the rest of the codebase
# never needs to call subprocess("git ...") directly.

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, List


def _git(args: list[str], cwd: str | Path) -> str:
    """
    Execute a git command inside `cwd` and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this file.
    If git exits with a non-zero status, subprocess.CalledProcessError is raised
    (stderr is captured on the exception so callers can report it).

    Args:
        args: List of git arguments (e.g. ["status", "--porcelain"])
        cwd: Working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd),
        text=True,
        stderr=subprocess.PIPE,
    )
    return out.strip()


def is_repo(root: str | Path) -> bool:
    """
    True if `root` is itself the top of a Git working tree.

    A project nested inside some unrelated repository does not count:
    recipe commits must land in the project's own history.
    """
    try:
        top = _git(["rev-parse", "--show-toplevel"], cwd=root)
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return False
    return Path(top).resolve() == Path(root).resolve()


def init(root: str | Path) -> None:
    """Create an empty repository in `root`."""
    _git(["init"], cwd=root)


def add_all(root: str | Path, exclude: Iterable[str] = ()) -> None:
    """
    Stage every change in the working tree (new, modified, deleted files).

    `exclude` entries become `:(exclude)` pathspecs, which keeps tool state
    directories out of the index.
    """
    pathspecs = ["."] + [f":(exclude){p}" for p in exclude]
    _git(["add", "--all", "--", *pathspecs], cwd=root)


def staged_files(root: str | Path) -> List[str]:
    """
    Paths staged for the next commit, relative to the repository root.

    Returns an empty list when nothing is staged.
    """
    out = _git(["diff", "--cached", "--name-only"], cwd=root)
    if not out:
        return []
    return out.splitlines()


def commit(root: str | Path, message: str) -> str:
    """
    Commit the index with `message` and return the new HEAD SHA.
    """
    _git(["commit", "--quiet", "-m", message], cwd=root)
    return head_sha(root)


def head_sha(root: str | Path) -> str:
    """Return the full SHA hash of the current HEAD commit."""
    return _git(["rev-parse", "HEAD"], cwd=root)


def is_dirty(root: str | Path, exclude: Iterable[str] = ()) -> bool:
    """
    Check whether the working tree has uncommitted changes.

    This includes modified, staged and untracked files, except under `exclude`.
    """
    pathspecs = ["."] + [f":(exclude){p}" for p in exclude]
    return _git(["status", "--porcelain", "--", *pathspecs], cwd=root) != ""
