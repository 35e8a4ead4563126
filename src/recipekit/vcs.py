# vcs.py
from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Tuple

from .git_facts import git
from .model import CommitRecord


class CommitError(Exception):
    """Staging or committing the working tree failed."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.message = message
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"commit_error: {self.message}\n{self.stderr.strip()}"
        return f"commit_error: {self.message}"


def _wrap(action: str, exc: Exception) -> CommitError:
    if isinstance(exc, FileNotFoundError):
        return CommitError(f"{action}: git command not found")
    stderr = getattr(exc, "stderr", "") or ""
    return CommitError(f"{action} failed", stderr=stderr)


class VersionControlSink:
    """
    Stages and commits the project tree after each completed step.

    Paths listed in `exclude` (relative to root) are never staged.
    """

    def __init__(self, root: str | Path, *, exclude: Iterable[str] = ()):
        self.root = Path(root)
        self.exclude = tuple(exclude)

    def ensure_repo(self) -> bool:
        """Initialise a repository in root if there is none. Returns True if one was created."""
        if git.is_repo(self.root):
            return False
        try:
            git.init(self.root)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise _wrap("git init", e) from e
        return True

    def has_uncommitted_changes(self) -> bool:
        """True if the working tree holds changes no step has committed yet."""
        try:
            return git.is_dirty(self.root, exclude=self.exclude)
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise _wrap("git status", e) from e

    def commit_all(self, step: str, message: str) -> CommitRecord:
        """
        Stage everything and commit it as one commit.

        A step that changed nothing yields a record without a SHA instead of an
        empty commit.
        """
        try:
            git.add_all(self.root, exclude=self.exclude)
            files: Tuple[str, ...] = tuple(git.staged_files(self.root))
            sha = git.commit(self.root, message) if files else None
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            raise _wrap(f"commit {message!r}", e) from e

        return CommitRecord(
            step=step,
            message=message,
            timestamp=datetime.now(timezone.utc),
            files_changed=files,
            sha=sha,
        )
