from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from recipekit.model import ProjectTree
from recipekit.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def _isolated_git(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> None:
    """Commit identity from the environment, no user/global git config."""
    empty_config = tmp_path_factory.mktemp("gitconfig") / "config"
    empty_config.write_text("", encoding="utf-8")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(empty_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Recipe Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "bot@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Recipe Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "bot@example.com")


@pytest.fixture(autouse=True)
def _fresh_console() -> None:
    set_console(Console())


@pytest.fixture
def tree(tmp_path: Path) -> ProjectTree:
    root = tmp_path / "project"
    templates = tmp_path / "templates"
    root.mkdir()
    templates.mkdir()
    return ProjectTree.at(root, templates)


def git_log(root: Path) -> list[str]:
    """Commit subjects, newest first ([] for a repository without commits)."""
    proc = subprocess.run(
        ["git", "log", "--format=%s"],
        cwd=root,
        text=True,
        capture_output=True,
    )
    if proc.returncode != 0:
        return []
    return proc.stdout.strip().splitlines()


def write(root: Path, rel: str, text: str) -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p
