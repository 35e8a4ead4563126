from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from recipekit.checkpoint import Checkpoint
from recipekit.model import CommitRecord


def _record(step: str, sha: str | None = "abc123") -> CommitRecord:
    return CommitRecord(
        step=step,
        message=f"commit {step}",
        timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        files_changed=("Gemfile",),
        sha=sha,
    )


def test_missing_file_is_empty(tmp_path: Path) -> None:
    assert Checkpoint(tmp_path / "state" / "checkpoint.json").load() == []


def test_record_and_load(tmp_path: Path) -> None:
    cp = Checkpoint(tmp_path / "state" / "checkpoint.json")

    cp.record(_record("gems"))
    cp.record(_record("bundle", sha=None))

    assert cp.load() == [_record("gems"), _record("bundle", sha=None)]
    assert list(cp.completed()) == ["gems", "bundle"]
    assert not list((tmp_path / "state").glob("*.tmp"))


def test_re_recording_a_step_replaces_it(tmp_path: Path) -> None:
    cp = Checkpoint(tmp_path / "checkpoint.json")
    cp.record(_record("gems", sha="old"))
    cp.record(_record("bundle"))

    cp.record(_record("gems", sha="new"))

    assert [(r.step, r.sha) for r in cp.load()] == [("bundle", "abc123"), ("gems", "new")]


def test_clear(tmp_path: Path) -> None:
    cp = Checkpoint(tmp_path / "checkpoint.json")
    cp.record(_record("gems"))

    cp.clear()
    cp.clear()

    assert cp.load() == []


def test_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "checkpoint.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError, match="Corrupt checkpoint"):
        Checkpoint(path).load()


def test_unknown_version(tmp_path: Path) -> None:
    path = tmp_path / "checkpoint.json"
    path.write_text(json.dumps({"v": 99, "completed": []}), encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported checkpoint version"):
        Checkpoint(path).load()
