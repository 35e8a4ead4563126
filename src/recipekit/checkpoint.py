# checkpoint.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

from .model import CommitRecord

# ---------------------------------------------------------------------
# Resume checkpoint
# ---------------------------------------------------------------------
# Git history is the audit trail; this file only answers "which steps are
# already done?" so `run --resume` can skip them after a failure.
#
# Layout:
#   <root>/<state_dir>/checkpoint.json
#   {"v": 1, "completed": [CommitRecord.to_dict(), ...]}
#
# The state dir is excluded from every recipe commit.
# ---------------------------------------------------------------------

CHECKPOINT_VERSION = 1


def _json_dumps_stable(obj) -> str:
    return json.dumps(obj, sort_keys=True, indent=2, ensure_ascii=False)


class Checkpoint:
    """Completed-step log keyed by step name."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> List[CommitRecord]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupt checkpoint file {self.path}: {e}") from e
        if data.get("v") != CHECKPOINT_VERSION:
            raise ValueError(f"Unsupported checkpoint version in {self.path}: {data.get('v')!r}")
        return [CommitRecord.from_dict(d) for d in data.get("completed", [])]

    def completed(self) -> Dict[str, CommitRecord]:
        return {r.step: r for r in self.load()}

    def record(self, rec: CommitRecord) -> None:
        records = [r for r in self.load() if r.step != rec.step]
        records.append(rec)
        self._write(records)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def _write(self, records: List[CommitRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"v": CHECKPOINT_VERSION, "completed": [r.to_dict() for r in records]}
        tmp = self.path.with_suffix(".json.tmp")
        try:
            # write to tmp, then atomic rename
            tmp.write_text(_json_dumps_stable(payload), encoding="utf-8")
            tmp.replace(self.path)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
