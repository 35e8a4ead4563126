# model.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union


# Mutation operations
INSERT_AFTER = "insert_after"
INSERT_BEFORE = "insert_before"
APPEND = "append"
OVERWRITE = "overwrite"
DELETE = "delete"
COPY = "copy"
UNCOMMENT = "uncomment"

MUTATION_OPS = (INSERT_AFTER, INSERT_BEFORE, APPEND, OVERWRITE, DELETE, COPY, UNCOMMENT)


@dataclass(frozen=True)
class Mutation:
    """A single text transformation applied to one file in the project tree."""
    op: str
    path: str
    text: str = ""
    marker: str | None = None
    source: str | None = None       # template resource for op=copy
    force: bool = False
    ignore_missing: bool = False
    idempotent: bool = True        # no-op when the payload already sits at the insert point / file tail
    skip_if_present: bool = False  # no-op when the payload appears anywhere in the file

    def __post_init__(self) -> None:
        if self.op not in MUTATION_OPS:
            raise ValueError(f"Unknown mutation op {self.op!r}, expected one of {MUTATION_OPS}")
        if self.op in (INSERT_AFTER, INSERT_BEFORE, UNCOMMENT) and not self.marker:
            raise ValueError(f"{self.op} on {self.path!r} needs a marker")

    def describe(self) -> str:
        if self.op == INSERT_AFTER:
            return f"insert into {self.path} after {self.marker!r}"
        if self.op == INSERT_BEFORE:
            return f"insert into {self.path} before {self.marker!r}"
        if self.op == COPY:
            return f"copy {self.source or self.path} -> {self.path}"
        if self.op == UNCOMMENT:
            return f"uncomment {self.marker!r} in {self.path}"
        return f"{self.op} {self.path}"


@dataclass(frozen=True)
class Command:
    """An external command (generator, installer, build tool) run inside the tree."""
    argv: Tuple[str, ...]
    cwd: str | None = None
    expect: Tuple[int, ...] = (0,)
    timeout: float | None = None
    env: Tuple[Tuple[str, str], ...] = ()

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def arguments(self) -> Tuple[str, ...]:
        return self.argv[1:]

    def describe(self) -> str:
        return "run " + " ".join(self.argv)


@dataclass(frozen=True)
class Say:
    """Print a message while a step runs."""
    message: str

    def describe(self) -> str:
        return f"say {self.message!r}"


Action = Union[Mutation, Command, Say]


@dataclass(frozen=True)
class Step:
    """
    One named, atomically committed unit of project mutation.

    Steps run in list order. `depends_on` may name earlier steps explicitly;
    the pipeline rejects a dependency that is unknown or positioned later.
    """
    name: str
    actions: Tuple[Action, ...]
    message: str | None = None
    depends_on: Tuple[str, ...] = ()
    best_effort: bool = False   # command failures are reported, not fatal

    @property
    def commit_message(self) -> str:
        return self.message or self.name


@dataclass(frozen=True)
class CommitRecord:
    """Immutable log entry for one successfully applied step."""
    step: str
    message: str
    timestamp: datetime
    files_changed: Tuple[str, ...] = ()
    sha: Optional[str] = None   # None when the step produced no changes or was a dry run

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "files_changed": list(self.files_changed),
            "sha": self.sha,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CommitRecord:
        return cls(
            step=data["step"],
            message=data.get("message", data["step"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            files_changed=tuple(data.get("files_changed", [])),
            sha=data.get("sha"),
        )


@dataclass(frozen=True)
class ProjectTree:
    """Handle on the project directory every component mutates."""
    root: Path
    templates: Path | None = None

    @classmethod
    def at(cls, root: str | Path, templates: str | Path | None = None) -> ProjectTree:
        return cls(
            root=Path(root).expanduser().resolve(),
            templates=Path(templates).expanduser().resolve() if templates is not None else None,
        )

    def resolve(self, rel: str | Path) -> Path:
        """Absolute path for `rel`; raises ValueError if it escapes the root."""
        p = (self.root / rel).resolve()
        if p != self.root and self.root not in p.parents:
            raise ValueError(f"{rel} resolves outside project root {self.root}")
        return p

    def relpath(self, p: Path) -> str:
        return str(p.resolve().relative_to(self.root)).replace("\\", "/")
