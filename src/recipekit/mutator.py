# mutator.py
from __future__ import annotations

import filecmp
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .model import (
    APPEND,
    COPY,
    DELETE,
    INSERT_AFTER,
    INSERT_BEFORE,
    OVERWRITE,
    UNCOMMENT,
    Mutation,
    ProjectTree,
)


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

class MutationError(Exception):
    """A file mutation could not be applied."""
    kind = "mutation_error"

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message} (path={self.path})"


class MarkerNotFound(MutationError):
    kind = "marker_not_found"

    def __init__(self, path: str, marker: str):
        super().__init__(path, f"marker {marker!r} not found")
        self.marker = marker


class TargetMissing(MutationError):
    kind = "target_missing"


class TemplateMissing(TargetMissing):
    kind = "template_missing"


class TargetExists(MutationError):
    kind = "target_exists"


class PathOutsideTree(MutationError):
    kind = "path_outside_tree"


class MutationIOError(MutationError):
    """The target (or template) could not be read or written."""
    kind = "io_error"


@dataclass(frozen=True)
class MutationResult:
    path: str
    op: str
    files: Tuple[str, ...]    # files touched (relative to the tree root)
    changed: bool


# ----------------------------------------------------------------------
# Text helpers
# ----------------------------------------------------------------------

def _read(p: Path) -> str:
    return p.read_text(encoding="utf-8")


def _write(p: Path, text: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")


def _uncomment_line(line: str) -> str:
    stripped = line.lstrip()
    indent = line[: len(line) - len(stripped)]
    body = stripped[1:]
    if body.startswith(" "):
        body = body[1:]
    return indent + body


class FileMutator:
    """
    Applies Mutations to a ProjectTree.

    Every operation touches only the declared target path. Inserts and
    appends whose payload already sits where they would put it are no-ops,
    so re-running a recipe never duplicates content. `skip_if_present`
    widens that check to the whole file.
    """

    def apply(self, tree: ProjectTree, mutation: Mutation) -> MutationResult:
        try:
            target = tree.resolve(mutation.path)
        except ValueError as e:
            raise PathOutsideTree(mutation.path, str(e)) from e

        handler = {
            INSERT_AFTER: self._insert,
            INSERT_BEFORE: self._insert,
            APPEND: self._append,
            OVERWRITE: self._overwrite,
            DELETE: self._delete,
            COPY: self._copy,
            UNCOMMENT: self._uncomment,
        }[mutation.op]
        try:
            return handler(tree, mutation, target)
        except UnicodeError as e:
            raise MutationIOError(mutation.path, f"not UTF-8 text: {e}") from e
        except OSError as e:
            raise MutationIOError(mutation.path, e.strerror or str(e)) from e

    # ---- inserts ----

    def _insert(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        if not target.is_file():
            raise TargetMissing(m.path, f"cannot insert into missing file {m.path}")

        text = _read(target)
        if m.skip_if_present and m.text in text:
            return MutationResult(m.path, m.op, (), False)

        idx = text.find(m.marker)
        if idx < 0:
            raise MarkerNotFound(m.path, m.marker)

        # a payload that contains its own marker shifts the first occurrence,
        # so "already applied" means adjacent to any occurrence of the marker
        if m.op == INSERT_AFTER:
            at = idx + len(m.marker)
            present = (m.marker + m.text) in text
        else:
            at = idx
            present = (m.text + m.marker) in text
        if m.idempotent and present:
            return MutationResult(m.path, m.op, (), False)

        _write(target, text[:at] + m.text + text[at:])
        return MutationResult(m.path, m.op, (m.path,), True)

    def _append(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        text = _read(target) if target.is_file() else None
        if text is not None:
            if m.skip_if_present and m.text in text:
                return MutationResult(m.path, m.op, (), False)
            if m.idempotent and text.endswith(m.text):
                return MutationResult(m.path, m.op, (), False)

        _write(target, (text or "") + m.text)
        return MutationResult(m.path, m.op, (m.path,), True)

    def _uncomment(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        if not target.is_file():
            raise TargetMissing(m.path, f"cannot uncomment in missing file {m.path}")

        lines = _read(target).splitlines(keepends=True)
        changed = False
        seen = False
        for i, line in enumerate(lines):
            if m.marker not in line:
                continue
            seen = True
            if line.lstrip().startswith("#"):
                lines[i] = _uncomment_line(line)
                changed = True

        if not seen:
            raise MarkerNotFound(m.path, m.marker)
        if not changed:
            return MutationResult(m.path, m.op, (), False)

        _write(target, "".join(lines))
        return MutationResult(m.path, m.op, (m.path,), True)

    # ---- whole-file operations ----

    def _overwrite(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        if not target.exists():
            if not m.force:
                raise TargetMissing(m.path, f"cannot overwrite missing file {m.path}")
        elif _read(target) == m.text:
            return MutationResult(m.path, m.op, (), False)

        _write(target, m.text)
        return MutationResult(m.path, m.op, (m.path,), True)

    def _delete(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        if not target.exists():
            if m.ignore_missing:
                return MutationResult(m.path, m.op, (), False)
            raise TargetMissing(m.path, f"cannot delete missing file {m.path}")

        if target.is_dir():
            shutil.rmtree(target)
        else:
            target.unlink()
        return MutationResult(m.path, m.op, (m.path,), True)

    def _copy(self, tree: ProjectTree, m: Mutation, target: Path) -> MutationResult:
        source_rel = m.source or m.path
        if tree.templates is None:
            raise TemplateMissing(source_rel, "no templates directory configured")
        templates = tree.templates.resolve()
        source = (templates / source_rel).resolve()
        if source != templates and templates not in source.parents:
            raise PathOutsideTree(source_rel, f"template {source_rel} resolves outside {templates}")
        if not source.exists():
            raise TemplateMissing(source_rel, f"template not found: {source}")

        if source.is_dir():
            touched = []
            for src in sorted(source.rglob("*")):
                if not src.is_file():
                    continue
                dst = target / src.relative_to(source)
                if self._copy_file(m, src, dst, tree.relpath(dst)):
                    touched.append(tree.relpath(dst))
            return MutationResult(m.path, m.op, tuple(touched), bool(touched))

        if self._copy_file(m, source, target, m.path):
            return MutationResult(m.path, m.op, (m.path,), True)
        return MutationResult(m.path, m.op, (), False)

    @staticmethod
    def _copy_file(m: Mutation, src: Path, dst: Path, rel: str) -> bool:
        if dst.exists():
            if dst.is_file() and filecmp.cmp(src, dst, shallow=False):
                return False
            if not m.force:
                raise TargetExists(rel, f"{rel} already exists (use force to overwrite)")
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        return True
