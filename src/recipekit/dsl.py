# src/recipekit/dsl.py
from __future__ import annotations

import shlex
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .model import (
    APPEND,
    COPY,
    DELETE,
    INSERT_AFTER,
    INSERT_BEFORE,
    OVERWRITE,
    UNCOMMENT,
    Action,
    Command,
    Mutation,
    Say,
    Step,
)


# ---------------------------------------------------------------------
# Action helpers
# ---------------------------------------------------------------------

def sh(
    cmd: Union[str, Sequence[str]],
    *,
    cwd: str | None = None,
    expect: Iterable[int] = (0,),
    timeout: float | None = None,
    env: Optional[Dict[str, str]] = None,
) -> Command:
    """Create a command action. A string is split shell-style; no shell is involved."""
    argv = tuple(shlex.split(cmd)) if isinstance(cmd, str) else tuple(cmd)
    if not argv:
        raise ValueError("sh() needs a command")
    return Command(
        argv=argv,
        cwd=cwd,
        expect=tuple(expect),
        timeout=timeout,
        env=tuple(sorted((env or {}).items())),
    )


def insert_after(
    path: str, marker: str, text: str, *, idempotent: bool = True, skip_if_present: bool = False
) -> Mutation:
    return Mutation(
        op=INSERT_AFTER, path=path, marker=marker, text=text,
        idempotent=idempotent, skip_if_present=skip_if_present,
    )


def insert_before(
    path: str, marker: str, text: str, *, idempotent: bool = True, skip_if_present: bool = False
) -> Mutation:
    return Mutation(
        op=INSERT_BEFORE, path=path, marker=marker, text=text,
        idempotent=idempotent, skip_if_present=skip_if_present,
    )


def append(path: str, text: str, *, idempotent: bool = True, skip_if_present: bool = False) -> Mutation:
    """Append `text`; skip_if_present=True treats a payload anywhere in the file as already applied."""
    return Mutation(op=APPEND, path=path, text=text, idempotent=idempotent, skip_if_present=skip_if_present)


def overwrite(path: str, text: str, *, force: bool = False) -> Mutation:
    return Mutation(op=OVERWRITE, path=path, text=text, force=force)


def create_file(path: str, text: str) -> Mutation:
    """Write a file, creating it (and its directories) if needed."""
    return overwrite(path, text, force=True)


def delete(path: str, *, ignore_missing: bool = False) -> Mutation:
    return Mutation(op=DELETE, path=path, ignore_missing=ignore_missing)


def copy(source: str, target: str | None = None, *, force: bool = False) -> Mutation:
    """Copy a template file or directory into the project (target defaults to source)."""
    return Mutation(op=COPY, path=target or source, source=source, force=force)


def uncomment(path: str, line: str) -> Mutation:
    """Uncomment every commented line in `path` that contains `line`."""
    return Mutation(op=UNCOMMENT, path=path, marker=line)


def say(message: str) -> Say:
    return Say(message)


# ---------------------------------------------------------------------
# Functional Step helper
# ---------------------------------------------------------------------

def step(
    name: str,
    *actions: Union[Action, Sequence[Action]],  # allow: step("x", a, [b, c])
    message: str | None = None,
    depends_on: Optional[List[str]] = None,
    best_effort: bool = False,
) -> Step:
    flat: List[Action] = []
    for a in actions:
        if isinstance(a, (list, tuple)):
            flat.extend(a)
        else:
            flat.append(a)

    if not flat:
        raise ValueError(f"step({name!r}) must have at least one action")

    return Step(
        name=name,
        actions=tuple(flat),
        message=message,
        depends_on=tuple(depends_on or ()),
        best_effort=best_effort,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class StepBuilder:
    def __init__(self, name: str):
        self.name = name
        self._actions: list[Action] = []
        self._message: str | None = None
        self._depends_on: list[str] = []
        self._best_effort = False

    def depends_on(self, *step_names: str):
        self._depends_on.extend(step_names)
        return self

    def run(self, cmd: Union[str, Sequence[str]], **kwargs):
        self._actions.append(sh(cmd, **kwargs))
        return self

    def insert_after(self, path: str, marker: str, text: str, **kwargs):
        self._actions.append(insert_after(path, marker, text, **kwargs))
        return self

    def append(self, path: str, text: str, **kwargs):
        self._actions.append(append(path, text, **kwargs))
        return self

    def copy(self, source: str, target: str | None = None, **kwargs):
        self._actions.append(copy(source, target, **kwargs))
        return self

    def then(self, *actions: Action):
        self._actions.extend(actions)
        return self

    def say(self, message: str):
        self._actions.append(Say(message))
        return self

    def commit_message(self, message: str):
        self._message = message
        return self

    def best_effort(self, enabled: bool = True):
        self._best_effort = enabled
        return self

    def build(self) -> Step:
        if not self._actions:
            raise ValueError(f"Step '{self.name}' has no actions")
        return Step(
            name=self.name,
            actions=tuple(self._actions),
            message=self._message,
            depends_on=tuple(self._depends_on),
            best_effort=self._best_effort,
        )


def build(name: str) -> StepBuilder:
    """Convenience: build('js').run(...).insert_after(...).build()"""
    return StepBuilder(name)


# ---------------------------------------------------------------------
# Recipe helper (single-file story)
# ---------------------------------------------------------------------

def recipe_of(*steps: Step) -> List[Step]:
    """
    Recipe definition helper.

    Users can write:
        from recipekit import recipe_of, step, sh

        def recipe():
            return recipe_of(
                step(...),
                step(...),
            )

    Or use STEPS directly:
        STEPS = recipe_of(step(...), step(...))
    """
    return list(steps)
