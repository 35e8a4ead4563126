# dag.py
from __future__ import annotations

from typing import Dict, List, Sequence

from .model import Step


class RecipeError(ValueError):
    """The recipe itself is invalid (bad ordering, duplicates, unloadable file)."""


def build_order(steps: Sequence[Step]) -> Dict[str, int]:
    """
    Validate step ordering and return {step name: position}.

    Steps run strictly in list order, so an explicit `depends_on` is only a
    checked assertion about that order:
      - names must be unique
      - every dependency must name a known step
      - every dependency must come BEFORE the step that declares it
    """
    names = [s.name for s in steps]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise RecipeError(f"Duplicate step names found: {dupes}")

    position = {name: i for i, name in enumerate(names)}

    for i, step in enumerate(steps):
        for dep in step.depends_on:
            if dep not in position:
                raise RecipeError(
                    f"Step '{step.name}' depends on missing step '{dep}'. "
                    f"Known steps: {names}"
                )
            if position[dep] >= i:
                raise RecipeError(
                    f"Step '{step.name}' depends on '{dep}', which is positioned after it. "
                    f"Move '{dep}' earlier in the recipe."
                )

    return position


def steps_from(steps: Sequence[Step], name: str) -> List[Step]:
    """The suffix of `steps` starting at the step called `name`."""
    position = build_order(steps)
    if name not in position:
        raise RecipeError(f"Unknown step '{name}'. Known steps: {[s.name for s in steps]}")
    return list(steps[position[name]:])
