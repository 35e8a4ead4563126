from __future__ import annotations

import pytest

from recipekit.dag import RecipeError, build_order, steps_from
from recipekit.dsl import say, step


def _steps(*specs):
    return [step(name, say(name), depends_on=deps) for name, deps in specs]


def test_build_order_positions() -> None:
    steps = _steps(("gems", []), ("bundle", ["gems"]), ("devise", ["bundle", "gems"]))

    assert build_order(steps) == {"gems": 0, "bundle": 1, "devise": 2}


def test_duplicate_names() -> None:
    with pytest.raises(RecipeError, match="Duplicate step names"):
        build_order(_steps(("gems", []), ("gems", [])))


def test_unknown_dependency() -> None:
    with pytest.raises(RecipeError, match="missing step 'bundle'"):
        build_order(_steps(("devise", ["bundle"])))


def test_dependency_must_come_first() -> None:
    with pytest.raises(RecipeError, match="positioned after it"):
        build_order(_steps(("devise", ["bundle"]), ("bundle", [])))


def test_self_dependency() -> None:
    with pytest.raises(RecipeError):
        build_order(_steps(("devise", ["devise"])))


def test_steps_from() -> None:
    steps = _steps(("a", []), ("b", []), ("c", []))

    assert [s.name for s in steps_from(steps, "b")] == ["b", "c"]
    with pytest.raises(RecipeError, match="Unknown step"):
        steps_from(steps, "z")
