from __future__ import annotations

import pytest

from recipekit.dsl import (
    append,
    build,
    copy,
    delete,
    insert_after,
    recipe_of,
    say,
    sh,
    step,
    uncomment,
)
from recipekit.model import APPEND, COPY, INSERT_AFTER, Command, Mutation, Say


def test_sh_splits_strings_without_a_shell() -> None:
    cmd = sh("bin/rails generate devise User 'first name'")

    assert cmd.argv == ("bin/rails", "generate", "devise", "User", "first name")
    assert cmd.executable == "bin/rails"
    assert cmd.arguments[0] == "generate"
    assert cmd.expect == (0,)


def test_sh_accepts_argv_and_options() -> None:
    cmd = sh(["bundle", "install"], cwd="app", expect=[0, 1], timeout=30, env={"B": "2", "A": "1"})

    assert cmd == Command(argv=("bundle", "install"), cwd="app", expect=(0, 1), timeout=30, env=(("A", "1"), ("B", "2")))


def test_sh_rejects_empty_command() -> None:
    with pytest.raises(ValueError):
        sh("")


def test_mutation_helpers() -> None:
    assert insert_after("a", "m", "t") == Mutation(op=INSERT_AFTER, path="a", marker="m", text="t")
    assert append("a", "t").op == APPEND
    assert copy(".env.example", ".env") == Mutation(op=COPY, path=".env", source=".env.example")
    assert delete("x", ignore_missing=True).ignore_missing
    assert uncomment("a.rb", "require f").marker == "require f"


def test_mutation_validation() -> None:
    with pytest.raises(ValueError):
        Mutation(op="rename", path="a")
    with pytest.raises(ValueError):
        Mutation(op=INSERT_AFTER, path="a", text="x")


def test_step_flattens_action_lists() -> None:
    gems = [append("Gemfile", 'gem "a"\n'), append("Gemfile", 'gem "b"\n')]

    s = step("gems", say("adding gems"), gems, message="add gems", depends_on=["setup"])

    assert len(s.actions) == 3
    assert isinstance(s.actions[0], Say)
    assert s.commit_message == "add gems"
    assert s.depends_on == ("setup",)


def test_step_defaults_commit_message_to_name() -> None:
    assert step("bundle", sh("bundle install")).commit_message == "bundle"


def test_step_requires_actions() -> None:
    with pytest.raises(ValueError):
        step("empty")


def test_builder() -> None:
    s = (
        build("js")
        .depends_on("importmap")
        .run("bin/importmap pin tom-select")
        .append("config/importmap.rb", 'pin "popper"\n')
        .insert_after("app/javascript/application.js", "// entry\n", 'import "popper"\n')
        .say("done")
        .commit_message("custom js")
        .best_effort()
        .build()
    )

    assert s.name == "js"
    assert [type(a).__name__ for a in s.actions] == ["Command", "Mutation", "Mutation", "Say"]
    assert s.message == "custom js"
    assert s.best_effort
    assert s.depends_on == ("importmap",)


def test_builder_requires_actions() -> None:
    with pytest.raises(ValueError):
        build("empty").build()


def test_recipe_of() -> None:
    a, b = step("a", say("a")), step("b", say("b"))

    assert recipe_of(a, b) == [a, b]


def test_describe() -> None:
    assert insert_after("config/routes.rb", "do\n", "x").describe() == "insert into config/routes.rb after 'do\\n'"
    assert copy("app").describe() == "copy app -> app"
    assert sh("bundle install").describe() == "run bundle install"
