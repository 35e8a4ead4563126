from __future__ import annotations

import sys

import pytest

from recipekit.commands import (
    CommandRunner,
    CommandTimeout,
    ExecutionFailure,
    NonZeroExit,
    hint_for,
)
from recipekit.dsl import sh
from recipekit.model import ProjectTree


def _py(code: str, **kwargs):
    return sh([sys.executable, "-c", code], **kwargs)


def test_run_captures_output(tree: ProjectTree) -> None:
    out = CommandRunner().run(tree, _py("print('generated')"))

    assert out.exit_code == 0
    assert out.stdout.strip() == "generated"


def test_run_in_tree_root(tree: ProjectTree) -> None:
    CommandRunner().run(tree, _py("open('created.txt', 'w').write('x')"))

    assert (tree.root / "created.txt").read_text() == "x"


def test_run_in_subdirectory(tree: ProjectTree) -> None:
    (tree.root / "app").mkdir()

    out = CommandRunner().run(tree, _py("import os; print(os.path.basename(os.getcwd()))", cwd="app"))

    assert out.stdout.strip() == "app"


def test_missing_executable_is_execution_failure(tree: ProjectTree) -> None:
    with pytest.raises(ExecutionFailure) as excinfo:
        CommandRunner().run(tree, sh("definitely-not-installed-generator --install"))

    assert excinfo.value.argv == ("definitely-not-installed-generator", "--install")


def test_missing_working_directory_is_execution_failure(tree: ProjectTree) -> None:
    with pytest.raises(ExecutionFailure):
        CommandRunner().run(tree, _py("pass", cwd="does/not/exist"))


def test_non_zero_exit(tree: ProjectTree) -> None:
    with pytest.raises(NonZeroExit) as excinfo:
        CommandRunner().run(tree, _py("import sys; sys.stderr.write('boom'); sys.exit(3)"))

    err = excinfo.value
    assert err.exit_code == 3
    assert err.stderr == "boom"
    assert "boom" in str(err)


def test_expected_exit_codes(tree: ProjectTree) -> None:
    out = CommandRunner().run(tree, _py("import sys; sys.exit(1)", expect=(0, 1)))

    assert out.exit_code == 1


def test_env_is_passed_through(tree: ProjectTree) -> None:
    out = CommandRunner().run(tree, _py("import os; print(os.environ['RAILS_ENV'])", env={"RAILS_ENV": "test"}))

    assert out.stdout.strip() == "test"


def test_runner_timeout(tree: ProjectTree) -> None:
    with pytest.raises(CommandTimeout) as excinfo:
        CommandRunner(timeout=0.2).run(tree, _py("import time; time.sleep(10)"))

    assert excinfo.value.timeout == 0.2


def test_command_timeout_overrides_runner_default(tree: ProjectTree) -> None:
    with pytest.raises(CommandTimeout):
        CommandRunner(timeout=60).run(tree, _py("import time; time.sleep(10)", timeout=0.2))


def test_tool_hints() -> None:
    assert "Bundler" in hint_for("bundle")
    assert hint_for("./bin/rails") == hint_for("bin/rails")
    assert hint_for("some-tool") is None
