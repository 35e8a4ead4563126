# runner.py
from __future__ import annotations

import runpy
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from . import settings
from .checkpoint import Checkpoint
from .commands import CommandError, CommandRunner, NonZeroExit
from .dag import RecipeError, build_order, steps_from
from .model import Action, Command, CommitRecord, Mutation, ProjectTree, Say, Step
from .mutator import FileMutator, MutationError
from .ui.console import get_console
from .vcs import CommitError, VersionControlSink

# Step states
PENDING = "pending"
RUNNING = "running"
COMMITTED = "committed"
FAILED = "failed"
DRY_RUN = "dry-run"
SKIPPED_RESUME = "skipped(resume)"
SKIPPED_FROM = "skipped(from-step)"


# ----------------------------------------------------------------------
# Recipe loading (local file)
# ----------------------------------------------------------------------

def load_recipe(path: str | Path) -> List[Step]:
    """
    Load a recipe from a python file path.

    The file must define either:
      - recipe() -> List[Step]
      - STEPS = [Step, ...]

    Returns:
      List[Step]
    """
    rp = Path(path).expanduser().resolve()
    if not rp.exists():
        raise RecipeError(f"Recipe file not found: {rp}")
    if rp.suffix != ".py":
        raise RecipeError(f"Recipe must be a .py file, got: {rp.name}")

    module_name = f"recipekit_recipe_{rp.stem}"
    globals_dict = runpy.run_path(str(rp), run_name=module_name)

    steps = None
    if "recipe" in globals_dict and callable(globals_dict["recipe"]):
        steps = globals_dict["recipe"]()
    elif "STEPS" in globals_dict:
        steps = globals_dict["STEPS"]

    if not isinstance(steps, list) or not all(isinstance(s, Step) for s in steps):
        raise RecipeError(
            "Recipe must return/define a List[Step]. "
            "Define recipe() -> List[Step] or STEPS = [Step, ...]."
        )

    build_order(steps)
    return steps


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class StepError(Exception):
    step: str
    cause: Exception

    def __str__(self) -> str:
        return f"step '{self.step}' failed: {self.cause}"


@dataclass
class PipelineError(Exception):
    failed_step: str
    cause: Exception
    partial_results: Tuple[CommitRecord, ...] = ()

    def __str__(self) -> str:
        return (
            f"pipeline stopped at step '{self.failed_step}' "
            f"after {len(self.partial_results)} committed step(s): {self.cause}"
        )


# ----------------------------------------------------------------------
# Step execution
# ----------------------------------------------------------------------

class StepRunner:
    """
    Runs one Step as an atomic unit: actions in order, then one commit.

    On failure nothing is committed and files already written stay on disk.
    """

    def __init__(
        self,
        tree: ProjectTree,
        *,
        mutator: Optional[FileMutator] = None,
        commands: Optional[CommandRunner] = None,
        sink: Optional[VersionControlSink] = None,
        dry_run: bool = False,
    ):
        self.tree = tree
        self.mutator = mutator or FileMutator()
        self.commands = commands or CommandRunner()
        self.sink = sink or VersionControlSink(tree.root, exclude=[settings.STATE_DIR])
        self.dry_run = dry_run

    def prepare(self) -> None:
        """Make sure there is a repository to commit into."""
        if self.dry_run:
            return
        console = get_console()
        if self.sink.ensure_repo():
            console.print_info(f"Initialized git repository in {self.tree.root}")
        elif self.sink.has_uncommitted_changes():
            console.print_info(
                f"WARNING: {self.tree.root} has uncommitted changes; "
                "they will be included in the next step's commit."
            )

    def execute(self, step: Step) -> CommitRecord:
        console = get_console()
        console.print_step_start(step.name)

        for action in step.actions:
            try:
                self._run_action(action)
            except CommandError as e:
                if not step.best_effort:
                    raise StepError(step.name, e) from e
                console.print_failure(
                    step.name,
                    str(e),
                    exit_code=e.exit_code if isinstance(e, NonZeroExit) else None,
                    hint=e.hint,
                    best_effort=True,
                )
            except MutationError as e:
                raise StepError(step.name, e) from e

        if self.dry_run:
            return CommitRecord(step=step.name, message=step.commit_message, timestamp=datetime.now(timezone.utc))

        try:
            record = self.sink.commit_all(step.name, step.commit_message)
        except CommitError as e:
            raise StepError(step.name, e) from e
        console.print_commit(record)
        return record

    def _run_action(self, action: Action) -> None:
        console = get_console()
        if isinstance(action, Say):
            console.print_say(action.message)
            return
        if self.dry_run:
            console.print_action(action.describe())
            return

        if isinstance(action, Mutation):
            result = self.mutator.apply(self.tree, action)
            console.print_action(action.describe(), changed=result.changed)
        elif isinstance(action, Command):
            console.print_action(action.describe())
            out = self.commands.run(self.tree, action)
            console.print_debug(f"{action.executable} finished in {out.duration:.1f}s")
        else:
            raise TypeError(f"Unknown action type: {type(action).__name__}")


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------

class Pipeline:
    """
    Ordered list of Steps executed strictly in sequence.

    The pipeline exclusively owns the CommitRecord log. It stops at the
    first failing step and reports the records committed before it.
    """

    def __init__(
        self,
        steps: Sequence[Step],
        runner: StepRunner,
        *,
        checkpoint: Optional[Checkpoint] = None,
    ):
        build_order(steps)
        self.steps: Tuple[Step, ...] = tuple(steps)
        self.runner = runner
        self.checkpoint = checkpoint
        self.status: Dict[str, str] = {s.name: PENDING for s in self.steps}
        self._records: List[CommitRecord] = []

    @property
    def records(self) -> Tuple[CommitRecord, ...]:
        return tuple(self._records)

    def run(self, *, from_step: str | None = None, resume: bool = False) -> List[CommitRecord]:
        console = get_console()
        dry_run = self.runner.dry_run

        todo = steps_from(self.steps, from_step) if from_step else list(self.steps)
        todo_names = {s.name for s in todo}

        done: Dict[str, CommitRecord] = {}
        if self.checkpoint is not None:
            if resume:
                done = self.checkpoint.completed()
            elif from_step is None and not dry_run:
                # fresh run, forget any previous progress
                self.checkpoint.clear()

        self.runner.prepare()

        for step in self.steps:
            if step.name not in todo_names:
                self.status[step.name] = SKIPPED_FROM
                continue
            if step.name in done:
                self.status[step.name] = SKIPPED_RESUME
                console.print_step_skipped(step.name, "already completed")
                continue

            self.status[step.name] = RUNNING
            try:
                record = self.runner.execute(step)
            except StepError as e:
                self.status[step.name] = FAILED
                raise PipelineError(step.name, e.cause, tuple(self._records)) from e

            self._records.append(record)
            self.status[step.name] = DRY_RUN if dry_run else COMMITTED
            if self.checkpoint is not None and not dry_run:
                self.checkpoint.record(record)

        return list(self._records)


def build_pipeline(
    steps: Sequence[Step],
    *,
    root: str | Path = ".",
    templates: str | Path | None = None,
    dry_run: bool = False,
    timeout: float | None = None,
    state_dir: str = settings.STATE_DIR,
    use_checkpoint: bool = True,
) -> Pipeline:
    """Wire a Pipeline over the project at `root` with the default components."""
    tree = ProjectTree.at(root, templates)
    runner = StepRunner(
        tree,
        commands=CommandRunner(timeout=timeout),
        sink=VersionControlSink(tree.root, exclude=[state_dir]),
        dry_run=dry_run,
    )
    checkpoint = Checkpoint(tree.root / state_dir / settings.CHECKPOINT_FILE) if use_checkpoint else None
    return Pipeline(steps, runner, checkpoint=checkpoint)
