# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from . import settings
from .checkpoint import Checkpoint
from .commands import CommandError, NonZeroExit
from .dag import RecipeError
from .mutator import MutationError
from .runner import PipelineError, build_pipeline, load_recipe
from .ui.console import Console, get_console, set_console
from .vcs import CommitError

EXIT_FAILURE = 1
EXIT_RECIPE = 2
EXIT_MUTATION = 3
EXIT_COMMAND = 4
EXIT_COMMIT = 5
EXIT_INTERRUPTED = 130


def exit_code_for(exc: BaseException) -> int:
    """Map a failure cause to the process exit code."""
    if isinstance(exc, MutationError):
        return EXIT_MUTATION
    if isinstance(exc, CommandError):
        return EXIT_COMMAND
    if isinstance(exc, CommitError):
        return EXIT_COMMIT
    if isinstance(exc, RecipeError):
        return EXIT_RECIPE
    return EXIT_FAILURE


def find_recipe_files(directory: Path = Path(".")) -> list[Path]:
    """
    Find all recipe files in a directory.

    Returns:
        List of Path objects for recipe files
    """
    recipe_files = []

    default_recipe = directory / settings.DEFAULT_RECIPE
    if default_recipe.exists():
        recipe_files.append(default_recipe)

    for path in directory.glob("*_recipe.py"):
        if path != default_recipe:
            recipe_files.append(path)

    return sorted(recipe_files)


def discover_recipe(config_arg: str | None) -> Path:
    """
    Discover recipe file from --config or the current directory.

    Raises:
        SystemExit: If no recipe (or more than one candidate) is found
    """
    console = get_console()

    if config_arg:
        recipe_path = Path(config_arg)
        if not recipe_path.exists() and recipe_path.suffix != ".py":
            recipe_path = Path(str(recipe_path) + ".py")
        if not recipe_path.exists():
            console.print_error(
                "Recipe file not found",
                f"Could not find recipe file: {config_arg}",
                suggestion="Create a recipe file or specify a different path:\n  recipekit run --config my_recipe.py",
            )
            sys.exit(EXIT_RECIPE)
        return recipe_path

    recipe_files = find_recipe_files()

    if len(recipe_files) == 0:
        console.print_error(
            "No recipe file found",
            "Could not find any recipe files.",
            details=[
                "Looked for:",
                f"  {settings.DEFAULT_RECIPE}",
                "  *_recipe.py",
            ],
            suggestion=f"Create a recipe file:\n  {settings.DEFAULT_RECIPE}\n\nOr specify one explicitly:\n  recipekit run --config my_recipe.py",
        )
        sys.exit(EXIT_RECIPE)

    if len(recipe_files) > 1:
        file_list = "\n".join(f"  {f}" for f in recipe_files)
        console.print_error(
            "Multiple recipe files found",
            "Found multiple recipe files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a recipe explicitly:\n  recipekit run --config {settings.DEFAULT_RECIPE}",
        )
        sys.exit(EXIT_RECIPE)

    return recipe_files[0]


def _load_or_exit(ctx, recipe_path: Path):
    console = get_console()
    try:
        return load_recipe(recipe_path)
    except Exception as e:
        console.print_error(
            "Failed to load recipe",
            f"Could not load recipe from {recipe_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(EXIT_RECIPE)


def _templates_for(recipe_path: Path, templates: str | None) -> Path | None:
    if templates:
        return Path(templates)
    if settings.TEMPLATES_DIR:
        return Path(settings.TEMPLATES_DIR)
    default = recipe_path.resolve().parent / "templates"
    return default if default.is_dir() else None


def _report_pipeline_error(console: Console, e: PipelineError) -> None:
    cause = e.cause
    console.print_failure(
        e.failed_step,
        str(cause),
        exit_code=cause.exit_code if isinstance(cause, NonZeroExit) else None,
        hint=cause.hint if isinstance(cause, CommandError) else None,
    )
    console.print_error(
        "Pipeline stopped",
        f"Step '{e.failed_step}' failed after {len(e.partial_results)} committed step(s).",
        details=[f"{type(cause).__name__}: {cause}"],
        suggestion=(
            "The project is left as the failing step found it. Fix the cause, then:\n"
            f"  recipekit run --resume\n  recipekit run --from-step {e.failed_step}"
        ),
    )


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """recipekit: replay a project bootstrap recipe, one commit per step."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--config", "config", default=None, help=f"Recipe file (defaults to {settings.DEFAULT_RECIPE} if present)")
@click.option(
    "--root",
    default=".",
    show_default=True,
    type=click.Path(exists=True, file_okay=False),
    help="Project directory to bootstrap",
)
@click.option("--templates", default=None, help="Directory copied templates are read from (defaults to templates/ next to the recipe)")
@click.option("--dry-run", is_flag=True, default=False, help="Print what each step would do without touching the project")
@click.option("--from-step", default=None, help="Start at this step, skipping the ones before it")
@click.option("--resume/--no-resume", default=False, help="Skip steps recorded as completed in the checkpoint")
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    envvar="RECIPEKIT_TIMEOUT",
    help="Per-command timeout in seconds [env: RECIPEKIT_TIMEOUT]",
)
@click.option("--checkpoint/--no-checkpoint", default=True, show_default=True, help="Record completed steps for --resume")
@click.pass_context
def run(ctx, config, root, templates, dry_run, from_step, resume, timeout, checkpoint):
    """Run a recipe against a project."""
    console = get_console()

    recipe_path = discover_recipe(config)
    steps = _load_or_exit(ctx, recipe_path)

    try:
        pipeline = build_pipeline(
            steps,
            root=root,
            templates=_templates_for(recipe_path, templates),
            dry_run=dry_run,
            timeout=timeout,
            use_checkpoint=checkpoint,
        )
    except RecipeError as e:
        console.print_error("Invalid recipe", str(e))
        sys.exit(EXIT_RECIPE)

    console.print_run_started(
        project=Path(root).resolve().name,
        recipe=recipe_path.name,
        step_count=len(steps),
        dry_run=dry_run,
    )

    try:
        pipeline.run(from_step=from_step, resume=resume)
        console.print_results(pipeline.status)
    except PipelineError as e:
        console.print_results(pipeline.status)
        _report_pipeline_error(console, e)
        sys.exit(exit_code_for(e.cause))
    except RecipeError as e:
        console.print_error("Invalid recipe", str(e))
        sys.exit(EXIT_RECIPE)
    except CommitError as e:
        console.print_error("Git error", str(e), suggestion="Check that git is installed and the project directory is writable.")
        sys.exit(EXIT_COMMIT)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        console.print_exception(e)
        sys.exit(EXIT_FAILURE)


@cli.command()
@click.option("--config", "config", default=None, help=f"Recipe file (defaults to {settings.DEFAULT_RECIPE} if present)")
@click.option("--root", default=".", show_default=True, type=click.Path(file_okay=False), help="Project directory (for checkpoint state)")
@click.pass_context
def plan(ctx, config, root):
    """List the recipe's steps and actions in execution order."""
    console = get_console()

    recipe_path = discover_recipe(config)
    steps = _load_or_exit(ctx, recipe_path)

    done = _completed_steps(Path(root))
    console.print_header(f"Recipe {recipe_path.name} ({len(steps)} steps)")
    for i, s in enumerate(steps, start=1):
        notes = []
        if s.name in done:
            notes.append("completed")
        if s.best_effort:
            notes.append("best-effort")
        if s.depends_on:
            notes.append("after " + ", ".join(s.depends_on))
        console.print_plan_step(i, s.name, [a.describe() for a in s.actions], note="; ".join(notes))


@cli.command()
@click.option("--root", default=".", show_default=True, type=click.Path(file_okay=False), help="Project directory")
def status(root):
    """Show the steps recorded in the project's checkpoint."""
    console = get_console()
    try:
        records = _checkpoint_for(Path(root)).load()
    except ValueError as e:
        console.print_error("Unreadable checkpoint", str(e))
        sys.exit(EXIT_FAILURE)

    if not records:
        console.print_info("No completed steps recorded.")
        return

    console.print_header(f"Completed steps ({len(records)})")
    for r in records:
        sha = r.sha[:12] if r.sha else "-" * 12
        console.print_info(f"  {sha}  {r.timestamp:%Y-%m-%d %H:%M:%S}  {r.step}: {r.message}")


def _checkpoint_for(root: Path) -> Checkpoint:
    return Checkpoint(root / settings.STATE_DIR / settings.CHECKPOINT_FILE)


def _completed_steps(root: Path) -> set[str]:
    try:
        return {r.step for r in _checkpoint_for(root).load()}
    except ValueError:
        return set()


if __name__ == "__main__":
    cli()
