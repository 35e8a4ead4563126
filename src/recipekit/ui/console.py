"""Console output formatting utilities for recipekit."""

from __future__ import annotations

import sys
from typing import Optional

from ..model import CommitRecord


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(
        self,
        project: str,
        recipe: str,
        step_count: int,
        dry_run: bool = False,
    ) -> None:
        """Print run start information."""
        print("\nDRY RUN STARTED" if dry_run else "\nRUN STARTED")
        print(f"Project: {project}")
        print(f"Recipe: {recipe}")
        print(f"Steps: {step_count}")
        print()

    def print_step_start(self, name: str) -> None:
        """Print step start message."""
        print(f"\nSTEP STARTED: {name}")

    def print_action(self, description: str, changed: Optional[bool] = None) -> None:
        """Print one action line; `changed=False` marks a no-op."""
        suffix = " (unchanged)" if changed is False else ""
        print(f"  {description}{suffix}")

    def print_say(self, message: str) -> None:
        print(f"  >> {message}")

    def print_commit(self, record: CommitRecord) -> None:
        """Print commit message for a finished step."""
        if record.sha:
            print(f"COMMIT: {record.sha[:12]} {record.message} ({len(record.files_changed)} file(s))")
        else:
            print(f"COMMIT: none ({record.message}: nothing changed)")

    def print_step_skipped(self, name: str, reason: str) -> None:
        """Print step skipped message."""
        print(f"\nSTEP SKIPPED: {name} ({reason})")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
        best_effort: bool = False,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Step name
            reason: Failure reason/error message
            exit_code: Optional exit code of the failing command
            hint: Optional hint for user
            best_effort: If True the step keeps going after this failure
        """
        prefix = "IGNORED FAILURE" if best_effort else "STEP FAILED"
        print(f"{prefix}: {name}")
        if exit_code is not None:
            print(f"Exit code: {exit_code}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # first line only outside debug mode
            error_line = reason.split('\n')[0] if reason else "Unknown error"
            print(f"Error: {error_line}")

    def print_plan_step(self, index: int, name: str, actions: list[str], note: str = "") -> None:
        """Print one step of a recipe plan."""
        suffix = f" ({note})" if note else ""
        print(f"{index:>3}. {name}{suffix}")
        for a in actions:
            print(f"       {a}")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for step, status in results.items():
            print(f"  {step}: {status.upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
