# commands.py
from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from .model import Command, ProjectTree


TOOL_HINTS = {
    "bundle": "Install Bundler (gem install bundler) or fix PATH.",
    "bin/rails": "Run `bundle install` first so the Rails binstubs exist.",
    "rails": "Install Rails (gem install rails) or fix PATH.",
    "bin/importmap": "Install importmap-rails (bin/rails importmap:install) first.",
    "yarn": "Install Yarn or fix PATH.",
    "npm": "Install Node.js (includes npm) or fix PATH.",
    "node": "Install Node.js or fix PATH.",
    "git": "Install Git or fix PATH.",
}

OUTPUT_TAIL = 4000


def hint_for(executable: str) -> Optional[str]:
    exe = executable.removeprefix("./")
    return TOOL_HINTS.get(exe) or TOOL_HINTS.get(os.path.basename(exe))


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

class CommandError(Exception):
    """An external command failed."""
    kind = "command_error"

    def __init__(self, argv: Tuple[str, ...], message: str):
        super().__init__(message)
        self.argv = tuple(argv)
        self.message = message

    @property
    def cmd(self) -> str:
        return " ".join(self.argv)

    @property
    def hint(self) -> Optional[str]:
        return hint_for(self.argv[0]) if self.argv else None

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}: {self.cmd}"


class ExecutionFailure(CommandError):
    """The executable could not be launched at all."""
    kind = "execution_failure"


class NonZeroExit(CommandError):
    kind = "non_zero_exit"

    def __init__(self, argv: Tuple[str, ...], exit_code: int, stdout: str = "", stderr: str = ""):
        super().__init__(argv, f"exited with {exit_code}")
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        lines = [super().__str__()]
        tail = (self.stderr or self.stdout).strip()
        if tail:
            lines.append(tail)
        return "\n".join(lines)


class CommandTimeout(CommandError):
    kind = "command_timeout"

    def __init__(self, argv: Tuple[str, ...], timeout: float):
        super().__init__(argv, f"timed out after {timeout:g}s")
        self.timeout = timeout


@dataclass(frozen=True)
class CommandOutput:
    argv: Tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str
    duration: float


# ----------------------------------------------------------------------
# Runner
# ----------------------------------------------------------------------

class CommandRunner:
    """
    Runs Commands synchronously inside a ProjectTree.

    Args:
        timeout: default per-command timeout in seconds (None = wait forever).
                 A Command's own timeout takes precedence.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(self, tree: ProjectTree, command: Command) -> CommandOutput:
        if not command.argv:
            raise ExecutionFailure((), "empty command")

        try:
            cwd = tree.resolve(command.cwd or ".")
        except ValueError as e:
            raise ExecutionFailure(command.argv, str(e)) from e
        if not cwd.is_dir():
            raise ExecutionFailure(command.argv, f"working directory not found: {cwd}")

        env = os.environ.copy()
        env.update(dict(command.env))

        timeout = command.timeout if command.timeout is not None else self.timeout
        started = time.monotonic()
        try:
            proc = subprocess.run(
                list(command.argv),
                shell=False,
                cwd=str(cwd),
                env=env,
                text=True,
                capture_output=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeout(command.argv, timeout) from e
        except OSError as e:
            # FileNotFoundError, PermissionError, exec format errors
            raise ExecutionFailure(command.argv, e.strerror or str(e)) from e

        if proc.returncode not in command.expect:
            raise NonZeroExit(
                command.argv,
                exit_code=proc.returncode,
                stdout=proc.stdout[-OUTPUT_TAIL:],
                stderr=proc.stderr[-OUTPUT_TAIL:],
            )

        return CommandOutput(
            argv=command.argv,
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration=time.monotonic() - started,
        )
