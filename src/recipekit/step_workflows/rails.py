# step_workflows/rails.py
from __future__ import annotations

import shlex
from typing import Iterable, List

from ..dsl import append, create_file, insert_after, sh
from ..model import Command, Mutation

GEMFILE = "Gemfile"
ROUTES = "config/routes.rb"
APPLICATION = "config/application.rb"
IMPORTMAP = "config/importmap.rb"
APPLICATION_JS = "app/javascript/application.js"

ROUTES_MARKER = "Rails.application.routes.draw do\n"
APPLICATION_MARKER = "class Application < Rails::Application\n"
ENVIRONMENT_MARKER = "Rails.application.configure do\n"


def _ruby_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return f'"{value}"'


def _gem_line(name: str, versions: Iterable[str], options: dict, indent: str = "") -> str:
    parts = [_ruby_value(name)] + [_ruby_value(v) for v in versions]
    parts += [f"{k}: {_ruby_value(v)}" for k, v in options.items()]
    return f"{indent}gem {', '.join(parts)}\n"


def _indent(text: str, prefix: str) -> str:
    lines = text.rstrip("\n").splitlines()
    return "".join(f"{prefix}{line}\n" if line.strip() else "\n" for line in lines)


# ---------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------

def gem(name: str, *versions: str, **options) -> Mutation:
    """Append a gem declaration to the Gemfile, e.g. gem("pagy") or gem("devise", github="...")."""
    return append(GEMFILE, _gem_line(name, versions, options), skip_if_present=True)


def gem_group(*groups: str, gems: List[str]) -> Mutation:
    """Append a `group :a, :b do ... end` block of plain gem declarations."""
    if not groups:
        raise ValueError("gem_group() needs at least one group")
    header = ", ".join(f":{g}" for g in groups)
    body = "".join(_gem_line(g, (), {}, indent="  ") for g in gems)
    return append(GEMFILE, f"\ngroup {header} do\n{body}end\n", skip_if_present=True)


def bundle_install(*, timeout: float | None = None) -> Command:
    return sh(["bundle", "install"], timeout=timeout)


# ---------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------

def generate(what: str, *args: str, timeout: float | None = None) -> Command:
    """bin/rails generate <what> [args...]; `what` may carry its own flags."""
    return sh(["bin/rails", "generate", *shlex.split(what), *args], timeout=timeout)


def rails_command(command: str, *, timeout: float | None = None) -> Command:
    """bin/rails <command>, e.g. rails_command("active_storage:install")."""
    return sh(["bin/rails", *shlex.split(command)], timeout=timeout)


# ---------------------------------------------------------------------
# Configuration files
# ---------------------------------------------------------------------

def route(text: str) -> Mutation:
    """
    Add a routing line at the top of the routes block.

    Like the Rails generator, a route already declared anywhere in the file
    is left alone, so routes stacked under the same marker stay idempotent.
    """
    return insert_after(ROUTES, ROUTES_MARKER, _indent(text, "  "), skip_if_present=True)


def environment(text: str, env: str | None = None) -> Mutation:
    """
    Add configuration to config/application.rb, or to
    config/environments/<env>.rb when `env` is given.
    """
    if env is None:
        return insert_after(APPLICATION, APPLICATION_MARKER, _indent(text, "    "), skip_if_present=True)
    return insert_after(f"config/environments/{env}.rb", ENVIRONMENT_MARKER, _indent(text, "  "), skip_if_present=True)


def initializer(filename: str, body: str) -> Mutation:
    return create_file(f"config/initializers/{filename}", body)


def lib_file(filename: str, body: str) -> Mutation:
    return create_file(f"lib/{filename}", body)


def importmap_pin(name: str, to: str | None = None) -> Mutation:
    line = f'pin "{name}"' + (f', to: "{to}"' if to else "")
    return append(IMPORTMAP, line + "\n", skip_if_present=True)


def js_import(module: str, path: str = APPLICATION_JS) -> Mutation:
    return append(path, f'import "{module}"\n', skip_if_present=True)


def gitignore(*patterns: str) -> Mutation:
    return append(".gitignore", "".join(f"{p}\n" for p in patterns), skip_if_present=True)
