"""Invoke tasks wrapping the uv CLI for syncing, building, linting, and testing."""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"


def _uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Run ``uv`` with ``args`` quoted for the shell.

    Args:
        ctx: Invoke execution context.
        args: Arguments appended after the ``uv`` executable.
        echo: Whether to echo the command before running it.
    """
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task(help={"extra": "Optional dependency group to install (dev, test, xapian)."})
def sync(ctx: Context, extra: str = "dev") -> None:
    """Synchronize the virtual environment, including ``extra`` when given."""
    args = ["sync"]
    if extra:
        args.extend(["--extra", extra])
    _uv(ctx, args)


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into ``dist/``."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
        "options": "Additional CLI flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite; Xapian tests skip themselves when the bindings are absent."""
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, args)


@task(help={"fix": "Apply auto-fixes where possible (ruff --fix)."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with Ruff."""
    _uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    args = ["run", "ruff", "check", "src", "tests"]
    if fix:
        args.append("--fix")
    _uv(ctx, args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package sources."""
    _uv(ctx, ["run", "mypy", "src"])


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks, and tests in the same order as CI."""
    ctx.invoke(lint)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, mypy, ci)
