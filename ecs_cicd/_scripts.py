"""Dev tasks for ecs-cicd, exposed as project scripts: uv run lint | format | type-check | test | check.

Extra command-line arguments go to the underlying tool, e.g. ``uv run test -k teardown``.
"""

import subprocess
import sys

SOURCES = ["ecs_cicd", "tests"]


def _tool(*args: str) -> list[str]:
    return [sys.executable, "-m", *args, *sys.argv[1:]]


def _run(args: list[str]) -> None:
    """Run a command; exit with its code."""
    sys.exit(subprocess.run(args).returncode)


def lint() -> None:
    """ruff check over the package and its tests."""
    _run(_tool("ruff", "check", *SOURCES))


def lint_fix() -> None:
    _run(_tool("ruff", "check", "--fix", *SOURCES))


def format() -> None:
    _run(_tool("ruff", "format", *SOURCES))


def type_check() -> None:
    """pyright over the package (tests use FakeCloud monkeypatching and are left out)."""
    _run(_tool("pyright", "ecs_cicd"))


def test() -> None:
    _run(_tool("pytest", "tests/"))


def test_cov() -> None:
    """pytest with line coverage for ecs_cicd; missing lines are listed."""
    _run(_tool("pytest", "tests/", "--cov=ecs_cicd", "--cov-report=term-missing"))


def check() -> None:
    """Lint, type-check, then test; stop at the first step that fails."""
    for args in (
        [sys.executable, "-m", "ruff", "check", *SOURCES],
        [sys.executable, "-m", "ruff", "format", "--check", *SOURCES],
        [sys.executable, "-m", "pyright", "ecs_cicd"],
        [sys.executable, "-m", "pytest", "tests/", "-q"],
    ):
        code = subprocess.run(args).returncode
        if code:
            sys.exit(code)
