"""Tests for the dev-task entry points in ecs_cicd._scripts."""

import sys
from unittest.mock import MagicMock, patch

import pytest

from ecs_cicd import _scripts


def _completed(code: int) -> MagicMock:
    return MagicMock(returncode=code)


def test_lint_forwards_extra_arguments(monkeypatch: pytest.MonkeyPatch) -> None:
    """Arguments after the script name reach ruff; the exit code is ruff's."""
    monkeypatch.setattr(sys, "argv", ["lint", "--statistics"])

    with patch("ecs_cicd._scripts.subprocess.run", return_value=_completed(1)) as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            _scripts.lint()

    assert exc_info.value.code == 1
    (args,) = mock_run.call_args.args
    assert args == [sys.executable, "-m", "ruff", "check", "ecs_cicd", "tests", "--statistics"]


def test_coverage_targets_the_package(monkeypatch: pytest.MonkeyPatch) -> None:
    """test-cov measures ecs_cicd only."""
    monkeypatch.setattr(sys, "argv", ["test-cov"])

    with patch("ecs_cicd._scripts.subprocess.run", return_value=_completed(0)) as mock_run:
        with pytest.raises(SystemExit):
            _scripts.test_cov()

    (args,) = mock_run.call_args.args
    assert "--cov=ecs_cicd" in args


def test_check_stops_at_first_failure() -> None:
    """check runs lint, format check, pyright and pytest in order and stops when one fails."""
    results = [_completed(0), _completed(3)]

    with patch("ecs_cicd._scripts.subprocess.run", side_effect=results) as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            _scripts.check()

    assert exc_info.value.code == 3
    assert mock_run.call_count == 2
    assert mock_run.call_args.args[0][2:5] == ["ruff", "format", "--check"]


def test_check_passes_when_every_step_passes() -> None:
    """All four steps succeeding returns normally."""
    with patch("ecs_cicd._scripts.subprocess.run", return_value=_completed(0)) as mock_run:
        _scripts.check()

    assert mock_run.call_count == 4
    assert mock_run.call_args.args[0][2] == "pytest"
