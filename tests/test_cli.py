"""Tests for the ecs-cicd CLI (argument handling, prompts, exit codes)."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ecs_cicd.cli import build_parser, main
from ecs_cicd.errors import ProviderError
from tests.fakes import FakeCloud


@pytest.fixture
def cloud(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeCloud:
    """Run each CLI test in an empty directory against an in-memory cloud."""
    monkeypatch.chdir(tmp_path)
    for var in ("ECS_CICD_APP", "ECS_CICD_REGION", "AWS_REGION", "AWS_DEFAULT_REGION", "ECS_CICD_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    fake = FakeCloud()
    monkeypatch.setattr("ecs_cicd.cli._make_provider", lambda config: fake)
    return fake


def test_parser_requires_a_command() -> None:
    """No subcommand is a usage error."""
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_apply_prints_progress_and_ci_secrets(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """apply prints one line per kind, the secrets block and next steps."""
    assert main(["apply"]) == 0

    out = capsys.readouterr().out
    assert "[Registry] my-webapp: created" in out
    assert "[CIPrincipal] github-actions-user: created" in out
    assert "AWS_ACCESS_KEY_ID: AKIAFAKE0001" in out
    assert "ECS_CLUSTER: webapp-cicd-cluster" in out
    assert "Next steps:" in out


def test_apply_again_reports_nothing_changed(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Second apply skips everything."""
    main(["apply"])
    capsys.readouterr()

    assert main(["apply"]) == 0

    out = capsys.readouterr().out
    assert "[Cluster] webapp-cicd-cluster: already exists" in out
    assert "Nothing changed." in out


def test_apply_quota_warning(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Key quota exhaustion is a warning with placeholders, exit 0."""
    main(["apply"])
    main(["apply"])
    capsys.readouterr()

    assert main(["apply"]) == 0

    out = capsys.readouterr().out
    assert "WARNING:" in out
    assert "AWS_ACCESS_KEY_ID: [Use existing or create new access key]" in out


def test_overrides_reach_the_config(cloud: FakeCloud) -> None:
    """Per-command flags replace derived names."""
    assert main(["apply", "--app", "shop", "--cluster-name", "prod", "--ci-user", "deployer"]) == 0

    assert "prod" in cloud.clusters
    assert "my-shop" in cloud.repositories
    assert "deployer" in cloud.users
    assert "ecsTaskExecutionRole-prod" in cloud.roles


def test_config_file_is_used(cloud: FakeCloud, tmp_path: Path) -> None:
    """--config points at a YAML file."""
    path = tmp_path / "deploy.yaml"
    path.write_text("app: blog\nnames:\n  repository: blog-images\n", encoding="utf-8")

    assert main(["--config", str(path), "apply"]) == 0

    assert "blog-images" in cloud.repositories
    assert "blog-cicd-cluster" in cloud.clusters


def test_invalid_config_exits_1(cloud: FakeCloud, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Schema errors are reported and nothing runs."""
    path = tmp_path / "deploy.yaml"
    path.write_text("container:\n  port: 0\n", encoding="utf-8")

    assert main(["--config", str(path), "apply"]) == 1

    assert "config validation failed" in capsys.readouterr().err
    assert cloud.calls == []


def test_missing_credentials_exit_1(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Precondition failures print a message and exit 1."""
    cloud.credentials_ok = False

    assert main(["apply"]) == 1

    assert "credentials" in capsys.readouterr().err
    assert cloud.mutating_calls() == []


def test_step_failure_exit_1(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """A failed step names the kind and lists what was already done."""
    cloud.fail("create_security_group", ProviderError("ec2:CreateSecurityGroup", "UnauthorizedOperation", "no"))

    assert main(["apply"]) == 1

    err = capsys.readouterr().err
    assert "Failed at SecurityGroup 'webapp-cicd-sg'" in err
    assert "[Cluster] webapp-cicd-cluster: created" in err


def test_check_on_clean_account(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """check reports zero resources and the all-clear message."""
    assert main(["check"]) == 0

    out = capsys.readouterr().out
    assert "Total resources found: 0" in out
    assert "All resources have been cleaned up" in out
    assert cloud.mutating_calls() == []


def test_check_after_apply(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """check lists all eight kinds as present."""
    main(["apply"])
    capsys.readouterr()

    assert main(["check"]) == 0

    out = capsys.readouterr().out
    assert "Total resources found: 8" in out
    assert "NOT FOUND" not in out


def test_teardown_declined(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Answering no deletes nothing and exits 0."""
    main(["apply"])
    cloud.calls.clear()

    with patch("builtins.input", return_value="n") as mock_input:
        assert main(["teardown"]) == 0

    mock_input.assert_called_once_with("Do you want to proceed with deletion? [y/N]: ")
    assert "Cancelled" in capsys.readouterr().out
    assert cloud.mutating_calls() == []


def test_teardown_confirmed(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Answering yes deletes everything."""
    main(["apply"])
    capsys.readouterr()

    with patch("builtins.input", return_value="y"):
        assert main(["teardown"]) == 0

    out = capsys.readouterr().out
    assert "[Service] webapp-cicd-service: deleted" in out
    assert "[Registry] my-webapp: deleted" in out
    assert cloud.repositories == {}
    assert cloud.users == {}


def test_teardown_with_nothing_present_does_not_prompt(
    cloud: FakeCloud, capsys: pytest.CaptureFixture[str]
) -> None:
    """Empty discovery exits 0 without asking."""
    mock_input = MagicMock()
    with patch("builtins.input", mock_input):
        assert main(["teardown"]) == 0

    mock_input.assert_not_called()
    assert "Nothing to delete" in capsys.readouterr().out


def test_ctrl_c_at_prompt_exits_130(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Ctrl-C at the confirmation prompt exits 130 with nothing deleted."""
    main(["apply"])
    cloud.calls.clear()

    with patch("builtins.input", side_effect=KeyboardInterrupt):
        assert main(["teardown"]) == 130

    assert "Interrupted" in capsys.readouterr().err
    assert cloud.mutating_calls() == []


def test_teardown_with_closed_stdin_cancels(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """No answer at all (stdin at EOF) is a decline: exit 0, nothing deleted."""
    main(["apply"])
    cloud.calls.clear()
    capsys.readouterr()

    with patch("builtins.input", side_effect=EOFError):
        assert main(["teardown"]) == 0

    assert "Cancelled. Nothing was deleted." in capsys.readouterr().out
    assert cloud.mutating_calls() == []


def test_check_without_default_vpc(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """check still reports what exists after the default VPC was removed."""
    cloud.repositories["my-webapp"] = []
    cloud.vpc_id = None

    assert main(["check"]) == 0

    assert "Total resources found: 1" in capsys.readouterr().out


def test_warnings_are_logged_to_stderr(cloud: FakeCloud, capsys: pytest.CaptureFixture[str]) -> None:
    """Structured warnings go to stderr and stay out of the stdout report."""
    main(["apply"])
    main(["apply"])
    capsys.readouterr()

    assert main(["apply"]) == 0

    captured = capsys.readouterr()
    assert "iam.access_key_quota" in captured.err
    assert "iam.access_key_quota" not in captured.out
