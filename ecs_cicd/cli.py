"""
ecs-cicd CLI: apply, teardown, check.
`ecs-cicd apply` provisions the ECS Fargate stack and prints the CI secrets block;
`ecs-cicd check` reports what exists; `ecs-cicd teardown` deletes it after confirmation.
"""

import argparse
import logging
import os
from pathlib import Path
import sys
from typing import Any

import structlog

from ecs_cicd.aws import AwsProvider
from ecs_cicd.config import DeployConfig, load_deploy_config
from ecs_cicd.errors import DeployError, StepFailedError
from ecs_cicd.provider import CloudProvider
from ecs_cicd.provisioner import apply
from ecs_cicd.report import (
    Finding,
    StepResult,
    render_ci_outputs,
    render_discovery,
    render_step,
    render_summary,
)
from ecs_cicd.teardown import discover, teardown

LOG_LEVEL_ENV = "ECS_CICD_LOG_LEVEL"

# CLI flag -> DeployConfig field
_OVERRIDE_FLAGS = {
    "app": "app",
    "region": "region",
    "cluster_name": "cluster_name",
    "service_name": "service_name",
    "task_family": "task_family",
    "repository": "repository",
    "security_group": "security_group_name",
    "ci_user": "ci_user",
    "wait_timeout": "wait_timeout",
}


def _configure_logging() -> None:
    """Structured logs to stderr; stdout is reserved for the report."""
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelNamesMapping().get(name, logging.WARNING)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _make_provider(config: DeployConfig) -> CloudProvider:
    return AwsProvider(config.region)


def _load_config(args: argparse.Namespace) -> DeployConfig:
    overrides: dict[str, Any] = {
        field: getattr(args, flag, None) for flag, field in _OVERRIDE_FLAGS.items()
    }
    path = Path(args.config) if args.config else None
    return load_deploy_config(path, overrides)


def _print_step(step: StepResult) -> None:
    print(render_step(step), flush=True)


def _confirm_deletion(findings: list[Finding]) -> bool:
    print()
    print("The following resources will be deleted:")
    for finding in findings:
        print(f"  [{finding.kind}] {finding.name}")
    print()
    try:
        answer = input("Do you want to proceed with deletion? [y/N]: ")
    except EOFError:
        # No terminal (stdin closed): never delete without an answer.
        print()
        return False
    return answer.strip().lower() in ("y", "yes")


def _print_failure(err: StepFailedError) -> None:
    print(f"Failed at {err.kind} {err.name!r}: {err.cause}", file=sys.stderr)
    if err.report is not None and err.report.steps:
        done = [s for s in err.report.steps if s.kind != err.kind]
        if done:
            print("Steps completed before the failure stay applied:", file=sys.stderr)
            for step in done:
                print(f"  {render_step(step)}", file=sys.stderr)


# --- apply ---


def _cmd_apply(config: DeployConfig) -> int:
    print(f"Provisioning ECS CI/CD resources for '{config.app}' in {config.region}...")
    report = apply(config, _make_provider(config), progress=_print_step)

    print()
    print("Summary:")
    print(render_summary(report.steps))
    if report.credential_warning:
        print()
        print(f"WARNING: {report.credential_warning}")
    if report.outputs is not None:
        print()
        print("Add these values to your CI secrets:")
        print(render_ci_outputs(report.outputs))
    print()
    print("Next steps:")
    print("  1. Store the values above as repository secrets in your CI system.")
    print(f"  2. Push an image to {config.repository} and update service {config.service_name}.")
    print(f"  3. Verify with: ecs-cicd check --region {config.region}")
    return 0


# --- check ---


def _cmd_check(config: DeployConfig) -> int:
    provider = _make_provider(config)
    provider.caller_identity()
    print(render_discovery(discover(config, provider), config.region))
    return 0


# --- teardown ---


def _cmd_teardown(config: DeployConfig) -> int:
    print(f"Checking ECS CI/CD resources for '{config.app}' in {config.region}...")
    report = teardown(config, _make_provider(config), _confirm_deletion, progress=_print_step)
    if report is None:
        print("Cancelled. Nothing was deleted.")
        return 0
    if not report.steps:
        print("No resources found. Nothing to delete.")
        return 0
    print()
    print("Summary:")
    print(render_summary(report.steps))
    print()
    print("Reminder: remove the CI secrets for this deployment from your CI system.")
    print(f"Verify with: ecs-cicd check --region {config.region}")
    return 0


def _add_overrides(p: argparse.ArgumentParser) -> None:
    p.add_argument("--app", help="Application name; other names derive from it")
    p.add_argument("--region", help="AWS region (default: us-east-1)")
    p.add_argument("--cluster-name", dest="cluster_name")
    p.add_argument("--service-name", dest="service_name")
    p.add_argument("--task-family", dest="task_family")
    p.add_argument("--repository", help="ECR repository name")
    p.add_argument("--security-group", dest="security_group", help="Security group name")
    p.add_argument("--ci-user", dest="ci_user", help="IAM user for CI")
    p.add_argument("--wait-timeout", dest="wait_timeout", type=float, help="Seconds per wait")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecs-cicd",
        description="Provision, inspect and tear down an ECS Fargate deployment target for CI/CD.",
    )
    parser.add_argument("--config", help="Path to config.yaml (default: .ecs-cicd/config.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("apply", "Create any missing resources and print CI secrets"),
        ("check", "Report which resources exist"),
        ("teardown", "Delete all resources after confirmation"),
    ):
        _add_overrides(sub.add_parser(name, help=help_text))
    return parser


_COMMANDS = {"apply": _cmd_apply, "check": _cmd_check, "teardown": _cmd_teardown}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging()
    try:
        config = _load_config(args)
        return _COMMANDS[args.command](config)
    except StepFailedError as e:
        _print_failure(e)
        return 1
    except DeployError as e:
        print(str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted. Steps that already completed stay applied.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
