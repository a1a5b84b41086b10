"""Teardown: discover what exists, confirm, then delete dependents before their prerequisites."""

from collections.abc import Callable

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.errors import NotFoundError, ProviderError, StepFailedError, WaitTimeoutError
from ecs_cicd.provider import CloudProvider
from ecs_cicd.report import Discovery, Finding, Outcome, StepResult, TeardownReport
from ecs_cicd.resources import DESCRIPTORS, reverse_topological_order
from ecs_cicd.resources.context import DeployContext

logger = structlog.get_logger()

ProgressFn = Callable[[StepResult], None]
ConfirmFn = Callable[[list[Finding]], bool]


def discover(config: DeployConfig, provider: CloudProvider, ctx: DeployContext | None = None) -> Discovery:
    """Look up every kind, in teardown order. Read-only."""
    ctx = ctx or DeployContext(config=config, provider=provider)
    discovery = Discovery()
    for kind in reverse_topological_order():
        resource = DESCRIPTORS[kind]
        name = resource.name(config)
        observed = resource.lookup(ctx)
        detail = resource.detail(observed) if observed.exists else ""
        discovery.findings.append(Finding(kind, name, observed, detail))
        logger.debug("teardown.discovered", kind=str(kind), name=name, status=observed.status.value)
    return discovery


def plan(discovery: Discovery) -> list[Finding]:
    """Only what exists, keeping teardown order."""
    return discovery.present


def execute(
    ctx: DeployContext,
    findings: list[Finding],
    *,
    progress: ProgressFn | None = None,
) -> TeardownReport:
    """Delete each planned finding, stopping at the first failure.

    A resource that disappeared since discovery counts as deleted.
    """
    report = TeardownReport()
    for finding in findings:
        resource = DESCRIPTORS[finding.kind]
        try:
            resource.delete(ctx, finding.observed)
            outcome = Outcome.DELETED
        except NotFoundError:
            outcome = Outcome.ALREADY_GONE
        except (ProviderError, WaitTimeoutError) as e:
            failed = StepResult(finding.kind, finding.name, Outcome.FAILED, detail=str(e))
            report.record(failed)
            if progress:
                progress(failed)
            logger.error("teardown.step_failed", kind=str(finding.kind), name=finding.name, error=str(e))
            raise StepFailedError(finding.kind, finding.name, e, report) from e
        step = StepResult(finding.kind, finding.name, outcome, finding.observed.identifier)
        logger.info("teardown.step_done", kind=str(finding.kind), name=finding.name, outcome=outcome.value)
        report.record(step)
        if progress:
            progress(step)
    return report


def teardown(
    config: DeployConfig,
    provider: CloudProvider,
    confirm: ConfirmFn,
    *,
    progress: ProgressFn | None = None,
    ctx: DeployContext | None = None,
) -> TeardownReport | None:
    """Discover, ask ``confirm`` with the plan, then delete.

    Returns None when the user declined. An empty plan returns an empty report
    without prompting.
    """
    ctx = ctx or DeployContext(config=config, provider=provider)
    account = provider.caller_identity()
    logger.info("teardown.started", account=account, region=config.region)

    findings = plan(discover(config, provider, ctx))
    if not findings:
        logger.info("teardown.nothing_to_do")
        return TeardownReport()
    if not confirm(findings):
        logger.info("teardown.cancelled", planned=len(findings))
        return None
    report = execute(ctx, findings, progress=progress)
    logger.info("teardown.finished", deleted=[str(k) for k in report.deleted])
    return report
