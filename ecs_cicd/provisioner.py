"""Provisioner: walk the descriptors in dependency order, creating what is missing."""

from collections.abc import Callable

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.errors import AlreadyExistsError, ProviderError, StepFailedError, WaitTimeoutError
from ecs_cicd.provider import CloudProvider, Observed, ResourceStatus
from ecs_cicd.report import ApplyReport, CiOutputs, Outcome, StepResult
from ecs_cicd.resources import DESCRIPTORS, ResourceKind, topological_order
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.ci_user import CredentialResult, issue_ci_credentials
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.waiters import poll_until, retry_not_ready

logger = structlog.get_logger()

ProgressFn = Callable[[StepResult], None]


def _settle(resource: Resource, ctx: DeployContext, observed: Observed, name: str) -> Observed:
    """Wait for a PENDING resource to reach a terminal state."""
    if observed.status is not ResourceStatus.PENDING:
        return observed
    config = ctx.config
    return poll_until(
        lambda: resource.lookup(ctx),
        lambda o: o.status is not ResourceStatus.PENDING,
        timeout=config.wait_timeout,
        interval=config.poll_interval,
        what=f"{resource.kind} {name!r} to settle",
        sleep=ctx.sleep,
        clock=ctx.clock,
    )


def ensure(resource: Resource, ctx: DeployContext) -> StepResult:
    """Check-then-create one descriptor; publish its attributes for dependents."""
    config = ctx.config
    name = resource.name(config)
    observed = _settle(resource, ctx, resource.lookup(ctx), name)

    if observed.status is ResourceStatus.ACTIVE:
        outcome = Outcome.SKIPPED
        logger.info("apply.step_skipped", kind=str(resource.kind), name=name)
    else:
        try:
            observed = retry_not_ready(
                lambda: resource.create(ctx),
                attempts=config.ready_attempts,
                interval=config.poll_interval,
                what=f"{resource.kind} {name!r} dependencies",
                sleep=ctx.sleep,
            )
            outcome = Outcome.CREATED
            logger.info("apply.step_created", kind=str(resource.kind), name=name, id=observed.identifier)
        except AlreadyExistsError:
            # Someone else created it between our check and create.
            observed = resource.lookup(ctx)
            outcome = Outcome.SKIPPED
        observed = _settle(resource, ctx, observed, name)
        if observed.status is not ResourceStatus.ACTIVE:
            raise ProviderError(
                f"{resource.kind}:create",
                "NotActive",
                f"{name} is {observed.status.value} after create",
            )

    resource.converge(ctx, observed)
    resource.publish(ctx, observed)
    return StepResult(
        resource.kind, name, outcome, observed.identifier, resource.detail(observed)
    )


def collect_outputs(ctx: DeployContext, credentials: CredentialResult) -> CiOutputs:
    config = ctx.config
    return CiOutputs(
        access_key_id=credentials.access_key_id,
        secret_access_key=credentials.secret_access_key,
        region=config.region,
        repository=config.repository,
        registry_uri=ctx.get("registry.uri") or "",
        cluster=config.cluster_name,
        service=config.service_name,
        task_family=config.task_family,
    )


def apply(
    config: DeployConfig,
    provider: CloudProvider,
    *,
    progress: ProgressFn | None = None,
    ctx: DeployContext | None = None,
) -> ApplyReport:
    """Provision every descriptor in topological order (fail-fast) and issue CI credentials.

    Raises:
        PreconditionError: credentials are unusable or there is no default VPC.
            Nothing is created in either case.
        StepFailedError: a step failed; ``.report`` holds the steps that completed.
    """
    ctx = ctx or DeployContext(config=config, provider=provider)
    account = provider.caller_identity()
    # The security group and service need the default VPC; resolve it before creating anything.
    network = ctx.network
    logger.info("apply.started", account=account, region=config.region, vpc_id=network.vpc_id)

    report = ApplyReport()
    for kind in topological_order():
        resource = DESCRIPTORS[kind]
        name = resource.name(config)
        try:
            step = ensure(resource, ctx)
        except (ProviderError, WaitTimeoutError) as e:
            failed = StepResult(kind, name, Outcome.FAILED, detail=str(e))
            report.record(failed)
            if progress:
                progress(failed)
            logger.error("apply.step_failed", kind=str(kind), name=name, error=str(e))
            raise StepFailedError(kind, name, e, report) from e
        report.record(step)
        if progress:
            progress(step)

    if config.issue_access_key:
        try:
            credentials = issue_ci_credentials(ctx)
        except ProviderError as e:
            raise StepFailedError(ResourceKind.CI_PRINCIPAL, config.ci_user, e, report) from e
    else:
        credentials = CredentialResult(
            "[access key issuing disabled]",
            "[access key issuing disabled]",
            warning="Access key issuing is disabled; supply existing CI credentials.",
        )
    report.credential_warning = credentials.warning
    report.outputs = collect_outputs(ctx, credentials)
    logger.info(
        "apply.finished",
        created=[str(k) for k in report.created],
        skipped=[str(k) for k in report.skipped],
    )
    return report

