"""Service descriptor: the Fargate service running the task family."""

from typing import Any

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.errors import NotReadyError
from ecs_cicd.provider import Observed, ResourceStatus
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()

SERVICE_NOT_ACTIVE = "ServiceNotActiveException"


def build_service(config: DeployConfig, subnet_ids: list[str], security_group_id: str) -> dict[str, Any]:
    """CreateService arguments; the task definition is referenced by family (latest revision)."""
    return {
        "cluster": config.cluster_name,
        "serviceName": config.service_name,
        "taskDefinition": config.task_family,
        "desiredCount": config.desired_count,
        "launchType": "FARGATE",
        "networkConfiguration": {
            "awsvpcConfiguration": {
                "subnets": list(subnet_ids),
                "securityGroups": [security_group_id],
                "assignPublicIp": "ENABLED" if config.assign_public_ip else "DISABLED",
            }
        },
    }


@register(
    ResourceKind.SERVICE,
    requires=[ResourceKind.CLUSTER, ResourceKind.SECURITY_GROUP, ResourceKind.TASK_DEFINITION],
)
class ServiceResource(Resource):
    def name(self, config: DeployConfig) -> str:
        return config.service_name

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.describe_service(ctx.config.cluster_name, ctx.config.service_name)

    def create(self, ctx: DeployContext) -> Observed:
        definition = build_service(
            ctx.config,
            ctx.network.subnet_ids,
            ctx.require("security_group.id"),
        )
        observed = ctx.provider.create_service(definition)
        logger.info(
            "ecs.service_created",
            cluster=ctx.config.cluster_name,
            service=ctx.config.service_name,
        )
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        config = ctx.config
        provider = ctx.provider
        cluster, name = config.cluster_name, config.service_name
        if observed.status is ResourceStatus.ACTIVE:
            try:
                provider.scale_service(cluster, name, 0)
                logger.info("teardown.service_scaling_down", service=name)
                provider.wait_service_stable(cluster, name, config.wait_timeout, config.poll_interval)
                provider.delete_service(cluster, name)
            except NotReadyError as e:
                # Deletion started elsewhere after discovery.
                if e.code != SERVICE_NOT_ACTIVE:
                    raise
                logger.info("teardown.service_already_draining", service=name)
        # A DRAINING service is already being deleted; only wait for it.
        provider.wait_service_inactive(cluster, name, config.wait_timeout, config.poll_interval)
        logger.info("teardown.service_inactive", service=name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("service.arn", observed.identifier)

    def detail(self, observed: Observed) -> str:
        attrs = observed.attributes
        if "desired_count" not in attrs:
            return ""
        return f"{attrs.get('running_count', 0)}/{attrs['desired_count']} tasks running"
