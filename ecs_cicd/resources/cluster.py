"""Cluster descriptor: the ECS cluster the service runs in."""

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()


@register(ResourceKind.CLUSTER)
class ClusterResource(Resource):
    def name(self, config: DeployConfig) -> str:
        return config.cluster_name

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.describe_cluster(ctx.config.cluster_name)

    def create(self, ctx: DeployContext) -> Observed:
        observed = ctx.provider.create_cluster(ctx.config.cluster_name)
        logger.info(
            "ecs.cluster_created",
            cluster=ctx.config.cluster_name,
            status=observed.status.value,
        )
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.provider.delete_cluster(ctx.config.cluster_name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("cluster.arn", observed.identifier)
