"""LogGroup descriptor: CloudWatch log group the task's awslogs driver writes to."""

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()


@register(ResourceKind.LOG_GROUP)
class LogGroupResource(Resource):
    def name(self, config: DeployConfig) -> str:
        return config.log_group_name

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.describe_log_group(ctx.config.log_group_name)

    def create(self, ctx: DeployContext) -> Observed:
        name = ctx.config.log_group_name
        observed = ctx.provider.create_log_group(name)
        if ctx.config.log_retention_days:
            ctx.provider.put_log_retention(name, ctx.config.log_retention_days)
        logger.info("logs.log_group_created", log_group=name)
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.provider.delete_log_group(ctx.config.log_group_name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("log_group.name", ctx.config.log_group_name)
