"""ExecutionRole descriptor: IAM role ECS assumes to pull images and write logs."""

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()

ECS_TASKS_TRUST_POLICY = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Effect": "Allow",
            "Principal": {"Service": "ecs-tasks.amazonaws.com"},
            "Action": "sts:AssumeRole",
        }
    ],
}


@register(ResourceKind.EXECUTION_ROLE)
class ExecutionRoleResource(Resource):
    """Task execution role with the managed execution policy attached."""

    def name(self, config: DeployConfig) -> str:
        return config.execution_role_name

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.get_role(ctx.config.execution_role_name)

    def create(self, ctx: DeployContext) -> Observed:
        name = ctx.config.execution_role_name
        observed = ctx.provider.create_role(name, ECS_TASKS_TRUST_POLICY)
        logger.info("iam.execution_role_created", role=name, arn=observed.identifier)
        return observed

    def converge(self, ctx: DeployContext, observed: Observed) -> None:
        name = ctx.config.execution_role_name
        policy_arn = ctx.config.execution_policy_arn
        if policy_arn not in ctx.provider.list_attached_role_policies(name):
            ctx.provider.attach_role_policy(name, policy_arn)
            logger.info("iam.role_policy_attached", role=name, policy=policy_arn)

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        # DeleteRole fails while any policy is still attached.
        name = ctx.config.execution_role_name
        for policy_arn in ctx.provider.list_attached_role_policies(name):
            ctx.provider.detach_role_policy(name, policy_arn)
        for policy_name in ctx.provider.list_role_inline_policies(name):
            ctx.provider.delete_role_inline_policy(name, policy_name)
        ctx.provider.delete_role(name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("execution_role.arn", observed.identifier)
