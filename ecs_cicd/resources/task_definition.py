"""TaskDefinition descriptor: the Fargate task family CI registers new revisions into."""

from typing import Any

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed, ResourceStatus
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()


def _revision(arn: str) -> int:
    return int(arn.rsplit(":", 1)[-1])


def build_task_definition(config: DeployConfig, execution_role_arn: str) -> dict[str, Any]:
    """RegisterTaskDefinition arguments for the placeholder revision."""
    return {
        "family": config.task_family,
        "networkMode": "awsvpc",
        "requiresCompatibilities": ["FARGATE"],
        "cpu": str(config.cpu),
        "memory": str(config.memory),
        "executionRoleArn": execution_role_arn,
        "containerDefinitions": [
            {
                "name": config.container_name,
                "image": config.image,
                "essential": True,
                "portMappings": [{"containerPort": config.container_port, "protocol": "tcp"}],
                "environment": [
                    {"name": k, "value": v} for k, v in sorted(config.environment.items())
                ],
                "logConfiguration": {
                    "logDriver": "awslogs",
                    "options": {
                        "awslogs-group": config.log_group_name,
                        "awslogs-region": config.region,
                        "awslogs-stream-prefix": "ecs",
                    },
                },
            }
        ],
    }


@register(
    ResourceKind.TASK_DEFINITION,
    requires=[ResourceKind.EXECUTION_ROLE, ResourceKind.LOG_GROUP],
)
class TaskDefinitionResource(Resource):
    """Present when the family has at least one ACTIVE revision."""

    def name(self, config: DeployConfig) -> str:
        return config.task_family

    def lookup(self, ctx: DeployContext) -> Observed:
        revisions = sorted(ctx.provider.list_task_definitions(ctx.config.task_family), key=_revision)
        if not revisions:
            return Observed.absent()
        return Observed(ResourceStatus.ACTIVE, revisions[-1], {"revisions": revisions})

    def create(self, ctx: DeployContext) -> Observed:
        definition = build_task_definition(ctx.config, ctx.require("execution_role.arn"))
        observed = ctx.provider.register_task_definition(definition)
        logger.info("ecs.task_definition_registered", arn=observed.identifier)
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        # Re-list so revisions registered by CI since discovery are cleared too.
        revisions = ctx.provider.list_task_definitions(ctx.config.task_family)
        for arn in revisions:
            ctx.provider.deregister_task_definition(arn)
            logger.info("ecs.task_definition_deregistered", arn=arn)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("task_definition.arn", observed.identifier)

    def detail(self, observed: Observed) -> str:
        count = len(observed.attributes.get("revisions", []))
        return f"{count} definition{'s' if count != 1 else ''}"
