"""SecurityGroup descriptor: opens the container port in the default VPC."""

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register
from ecs_cicd.waiters import retry_not_ready

logger = structlog.get_logger()


@register(ResourceKind.SECURITY_GROUP)
class SecurityGroupResource(Resource):
    """Security group for the service tasks: ingress TCP container port, default egress."""

    def name(self, config: DeployConfig) -> str:
        return config.security_group_name

    def lookup(self, ctx: DeployContext) -> Observed:
        # By name alone when the default VPC is gone, so discovery still works.
        vpc_id = ctx.provider.default_vpc_id()
        return ctx.provider.find_security_group(ctx.config.security_group_name, vpc_id)

    def create(self, ctx: DeployContext) -> Observed:
        config = ctx.config
        observed = ctx.provider.create_security_group(
            config.security_group_name,
            f"Security group for {config.app} CI/CD",
            ctx.network.vpc_id,
        )
        group_id = observed.identifier
        assert group_id is not None
        ctx.provider.authorize_ingress(group_id, config.container_port, config.ingress_cidr)
        logger.info(
            "ec2.security_group_created",
            group=config.security_group_name,
            group_id=group_id,
            port=config.container_port,
        )
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        group_id = observed.identifier
        assert group_id is not None
        retry_not_ready(
            lambda: ctx.provider.delete_security_group(group_id),
            attempts=ctx.config.ready_attempts,
            interval=ctx.config.poll_interval,
            what=f"security group {group_id} to be released",
            sleep=ctx.sleep,
        )

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("security_group.id", observed.identifier)

    def detail(self, observed: Observed) -> str:
        return observed.identifier or ""
