"""Registry descriptor: the ECR repository CI pushes images to."""

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()


@register(ResourceKind.REGISTRY)
class RepositoryResource(Resource):
    """ECR repository with scan-on-push and an optional image lifecycle policy."""

    def name(self, config: DeployConfig) -> str:
        return config.repository

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.describe_repository(ctx.config.repository)

    def create(self, ctx: DeployContext) -> Observed:
        config = ctx.config
        observed = ctx.provider.create_repository(config.repository, config.scan_on_push)
        if config.keep_images:
            ctx.provider.put_image_retention(config.repository, config.keep_images)
        logger.info("ecr.repository_created", repository=config.repository, uri=observed.identifier)
        return observed

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        # The repository cannot be deleted while it still holds images.
        name = ctx.config.repository
        image_ids = ctx.provider.list_image_ids(name)
        if image_ids:
            ctx.provider.batch_delete_images(name, image_ids)
            logger.info("ecr.images_deleted", repository=name, count=len(image_ids))
        ctx.provider.delete_repository(name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("registry.uri", observed.identifier)

    def detail(self, observed: Observed) -> str:
        count = observed.attributes.get("image_count", 0)
        return f"{count} image{'s' if count != 1 else ''}"
