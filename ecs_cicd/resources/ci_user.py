"""CIPrincipal descriptor: the IAM user CI deploys with, and its access keys."""

from dataclasses import dataclass

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.errors import QuotaExceededError
from ecs_cicd.provider import AccessKey, Observed
from ecs_cicd.resources.base import Resource
from ecs_cicd.resources.context import DeployContext
from ecs_cicd.resources.registry import ResourceKind, register

logger = structlog.get_logger()

PLACEHOLDER_ACCESS_KEY_ID = "[Use existing or create new access key]"
PLACEHOLDER_SECRET_ACCESS_KEY = "[Use existing or create new secret key]"


@dataclass(frozen=True)
class CredentialResult:
    """Outcome of issuing CI credentials. ``warning`` is set when placeholders were used."""

    access_key_id: str
    secret_access_key: str
    warning: str | None = None

    @property
    def issued(self) -> bool:
        return self.warning is None


@register(
    ResourceKind.CI_PRINCIPAL,
    requires=[ResourceKind.REGISTRY, ResourceKind.SERVICE],
)
class CiUserResource(Resource):
    """IAM user with the ECS and ECR policies CI needs to push and deploy."""

    def name(self, config: DeployConfig) -> str:
        return config.ci_user

    def lookup(self, ctx: DeployContext) -> Observed:
        return ctx.provider.get_user(ctx.config.ci_user)

    def create(self, ctx: DeployContext) -> Observed:
        name = ctx.config.ci_user
        observed = ctx.provider.create_user(name)
        logger.info("iam.ci_user_created", user=name)
        return observed

    def converge(self, ctx: DeployContext, observed: Observed) -> None:
        name = ctx.config.ci_user
        attached = set(ctx.provider.list_attached_user_policies(name))
        for policy_arn in ctx.config.ci_policy_arns:
            if policy_arn not in attached:
                ctx.provider.attach_user_policy(name, policy_arn)
                logger.info("iam.user_policy_attached", user=name, policy=policy_arn)

    def delete(self, ctx: DeployContext, observed: Observed) -> None:
        # DeleteUser fails while keys or policies remain: keys, then managed, then inline.
        name = ctx.config.ci_user
        provider = ctx.provider
        for key_id in provider.list_access_keys(name):
            provider.delete_access_key(name, key_id)
        for policy_arn in provider.list_attached_user_policies(name):
            provider.detach_user_policy(name, policy_arn)
        for policy_name in provider.list_user_inline_policies(name):
            provider.delete_user_inline_policy(name, policy_name)
        provider.delete_user(name)

    def publish(self, ctx: DeployContext, observed: Observed) -> None:
        ctx.set("ci_user.arn", observed.identifier)

    def detail(self, observed: Observed) -> str:
        count = observed.attributes.get("access_key_count", 0)
        return f"{count} access key{'s' if count != 1 else ''}"


def issue_ci_credentials(ctx: DeployContext) -> CredentialResult:
    """Create a fresh access key for the CI user.

    The per-user key quota is a recoverable condition: placeholders are returned
    together with a hint instead of failing the run.
    """
    name = ctx.config.ci_user
    try:
        key: AccessKey = ctx.provider.create_access_key(name)
    except QuotaExceededError as e:
        logger.warning("iam.access_key_quota", user=name, code=e.code)
        return CredentialResult(
            PLACEHOLDER_ACCESS_KEY_ID,
            PLACEHOLDER_SECRET_ACCESS_KEY,
            warning=(
                f"Could not create a new access key for {name!r} (the user may already have "
                "2 keys). Reuse an existing key, or delete an old one and run apply again."
            ),
        )
    logger.info("iam.access_key_created", user=name, access_key_id=key.access_key_id)
    return CredentialResult(key.access_key_id, key.secret_access_key)
