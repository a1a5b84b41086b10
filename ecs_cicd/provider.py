"""Provider-client abstraction: typed statuses and the calls the descriptors make.

The engines never parse provider responses. Implementations (``ecs_cicd.aws.AwsProvider``
or an in-memory fake) translate raw payloads into ``Observed`` values and raise the
typed errors from ``ecs_cicd.errors``.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class ResourceStatus(Enum):
    ABSENT = "absent"
    PENDING = "pending"  # exists, but an async transition is still running
    ACTIVE = "active"
    INACTIVE = "inactive"  # tombstoned (deleted cluster/service still visible)


@dataclass(frozen=True)
class Observed:
    """Result of an existence check."""

    status: ResourceStatus
    identifier: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return self.status in (ResourceStatus.ACTIVE, ResourceStatus.PENDING)

    @classmethod
    def absent(cls) -> "Observed":
        return cls(ResourceStatus.ABSENT)


@dataclass(frozen=True)
class AccessKey:
    access_key_id: str
    secret_access_key: str


class CloudProvider(Protocol):
    """Calls against the account's control plane, one group per resource kind."""

    def caller_identity(self) -> str:
        """Return the account ID; raise PreconditionError without usable credentials."""
        ...

    # network
    def default_vpc_id(self) -> str | None: ...
    def subnet_ids(self, vpc_id: str) -> list[str]: ...

    # registry
    def describe_repository(self, name: str) -> Observed: ...
    def create_repository(self, name: str, scan_on_push: bool) -> Observed: ...
    def put_image_retention(self, name: str, keep_images: int) -> None: ...
    def list_image_ids(self, name: str) -> list[dict[str, str]]: ...
    def batch_delete_images(self, name: str, image_ids: Sequence[Mapping[str, str]]) -> None: ...
    def delete_repository(self, name: str) -> None: ...

    # IAM roles
    def get_role(self, name: str) -> Observed: ...
    def create_role(self, name: str, trust_policy: Mapping[str, Any]) -> Observed: ...
    def attach_role_policy(self, name: str, policy_arn: str) -> None: ...
    def list_attached_role_policies(self, name: str) -> list[str]: ...
    def detach_role_policy(self, name: str, policy_arn: str) -> None: ...
    def list_role_inline_policies(self, name: str) -> list[str]: ...
    def delete_role_inline_policy(self, name: str, policy_name: str) -> None: ...
    def delete_role(self, name: str) -> None: ...

    # ECS clusters
    def describe_cluster(self, name: str) -> Observed: ...
    def create_cluster(self, name: str) -> Observed: ...
    def delete_cluster(self, name: str) -> None: ...

    # security groups
    def find_security_group(self, name: str, vpc_id: str | None) -> Observed: ...
    def create_security_group(self, name: str, description: str, vpc_id: str) -> Observed: ...
    def authorize_ingress(self, group_id: str, port: int, cidr: str) -> None: ...
    def delete_security_group(self, group_id: str) -> None: ...

    # log groups
    def describe_log_group(self, name: str) -> Observed: ...
    def create_log_group(self, name: str) -> Observed: ...
    def put_log_retention(self, name: str, days: int) -> None: ...
    def delete_log_group(self, name: str) -> None: ...

    # task definitions
    def list_task_definitions(self, family: str) -> list[str]: ...
    def register_task_definition(self, definition: Mapping[str, Any]) -> Observed: ...
    def deregister_task_definition(self, arn: str) -> None: ...

    # ECS services
    def describe_service(self, cluster: str, name: str) -> Observed: ...
    def create_service(self, definition: Mapping[str, Any]) -> Observed: ...
    def scale_service(self, cluster: str, name: str, desired_count: int) -> None: ...
    def wait_service_stable(self, cluster: str, name: str, timeout: float, interval: float) -> None: ...
    def delete_service(self, cluster: str, name: str) -> None: ...
    def wait_service_inactive(self, cluster: str, name: str, timeout: float, interval: float) -> None: ...

    # IAM users
    def get_user(self, name: str) -> Observed: ...
    def create_user(self, name: str) -> Observed: ...
    def attach_user_policy(self, name: str, policy_arn: str) -> None: ...
    def list_attached_user_policies(self, name: str) -> list[str]: ...
    def detach_user_policy(self, name: str, policy_arn: str) -> None: ...
    def list_user_inline_policies(self, name: str) -> list[str]: ...
    def delete_user_inline_policy(self, name: str, policy_name: str) -> None: ...
    def list_access_keys(self, name: str) -> list[str]: ...
    def create_access_key(self, name: str) -> AccessKey: ...
    def delete_access_key(self, name: str, access_key_id: str) -> None: ...
    def delete_user(self, name: str) -> None: ...
