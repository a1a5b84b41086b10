"""Resource descriptors. Importing this package registers all of them in DESCRIPTORS."""

from ecs_cicd.resources import (  # noqa: F401
    ci_user,
    cluster,
    ecr,
    execution_role,
    log_group,
    security_group,
    service,
    task_definition,
)
from ecs_cicd.resources.registry import (
    DESCRIPTORS,
    ResourceKind,
    reverse_topological_order,
    topological_order,
)

__all__ = [
    "DESCRIPTORS",
    "ResourceKind",
    "reverse_topological_order",
    "topological_order",
]
