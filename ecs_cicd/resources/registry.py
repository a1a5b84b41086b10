"""Descriptor registry: resource kinds, dependency edges, and walk order."""

from collections.abc import Callable, Iterable
from enum import Enum
from typing import TypeVar

from ecs_cicd.resources.base import Resource


class ResourceKind(str, Enum):
    """Managed resource kinds, declared in apply order (used as the walk tie-break)."""

    REGISTRY = "Registry"
    EXECUTION_ROLE = "ExecutionRole"
    CLUSTER = "Cluster"
    SECURITY_GROUP = "SecurityGroup"
    LOG_GROUP = "LogGroup"
    TASK_DEFINITION = "TaskDefinition"
    SERVICE = "Service"
    CI_PRINCIPAL = "CIPrincipal"

    def __str__(self) -> str:
        return self.value


DESCRIPTORS: dict[ResourceKind, Resource] = {}

R = TypeVar("R", bound=type[Resource])


def register(
    kind: ResourceKind,
    requires: list[ResourceKind] | None = None,
) -> Callable[[R], R]:
    """Class decorator: instantiate the descriptor and add it to DESCRIPTORS."""

    def decorator(cls: R) -> R:
        if kind in DESCRIPTORS:
            raise ValueError(f"descriptor already registered for {kind}")
        instance = cls()
        instance.kind = kind
        instance.depends_on = tuple(requires or ())
        DESCRIPTORS[kind] = instance
        return cls

    return decorator


def topological_order(
    kinds: Iterable[ResourceKind] | None = None,
    descriptors: dict[ResourceKind, Resource] | None = None,
) -> list[ResourceKind]:
    """Order ``kinds`` so every prerequisite comes before its dependents.

    Kahn's algorithm; among kinds that are ready at the same time, declaration
    order wins, so the result is deterministic. Edges to kinds outside the
    requested subset are ignored. Raises ValueError on cycles or unknown kinds.
    """
    table = DESCRIPTORS if descriptors is None else descriptors
    wanted = list(table) if kinds is None else list(dict.fromkeys(kinds))
    unknown = [k for k in wanted if k not in table]
    if unknown:
        raise ValueError(f"no descriptor registered for: {', '.join(map(str, unknown))}")
    for kind in wanted:
        missing = [d for d in table[kind].depends_on if d not in table]
        if missing:
            raise ValueError(f"{kind} depends on unregistered kind(s): {', '.join(map(str, missing))}")

    rank = {k: i for i, k in enumerate(ResourceKind)}
    subset = set(wanted)
    pending = {k: {d for d in table[k].depends_on if d in subset} for k in wanted}
    order: list[ResourceKind] = []
    while pending:
        ready = sorted((k for k, deps in pending.items() if not deps), key=rank.__getitem__)
        if not ready:
            raise ValueError(f"dependency cycle among: {', '.join(sorted(map(str, pending)))}")
        nxt = ready[0]
        order.append(nxt)
        del pending[nxt]
        for deps in pending.values():
            deps.discard(nxt)
    return order


def reverse_topological_order(kinds: Iterable[ResourceKind] | None = None) -> list[ResourceKind]:
    """Teardown order: every dependent before the things it depends on."""
    return list(reversed(topological_order(kinds)))
