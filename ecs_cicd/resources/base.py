"""Resource descriptor base class."""

from typing import TYPE_CHECKING

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import Observed

if TYPE_CHECKING:
    from ecs_cicd.resources.context import DeployContext
    from ecs_cicd.resources.registry import ResourceKind


class Resource:
    """One managed resource kind: how to name it, find it, create it, and delete it.

    ``kind`` and ``depends_on`` are filled in by ``@register``. Subclasses implement
    ``name``, ``lookup``, ``create`` and ``delete``; ``converge``, ``publish`` and
    ``detail`` are optional.
    """

    kind: "ResourceKind"
    depends_on: tuple["ResourceKind", ...] = ()

    def name(self, config: DeployConfig) -> str:
        raise NotImplementedError

    def lookup(self, ctx: "DeployContext") -> Observed:
        """Existence check. Absence is a status, never an exception."""
        raise NotImplementedError

    def create(self, ctx: "DeployContext") -> Observed:
        raise NotImplementedError

    def delete(self, ctx: "DeployContext", observed: Observed) -> None:
        """Delete, including any drain/wait the provider needs first."""
        raise NotImplementedError

    def converge(self, ctx: "DeployContext", observed: Observed) -> None:
        """Repair attachments an interrupted create left out. Runs for created and skipped."""

    def publish(self, ctx: "DeployContext", observed: Observed) -> None:
        """Record what dependents need (ARN, group ID...). Runs for created and skipped."""

    def detail(self, observed: Observed) -> str:
        """Short human detail for discovery output, e.g. '3 images'."""
        return ""
