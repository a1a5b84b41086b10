"""Walk context: config, provider, clock, cached default network, and values descriptors publish."""

from collections.abc import Callable
from dataclasses import dataclass, field
import time
from typing import Any

import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.provider import CloudProvider
from ecs_cicd.shared.lookups import DefaultNetwork, lookup_default_network

logger = structlog.get_logger()


@dataclass
class DeployContext:
    """Context passed to descriptors: config, provider, and values other descriptors produced."""

    config: DeployConfig
    provider: CloudProvider
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic
    _outputs: dict[str, Any] = field(default_factory=dict)
    _network: DefaultNetwork | None = None

    def set(self, key: str, value: Any) -> None:
        """Store a value for later use by other descriptors."""
        self._outputs[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value; return default if key is missing."""
        return self._outputs.get(key, default)

    def require(self, key: str) -> Any:
        """Retrieve a value; raise RuntimeError with available keys if missing."""
        if key not in self._outputs:
            available = ", ".join(sorted(self._outputs.keys())) or "(none)"
            raise RuntimeError(
                f"missing required key: {key!r}. Available keys: {available}"
            )
        return self._outputs[key]

    @property
    def network(self) -> DefaultNetwork:
        """Default VPC and subnets, looked up once per run."""
        if self._network is None:
            self._network = lookup_default_network(self.provider)
            logger.info(
                "network.default_vpc",
                vpc_id=self._network.vpc_id,
                subnets=len(self._network.subnet_ids),
            )
        return self._network
