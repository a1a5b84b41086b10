"""Shared fixtures: demo config, in-memory cloud, and a context that never really sleeps."""

from collections.abc import Iterator

import pytest
import structlog

from ecs_cicd.config import DeployConfig
from ecs_cicd.resources.context import DeployContext
from tests.fakes import FakeCloud


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """cli.main() binds structlog to this test's captured stderr; undo it afterwards."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config() -> DeployConfig:
    """Demo deployment: cluster demo-cluster, registry demo-app, us-east-1."""
    return DeployConfig(
        app="demo",
        region="us-east-1",
        cluster_name="demo-cluster",
        repository="demo-app",
        wait_timeout=60.0,
        poll_interval=5.0,
        ready_attempts=3,
    )


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ctx(config: DeployConfig, cloud: FakeCloud, clock: FakeClock) -> DeployContext:
    return DeployContext(config=config, provider=cloud, sleep=clock.sleep, clock=clock)
