"""Tests for DeployContext (set, get, require and the cached network lookup)."""

import pytest

from ecs_cicd.config import DeployConfig
from ecs_cicd.errors import PreconditionError
from ecs_cicd.resources.context import DeployContext
from tests.fakes import FakeCloud


def _make_ctx(cloud: FakeCloud | None = None) -> DeployContext:
    return DeployContext(config=DeployConfig(), provider=cloud or FakeCloud())


def test_set_and_get() -> None:
    """set stores a value; get retrieves it."""
    ctx = _make_ctx()
    ctx.set("foo", 42)
    assert ctx.get("foo") == 42


def test_get_missing_returns_default() -> None:
    """get with missing key returns default."""
    ctx = _make_ctx()
    assert ctx.get("missing") is None
    assert ctx.get("missing", 99) == 99


def test_require_raises_with_available_keys() -> None:
    """require names the missing key and lists what is available."""
    ctx = _make_ctx()
    ctx.set("registry.uri", "x")
    ctx.set("cluster.arn", "y")

    with pytest.raises(RuntimeError) as exc_info:
        ctx.require("security_group.id")

    msg = str(exc_info.value)
    assert "missing required key" in msg
    assert "security_group.id" in msg
    assert "cluster.arn, registry.uri" in msg


def test_require_when_empty() -> None:
    """With no keys the message says so."""
    with pytest.raises(RuntimeError, match=r"\(none\)"):
        _make_ctx().require("x")


def test_network_is_looked_up_once() -> None:
    """The default VPC lookup runs on first use and is cached for the run."""
    cloud = FakeCloud()
    ctx = _make_ctx(cloud)

    first = ctx.network
    second = ctx.network

    assert first is second
    assert first.vpc_id == "vpc-default"
    assert cloud.call_names() == ["default_vpc_id", "subnet_ids"]


def test_network_without_default_vpc() -> None:
    """No default VPC is a precondition failure."""
    cloud = FakeCloud()
    cloud.vpc_id = None

    with pytest.raises(PreconditionError):
        _ = _make_ctx(cloud).network
