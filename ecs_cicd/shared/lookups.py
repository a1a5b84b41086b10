"""Lookup of the account's default network (VPC and subnets)."""

from dataclasses import dataclass

from ecs_cicd.errors import PreconditionError
from ecs_cicd.provider import CloudProvider


@dataclass(frozen=True)
class DefaultNetwork:
    """Default VPC the security group and service land in."""

    vpc_id: str
    subnet_ids: list[str]


def lookup_default_network(provider: CloudProvider) -> DefaultNetwork:
    """Find the default VPC and all of its subnets.

    Does not create any resources.
    """
    vpc_id = provider.default_vpc_id()
    if not vpc_id:
        raise PreconditionError("No default VPC found in this region")
    subnet_ids = provider.subnet_ids(vpc_id)
    if not subnet_ids:
        raise PreconditionError(f"Default VPC {vpc_id} has no subnets")
    return DefaultNetwork(vpc_id=vpc_id, subnet_ids=subnet_ids)
