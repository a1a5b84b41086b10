"""ECS calls: cluster, task-definition family, Fargate service, and service waiters."""

from collections.abc import Mapping
import math
from typing import Any

from botocore.exceptions import WaiterError

from ecs_cicd.aws.base import ClientSource
from ecs_cicd.aws.errors import aws_call
from ecs_cicd.errors import (
    AlreadyExistsError,
    NotFoundError,
    NotReadyError,
    ProviderError,
    WaitTimeoutError,
)
from ecs_cicd.provider import Observed, ResourceStatus

_CLUSTER_STATUS = {
    "ACTIVE": ResourceStatus.ACTIVE,
    "PROVISIONING": ResourceStatus.PENDING,
    "DEPROVISIONING": ResourceStatus.PENDING,
    "FAILED": ResourceStatus.INACTIVE,
    "INACTIVE": ResourceStatus.INACTIVE,
}
_SERVICE_STATUS = {
    "ACTIVE": ResourceStatus.ACTIVE,
    "DRAINING": ResourceStatus.PENDING,
    "INACTIVE": ResourceStatus.INACTIVE,
}


def task_definition_family(arn: str) -> str:
    """'arn:aws:ecs:r:a:task-definition/web-task:7' -> 'web-task'."""
    return arn.rsplit("/", 1)[-1].rsplit(":", 1)[0]


def waiter_config(timeout: float, interval: float) -> dict[str, int]:
    """WaiterConfig that gives up after roughly ``timeout`` seconds."""
    delay = max(1, int(interval))
    return {"Delay": delay, "MaxAttempts": max(1, math.ceil(timeout / delay))}


class EcsCalls(ClientSource):
    """Mixin for AwsProvider; ``self._client`` returns a cached boto3 client."""

    # --- cluster ---

    def describe_cluster(self, name: str) -> Observed:
        with aws_call("ecs:DescribeClusters"):
            resp = self._client("ecs").describe_clusters(clusters=[name])
        clusters = resp.get("clusters", [])
        if not clusters:
            return Observed.absent()
        cluster = clusters[0]
        return Observed(
            _CLUSTER_STATUS.get(cluster.get("status", ""), ResourceStatus.PENDING),
            cluster.get("clusterArn"),
            {
                "raw_status": cluster.get("status"),
                "active_services": cluster.get("activeServicesCount", 0),
            },
        )

    def create_cluster(self, name: str) -> Observed:
        with aws_call("ecs:CreateCluster"):
            cluster = self._client("ecs").create_cluster(clusterName=name)["cluster"]
        return Observed(
            _CLUSTER_STATUS.get(cluster.get("status", ""), ResourceStatus.PENDING),
            cluster.get("clusterArn"),
            {"raw_status": cluster.get("status")},
        )

    def delete_cluster(self, name: str) -> None:
        with aws_call("ecs:DeleteCluster"):
            self._client("ecs").delete_cluster(cluster=name)

    # --- task definitions ---

    def list_task_definitions(self, family: str) -> list[str]:
        # familyPrefix is a prefix match; keep only this exact family.
        paginator = self._client("ecs").get_paginator("list_task_definitions")
        arns: list[str] = []
        with aws_call("ecs:ListTaskDefinitions"):
            for page in paginator.paginate(familyPrefix=family, status="ACTIVE"):
                arns.extend(
                    a for a in page.get("taskDefinitionArns", []) if task_definition_family(a) == family
                )
        return arns

    def register_task_definition(self, definition: Mapping[str, Any]) -> Observed:
        with aws_call("ecs:RegisterTaskDefinition"):
            task_def = self._client("ecs").register_task_definition(**definition)["taskDefinition"]
        return Observed(
            ResourceStatus.ACTIVE,
            task_def["taskDefinitionArn"],
            {"revisions": [task_def["taskDefinitionArn"]]},
        )

    def deregister_task_definition(self, arn: str) -> None:
        try:
            with aws_call("ecs:DeregisterTaskDefinition"):
                self._client("ecs").deregister_task_definition(taskDefinition=arn)
        except ProviderError as e:
            # ECS reports unknown revisions as a generic ClientException.
            if type(e) is ProviderError and "does not exist" in e.message.lower():
                raise NotFoundError(e.operation, e.code, e.message) from e
            raise

    # --- service ---

    def describe_service(self, cluster: str, name: str) -> Observed:
        try:
            with aws_call("ecs:DescribeServices"):
                resp = self._client("ecs").describe_services(cluster=cluster, services=[name])
        except NotFoundError:
            return Observed.absent()
        services = resp.get("services", [])
        if not services:
            return Observed.absent()
        service = services[0]
        return Observed(
            _SERVICE_STATUS.get(service.get("status", ""), ResourceStatus.PENDING),
            service.get("serviceArn"),
            {
                "desired_count": service.get("desiredCount", 0),
                "running_count": service.get("runningCount", 0),
            },
        )

    def create_service(self, definition: Mapping[str, Any]) -> Observed:
        # A cluster that was just created may not accept services yet.
        overrides = {"ClusterNotFoundException": NotReadyError}
        try:
            with aws_call("ecs:CreateService", overrides):
                service = self._client("ecs").create_service(**definition)["service"]
        except ProviderError as e:
            if type(e) is ProviderError and "not idempotent" in e.message:
                raise AlreadyExistsError(e.operation, e.code, e.message) from e
            raise
        return Observed(
            _SERVICE_STATUS.get(service.get("status", ""), ResourceStatus.PENDING),
            service.get("serviceArn"),
            {"desired_count": service.get("desiredCount", 0), "running_count": 0},
        )

    def scale_service(self, cluster: str, name: str, desired_count: int) -> None:
        with aws_call("ecs:UpdateService"):
            self._client("ecs").update_service(
                cluster=cluster, service=name, desiredCount=desired_count
            )

    def _wait(self, waiter_name: str, cluster: str, name: str, timeout: float, interval: float) -> None:
        waiter = self._client("ecs").get_waiter(waiter_name)
        try:
            waiter.wait(
                cluster=cluster,
                services=[name],
                WaiterConfig=waiter_config(timeout, interval),
            )
        except WaiterError as e:
            if "Max attempts exceeded" in str(e):
                raise WaitTimeoutError(f"service {name!r} ({waiter_name})", timeout) from e
            raise ProviderError(f"ecs:{waiter_name}", "WaiterFailed", str(e)) from e

    def wait_service_stable(self, cluster: str, name: str, timeout: float, interval: float) -> None:
        self._wait("services_stable", cluster, name, timeout, interval)

    def delete_service(self, cluster: str, name: str) -> None:
        with aws_call("ecs:DeleteService"):
            self._client("ecs").delete_service(cluster=cluster, service=name)

    def wait_service_inactive(self, cluster: str, name: str, timeout: float, interval: float) -> None:
        self._wait("services_inactive", cluster, name, timeout, interval)
