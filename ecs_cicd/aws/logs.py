"""CloudWatch Logs calls for the task log group."""

from ecs_cicd.aws.base import ClientSource
from ecs_cicd.aws.errors import aws_call
from ecs_cicd.provider import Observed, ResourceStatus


class LogsCalls(ClientSource):
    """Mixin for AwsProvider; ``self._client`` returns a cached boto3 client."""

    def describe_log_group(self, name: str) -> Observed:
        # describe_log_groups only filters by prefix; match the exact name.
        paginator = self._client("logs").get_paginator("describe_log_groups")
        with aws_call("logs:DescribeLogGroups"):
            for page in paginator.paginate(logGroupNamePrefix=name):
                for group in page.get("logGroups", []):
                    if group["logGroupName"] == name:
                        return Observed(
                            ResourceStatus.ACTIVE,
                            name,
                            {"arn": group.get("arn"), "retention_days": group.get("retentionInDays")},
                        )
        return Observed.absent()

    def create_log_group(self, name: str) -> Observed:
        with aws_call("logs:CreateLogGroup"):
            self._client("logs").create_log_group(logGroupName=name)
        return Observed(ResourceStatus.ACTIVE, name)

    def put_log_retention(self, name: str, days: int) -> None:
        with aws_call("logs:PutRetentionPolicy"):
            self._client("logs").put_retention_policy(logGroupName=name, retentionInDays=days)

    def delete_log_group(self, name: str) -> None:
        with aws_call("logs:DeleteLogGroup"):
            self._client("logs").delete_log_group(logGroupName=name)
