"""boto3-backed implementation of the provider abstraction."""

from ecs_cicd.aws.provider import AwsProvider

__all__ = ["AwsProvider"]
