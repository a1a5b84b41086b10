"""AwsProvider: CloudProvider over boto3, one mixin per AWS service."""

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ecs_cicd.aws.ec2 import Ec2Calls
from ecs_cicd.aws.ecr import EcrCalls
from ecs_cicd.aws.ecs import EcsCalls
from ecs_cicd.aws.iam import IamCalls
from ecs_cicd.aws.logs import LogsCalls
from ecs_cicd.errors import PreconditionError

CLIENT_CONFIG = Config(retries={"max_attempts": 10, "mode": "standard"})


class AwsProvider(EcrCalls, IamCalls, EcsCalls, Ec2Calls, LogsCalls):
    """Talks to one account/region through a boto3 session; clients are created lazily."""

    def __init__(self, region: str, session: boto3.Session | None = None) -> None:
        self.region = region
        self._session = session or boto3.Session(region_name=region)
        self._clients: dict[str, Any] = {}

    def _client(self, service: str) -> Any:
        if service not in self._clients:
            self._clients[service] = self._session.client(
                service, region_name=self.region, config=CLIENT_CONFIG
            )
        return self._clients[service]

    def caller_identity(self) -> str:
        try:
            return self._client("sts").get_caller_identity()["Account"]
        except NoCredentialsError as e:
            raise PreconditionError(
                "AWS credentials not found. Configure them (e.g. aws configure) and try again."
            ) from e
        except (ClientError, BotoCoreError) as e:
            raise PreconditionError(f"AWS credentials are not usable: {e}") from e
