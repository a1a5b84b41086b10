"""ECR repository calls."""

from collections.abc import Mapping, Sequence
import json

from ecs_cicd.aws.base import ClientSource
from ecs_cicd.aws.errors import aws_call
from ecs_cicd.errors import NotFoundError, ProviderError
from ecs_cicd.provider import Observed, ResourceStatus

# batch_delete_image accepts at most 100 image IDs per request.
BATCH_DELETE_LIMIT = 100


def lifecycle_policy(keep_images: int) -> str:
    """Lifecycle policy document keeping the newest ``keep_images`` images."""
    return json.dumps(
        {
            "rules": [
                {
                    "rulePriority": 1,
                    "description": f"Keep last {keep_images} images",
                    "selection": {
                        "tagStatus": "any",
                        "countType": "imageCountMoreThan",
                        "countNumber": keep_images,
                    },
                    "action": {"type": "expire"},
                }
            ],
        }
    )


class EcrCalls(ClientSource):
    """Mixin for AwsProvider; ``self._client`` returns a cached boto3 client."""

    def describe_repository(self, name: str) -> Observed:
        ecr = self._client("ecr")
        try:
            with aws_call("ecr:DescribeRepositories"):
                resp = ecr.describe_repositories(repositoryNames=[name])
        except NotFoundError:
            return Observed.absent()
        repo = resp["repositories"][0]
        return Observed(
            ResourceStatus.ACTIVE,
            repo["repositoryUri"],
            {"arn": repo.get("repositoryArn"), "image_count": len(self.list_image_ids(name))},
        )

    def create_repository(self, name: str, scan_on_push: bool) -> Observed:
        with aws_call("ecr:CreateRepository"):
            resp = self._client("ecr").create_repository(
                repositoryName=name,
                imageTagMutability="MUTABLE",
                imageScanningConfiguration={"scanOnPush": scan_on_push},
            )
        repo = resp["repository"]
        return Observed(
            ResourceStatus.ACTIVE,
            repo["repositoryUri"],
            {"arn": repo.get("repositoryArn"), "image_count": 0},
        )

    def put_image_retention(self, name: str, keep_images: int) -> None:
        with aws_call("ecr:PutLifecyclePolicy"):
            self._client("ecr").put_lifecycle_policy(
                repositoryName=name,
                lifecyclePolicyText=lifecycle_policy(keep_images),
            )

    def list_image_ids(self, name: str) -> list[dict[str, str]]:
        image_ids: list[dict[str, str]] = []
        paginator = self._client("ecr").get_paginator("list_images")
        with aws_call("ecr:ListImages"):
            for page in paginator.paginate(repositoryName=name):
                image_ids.extend(page.get("imageIds", []))
        return image_ids

    def batch_delete_images(self, name: str, image_ids: Sequence[Mapping[str, str]]) -> None:
        ecr = self._client("ecr")
        for start in range(0, len(image_ids), BATCH_DELETE_LIMIT):
            chunk = [dict(i) for i in image_ids[start : start + BATCH_DELETE_LIMIT]]
            with aws_call("ecr:BatchDeleteImage"):
                resp = ecr.batch_delete_image(repositoryName=name, imageIds=chunk)
            failures = [
                f for f in resp.get("failures", []) if f.get("failureCode") != "ImageNotFound"
            ]
            if failures:
                first = failures[0]
                raise ProviderError(
                    "ecr:BatchDeleteImage",
                    first.get("failureCode", "Unknown"),
                    first.get("failureReason", f"{len(failures)} image(s) not deleted"),
                )

    def delete_repository(self, name: str) -> None:
        with aws_call("ecr:DeleteRepository"):
            self._client("ecr").delete_repository(repositoryName=name)
