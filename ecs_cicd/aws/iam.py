"""IAM calls: the ECS execution role and the CI user with its access keys."""

from collections.abc import Mapping
import json
from typing import Any

from ecs_cicd.aws.base import ClientSource
from ecs_cicd.aws.errors import aws_call
from ecs_cicd.errors import NotFoundError
from ecs_cicd.provider import AccessKey, Observed, ResourceStatus


class IamCalls(ClientSource):
    """Mixin for AwsProvider; ``self._client`` returns a cached boto3 client."""

    # --- roles ---

    def get_role(self, name: str) -> Observed:
        try:
            with aws_call("iam:GetRole"):
                role = self._client("iam").get_role(RoleName=name)["Role"]
        except NotFoundError:
            return Observed.absent()
        return Observed(ResourceStatus.ACTIVE, role["Arn"])

    def create_role(self, name: str, trust_policy: Mapping[str, Any]) -> Observed:
        with aws_call("iam:CreateRole"):
            role = self._client("iam").create_role(
                RoleName=name,
                AssumeRolePolicyDocument=json.dumps(trust_policy),
            )["Role"]
        return Observed(ResourceStatus.ACTIVE, role["Arn"])

    def attach_role_policy(self, name: str, policy_arn: str) -> None:
        with aws_call("iam:AttachRolePolicy"):
            self._client("iam").attach_role_policy(RoleName=name, PolicyArn=policy_arn)

    def list_attached_role_policies(self, name: str) -> list[str]:
        paginator = self._client("iam").get_paginator("list_attached_role_policies")
        arns: list[str] = []
        with aws_call("iam:ListAttachedRolePolicies"):
            for page in paginator.paginate(RoleName=name):
                arns.extend(p["PolicyArn"] for p in page.get("AttachedPolicies", []))
        return arns

    def detach_role_policy(self, name: str, policy_arn: str) -> None:
        with aws_call("iam:DetachRolePolicy"):
            self._client("iam").detach_role_policy(RoleName=name, PolicyArn=policy_arn)

    def list_role_inline_policies(self, name: str) -> list[str]:
        paginator = self._client("iam").get_paginator("list_role_policies")
        names: list[str] = []
        with aws_call("iam:ListRolePolicies"):
            for page in paginator.paginate(RoleName=name):
                names.extend(page.get("PolicyNames", []))
        return names

    def delete_role_inline_policy(self, name: str, policy_name: str) -> None:
        with aws_call("iam:DeleteRolePolicy"):
            self._client("iam").delete_role_policy(RoleName=name, PolicyName=policy_name)

    def delete_role(self, name: str) -> None:
        with aws_call("iam:DeleteRole"):
            self._client("iam").delete_role(RoleName=name)

    # --- users ---

    def get_user(self, name: str) -> Observed:
        try:
            with aws_call("iam:GetUser"):
                user = self._client("iam").get_user(UserName=name)["User"]
        except NotFoundError:
            return Observed.absent()
        return Observed(
            ResourceStatus.ACTIVE,
            user["Arn"],
            {"access_key_count": len(self.list_access_keys(name))},
        )

    def create_user(self, name: str) -> Observed:
        with aws_call("iam:CreateUser"):
            user = self._client("iam").create_user(UserName=name)["User"]
        return Observed(ResourceStatus.ACTIVE, user["Arn"], {"access_key_count": 0})

    def attach_user_policy(self, name: str, policy_arn: str) -> None:
        with aws_call("iam:AttachUserPolicy"):
            self._client("iam").attach_user_policy(UserName=name, PolicyArn=policy_arn)

    def list_attached_user_policies(self, name: str) -> list[str]:
        paginator = self._client("iam").get_paginator("list_attached_user_policies")
        arns: list[str] = []
        with aws_call("iam:ListAttachedUserPolicies"):
            for page in paginator.paginate(UserName=name):
                arns.extend(p["PolicyArn"] for p in page.get("AttachedPolicies", []))
        return arns

    def detach_user_policy(self, name: str, policy_arn: str) -> None:
        with aws_call("iam:DetachUserPolicy"):
            self._client("iam").detach_user_policy(UserName=name, PolicyArn=policy_arn)

    def list_user_inline_policies(self, name: str) -> list[str]:
        paginator = self._client("iam").get_paginator("list_user_policies")
        names: list[str] = []
        with aws_call("iam:ListUserPolicies"):
            for page in paginator.paginate(UserName=name):
                names.extend(page.get("PolicyNames", []))
        return names

    def delete_user_inline_policy(self, name: str, policy_name: str) -> None:
        with aws_call("iam:DeleteUserPolicy"):
            self._client("iam").delete_user_policy(UserName=name, PolicyName=policy_name)

    def list_access_keys(self, name: str) -> list[str]:
        paginator = self._client("iam").get_paginator("list_access_keys")
        key_ids: list[str] = []
        with aws_call("iam:ListAccessKeys"):
            for page in paginator.paginate(UserName=name):
                key_ids.extend(k["AccessKeyId"] for k in page.get("AccessKeyMetadata", []))
        return key_ids

    def create_access_key(self, name: str) -> AccessKey:
        # LimitExceeded (two keys per user) surfaces as QuotaExceededError.
        with aws_call("iam:CreateAccessKey"):
            key = self._client("iam").create_access_key(UserName=name)["AccessKey"]
        return AccessKey(key["AccessKeyId"], key["SecretAccessKey"])

    def delete_access_key(self, name: str, access_key_id: str) -> None:
        with aws_call("iam:DeleteAccessKey"):
            self._client("iam").delete_access_key(UserName=name, AccessKeyId=access_key_id)

    def delete_user(self, name: str) -> None:
        with aws_call("iam:DeleteUser"):
            self._client("iam").delete_user(UserName=name)
