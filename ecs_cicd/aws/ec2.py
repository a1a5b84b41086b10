"""EC2 calls: default-VPC lookup and the service security group."""

from ecs_cicd.aws.base import ClientSource
from ecs_cicd.aws.errors import aws_call
from ecs_cicd.errors import AlreadyExistsError, NotReadyError
from ecs_cicd.provider import Observed, ResourceStatus


class Ec2Calls(ClientSource):
    """Mixin for AwsProvider; ``self._client`` returns a cached boto3 client."""

    def default_vpc_id(self) -> str | None:
        with aws_call("ec2:DescribeVpcs"):
            vpcs = self._client("ec2").describe_vpcs(
                Filters=[{"Name": "is-default", "Values": ["true"]}]
            ).get("Vpcs", [])
        return vpcs[0]["VpcId"] if vpcs else None

    def subnet_ids(self, vpc_id: str) -> list[str]:
        paginator = self._client("ec2").get_paginator("describe_subnets")
        ids: list[str] = []
        with aws_call("ec2:DescribeSubnets"):
            for page in paginator.paginate(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}]):
                ids.extend(s["SubnetId"] for s in page.get("Subnets", []))
        return sorted(ids)

    def find_security_group(self, name: str, vpc_id: str | None) -> Observed:
        filters = [{"Name": "group-name", "Values": [name]}]
        if vpc_id:
            filters.append({"Name": "vpc-id", "Values": [vpc_id]})
        with aws_call("ec2:DescribeSecurityGroups"):
            groups = self._client("ec2").describe_security_groups(Filters=filters).get(
                "SecurityGroups", []
            )
        if not groups:
            return Observed.absent()
        group = groups[0]
        return Observed(ResourceStatus.ACTIVE, group["GroupId"], {"vpc_id": group.get("VpcId")})

    def create_security_group(self, name: str, description: str, vpc_id: str) -> Observed:
        with aws_call("ec2:CreateSecurityGroup"):
            resp = self._client("ec2").create_security_group(
                GroupName=name, Description=description, VpcId=vpc_id
            )
        return Observed(ResourceStatus.ACTIVE, resp["GroupId"], {"vpc_id": vpc_id})

    def authorize_ingress(self, group_id: str, port: int, cidr: str) -> None:
        try:
            with aws_call("ec2:AuthorizeSecurityGroupIngress"):
                self._client("ec2").authorize_security_group_ingress(
                    GroupId=group_id,
                    IpPermissions=[
                        {
                            "IpProtocol": "tcp",
                            "FromPort": port,
                            "ToPort": port,
                            "IpRanges": [{"CidrIp": cidr, "Description": "container port"}],
                        }
                    ],
                )
        except AlreadyExistsError:
            pass  # rule already present

    def delete_security_group(self, group_id: str) -> None:
        # Task ENIs linger for a while after the service is gone.
        with aws_call("ec2:DeleteSecurityGroup", {"DependencyViolation": NotReadyError}):
            self._client("ec2").delete_security_group(GroupId=group_id)
