"""Translate botocore ClientError codes into the package's typed errors."""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from botocore.exceptions import ClientError

from ecs_cicd.errors import (
    AlreadyExistsError,
    DependencyConflictError,
    NotFoundError,
    NotReadyError,
    ProviderError,
    QuotaExceededError,
)

NOT_FOUND_CODES = frozenset(
    {
        "RepositoryNotFoundException",
        "RepositoryPolicyNotFoundException",
        "ImageNotFoundException",
        "NoSuchEntity",
        "ClusterNotFoundException",
        "ServiceNotFoundException",
        "InvalidGroup.NotFound",
        "InvalidGroupId.NotFound",
        "InvalidVpcID.NotFound",
        "ResourceNotFoundException",
    }
)
ALREADY_EXISTS_CODES = frozenset(
    {
        "RepositoryAlreadyExistsException",
        "EntityAlreadyExists",
        "InvalidGroup.Duplicate",
        "InvalidPermission.Duplicate",
        "ResourceAlreadyExistsException",
    }
)
QUOTA_CODES = frozenset(
    {
        "LimitExceeded",
        "LimitExceededException",
        "RulesPerSecurityGroupLimitExceeded",
        "SecurityGroupLimitExceeded",
    }
)
CONFLICT_CODES = frozenset(
    {
        "DeleteConflict",
        "DependencyViolation",
        "ClusterContainsServicesException",
        "ClusterContainsTasksException",
        "ClusterContainsContainerInstancesException",
        "RepositoryNotEmptyException",
    }
)
NOT_READY_CODES = frozenset(
    {
        "ServiceNotActiveException",
        "ResourceInUseException",
        "UpdateInProgressException",
        "OperationAbortedException",
    }
)

_BY_CODE: list[tuple[frozenset[str], type[ProviderError]]] = [
    (NOT_FOUND_CODES, NotFoundError),
    (ALREADY_EXISTS_CODES, AlreadyExistsError),
    (QUOTA_CODES, QuotaExceededError),
    (CONFLICT_CODES, DependencyConflictError),
    (NOT_READY_CODES, NotReadyError),
]


def error_code(err: ClientError) -> str:
    return err.response.get("Error", {}).get("Code", "Unknown")


def translate(
    err: ClientError,
    operation: str,
    overrides: Mapping[str, type[ProviderError]] | None = None,
) -> ProviderError:
    """Map a ClientError to a typed ProviderError; ``overrides`` win over the default tables."""
    code = error_code(err)
    message = err.response.get("Error", {}).get("Message", str(err))
    if overrides and code in overrides:
        return overrides[code](operation, code, message)
    for codes, cls in _BY_CODE:
        if code in codes:
            return cls(operation, code, message)
    return ProviderError(operation, code, message)


@contextmanager
def aws_call(
    operation: str,
    overrides: Mapping[str, type[ProviderError]] | None = None,
) -> Iterator[None]:
    """Run a boto3 call, re-raising ClientError as a typed ProviderError."""
    try:
        yield
    except ClientError as e:
        raise translate(e, operation, overrides) from e
