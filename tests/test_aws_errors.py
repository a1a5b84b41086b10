"""Tests for ClientError translation."""

from botocore.exceptions import ClientError
import pytest

from ecs_cicd.aws.errors import aws_call, error_code, translate
from ecs_cicd.errors import (
    AlreadyExistsError,
    DependencyConflictError,
    NotFoundError,
    NotReadyError,
    ProviderError,
    QuotaExceededError,
)


def _client_error(code: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "SomeOperation")


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("RepositoryNotFoundException", NotFoundError),
        ("NoSuchEntity", NotFoundError),
        ("InvalidGroup.NotFound", NotFoundError),
        ("EntityAlreadyExists", AlreadyExistsError),
        ("InvalidPermission.Duplicate", AlreadyExistsError),
        ("LimitExceeded", QuotaExceededError),
        ("DeleteConflict", DependencyConflictError),
        ("ClusterContainsServicesException", DependencyConflictError),
        ("ResourceInUseException", NotReadyError),
        ("ServiceNotActiveException", NotReadyError),
    ],
)
def test_translate_known_codes(code: str, expected: type[ProviderError]) -> None:
    """Known codes map onto the typed errors."""
    err = translate(_client_error(code), "svc:Op")
    assert type(err) is expected
    assert err.code == code
    assert err.operation == "svc:Op"


def test_translate_unknown_code_is_plain_provider_error() -> None:
    """Unclassified codes stay generic (and therefore fatal)."""
    err = translate(_client_error("AccessDeniedException", "not allowed"), "ecs:CreateCluster")
    assert type(err) is ProviderError
    assert "not allowed" in str(err)
    assert "ecs:CreateCluster" in str(err)


def test_overrides_win() -> None:
    """Per-call overrides replace the default classification."""
    err = translate(_client_error("DependencyViolation"), "ec2:Op", {"DependencyViolation": NotReadyError})
    assert type(err) is NotReadyError


def test_error_code_when_missing() -> None:
    """A response without an Error block reads as Unknown."""
    assert error_code(ClientError({}, "Op")) == "Unknown"


def test_aws_call_reraises_typed_error_with_cause() -> None:
    """aws_call turns ClientError into ProviderError and chains the original."""
    original = _client_error("NoSuchEntity")
    with pytest.raises(NotFoundError) as exc_info:
        with aws_call("iam:GetRole"):
            raise original
    assert exc_info.value.__cause__ is original


def test_aws_call_leaves_other_errors_alone() -> None:
    """Non-ClientError exceptions pass through untouched."""
    with pytest.raises(KeyError):
        with aws_call("iam:GetRole"):
            raise KeyError("Role")
