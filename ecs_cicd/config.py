"""Deployment configuration: defaults, YAML file, environment, and CLI overrides."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from ecs_cicd.errors import ConfigError
from ecs_cicd.validation.validator import validate_config_document

CONFIG_DIR = ".ecs-cicd"
CONFIG_FILENAME = "config.yaml"
DEFAULT_APP = "webapp"
DEFAULT_REGION = "us-east-1"
DEFAULT_CI_USER = "github-actions-user"
EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
CI_POLICY_ARNS = (
    "arn:aws:iam::aws:policy/AmazonECS_FullAccess",
    "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryFullAccess",
)

# YAML (camelCase) -> DeployConfig field, per section.
_NAME_KEYS = {
    "cluster": "cluster_name",
    "service": "service_name",
    "taskFamily": "task_family",
    "repository": "repository",
    "securityGroup": "security_group_name",
    "ciUser": "ci_user",
}
_CONTAINER_KEYS = {
    "name": "container_name",
    "image": "image",
    "port": "container_port",
    "cpu": "cpu",
    "memory": "memory",
    "desiredCount": "desired_count",
    "environment": "environment",
    "assignPublicIp": "assign_public_ip",
    "ingressCidr": "ingress_cidr",
}
_REGISTRY_KEYS = {"scanOnPush": "scan_on_push", "keepImages": "keep_images"}
_LOG_KEYS = {"retentionDays": "log_retention_days"}
_CI_KEYS = {"policies": "ci_policy_arns", "issueAccessKey": "issue_access_key"}
_WAIT_KEYS = {
    "timeout": "wait_timeout",
    "pollInterval": "poll_interval",
    "readyAttempts": "ready_attempts",
}
_SECTIONS = {
    "names": _NAME_KEYS,
    "container": _CONTAINER_KEYS,
    "registry": _REGISTRY_KEYS,
    "logs": _LOG_KEYS,
    "ci": _CI_KEYS,
    "waits": _WAIT_KEYS,
}


@dataclass(frozen=True)
class DeployConfig:
    """Every naming variable and setting a run needs. Names left empty derive from ``app``."""

    app: str = DEFAULT_APP
    region: str = DEFAULT_REGION
    cluster_name: str = ""
    service_name: str = ""
    task_family: str = ""
    repository: str = ""
    security_group_name: str = ""
    ci_user: str = DEFAULT_CI_USER

    container_name: str = ""
    image: str = "nginx:latest"
    container_port: int = 3001
    cpu: int = 256
    memory: int = 512
    desired_count: int = 1
    environment: Mapping[str, str] = field(default_factory=lambda: {"ENVIRONMENT": "production"})
    assign_public_ip: bool = True
    ingress_cidr: str = "0.0.0.0/0"

    scan_on_push: bool = True
    keep_images: int | None = None
    log_retention_days: int | None = None

    execution_policy_arn: str = EXECUTION_POLICY_ARN
    ci_policy_arns: tuple[str, ...] = CI_POLICY_ARNS
    issue_access_key: bool = True

    wait_timeout: float = 600.0
    poll_interval: float = 10.0
    ready_attempts: int = 30

    def __post_init__(self) -> None:
        # Fill derived names so every consumer sees the same strings.
        derived = {
            "cluster_name": f"{self.app}-cicd-cluster",
            "service_name": f"{self.app}-cicd-service",
            "task_family": f"{self.app}-cicd-task",
            "repository": f"my-{self.app}",
            "security_group_name": f"{self.app}-cicd-sg",
            "container_name": self.app,
        }
        for name, value in derived.items():
            if not getattr(self, name):
                object.__setattr__(self, name, value)
        object.__setattr__(self, "environment", dict(self.environment))
        object.__setattr__(self, "ci_policy_arns", tuple(self.ci_policy_arns))
        if self.wait_timeout <= 0:
            raise ConfigError("wait_timeout must be positive")
        if self.poll_interval <= 0:
            raise ConfigError("poll_interval must be positive")
        if self.ready_attempts < 1:
            raise ConfigError("ready_attempts must be at least 1")

    @property
    def execution_role_name(self) -> str:
        return f"ecsTaskExecutionRole-{self.cluster_name}"

    @property
    def log_group_name(self) -> str:
        return f"/ecs/{self.task_family}"

    def with_overrides(self, **overrides: Any) -> "DeployConfig":
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(values) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"unknown setting(s): {', '.join(sorted(unknown))}")
        return replace(self, **values)


def default_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / CONFIG_DIR / CONFIG_FILENAME


def _settings_from_document(document: dict[str, Any]) -> dict[str, Any]:
    """Flatten the YAML document into DeployConfig keyword arguments."""
    settings: dict[str, Any] = {}
    for key in ("app", "region"):
        if document.get(key) is not None:
            settings[key] = document[key]
    for section, mapping in _SECTIONS.items():
        values = document.get(section) or {}
        for yaml_key, attr in mapping.items():
            if values.get(yaml_key) is not None:
                settings[attr] = values[yaml_key]
    return settings


def read_config_file(path: Path) -> dict[str, Any]:
    """Load and validate a config YAML file; return DeployConfig keyword arguments."""
    try:
        with open(path, encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(document, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    try:
        validate_config_document(document)
    except jsonschema.ValidationError as e:
        raise ConfigError(f"{path}: {e.message}") from e
    return _settings_from_document(document)


def _settings_from_environ(environ: Mapping[str, str], have_region: bool) -> dict[str, Any]:
    settings: dict[str, Any] = {}
    if environ.get("ECS_CICD_APP", "").strip():
        settings["app"] = environ["ECS_CICD_APP"].strip()
    region = environ.get("ECS_CICD_REGION", "").strip()
    if not region and not have_region:
        # The AWS SDK variables only fill in a region nobody configured explicitly.
        region = (environ.get("AWS_REGION") or environ.get("AWS_DEFAULT_REGION") or "").strip()
    if region:
        settings["region"] = region
    return settings


def load_deploy_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> DeployConfig:
    """Build the run configuration: defaults < config file < environment < overrides.

    ``path`` must exist when given; otherwise ``.ecs-cicd/config.yaml`` is used if present.
    """
    environ = os.environ if environ is None else environ
    settings: dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        settings.update(read_config_file(path))
    elif default_config_path().exists():
        settings.update(read_config_file(default_config_path()))

    settings.update(_settings_from_environ(environ, have_region="region" in settings))
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return DeployConfig(**settings)
    except TypeError as e:
        raise ConfigError(str(e)) from e
