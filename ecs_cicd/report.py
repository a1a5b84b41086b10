"""Run reports and the fixed text blocks printed for operators and CI."""

from dataclasses import dataclass, field
from enum import Enum

from ecs_cicd.provider import Observed
from ecs_cicd.resources.registry import ResourceKind


class Outcome(Enum):
    CREATED = "created"
    SKIPPED = "already exists"
    DELETED = "deleted"
    ALREADY_GONE = "already gone"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    kind: ResourceKind
    name: str
    outcome: Outcome
    identifier: str | None = None
    detail: str = ""


@dataclass(frozen=True)
class CiOutputs:
    """Values the CI system stores as secrets/variables."""

    access_key_id: str
    secret_access_key: str
    region: str
    repository: str
    registry_uri: str
    cluster: str
    service: str
    task_family: str

    def as_pairs(self) -> list[tuple[str, str]]:
        return [
            ("AWS_ACCESS_KEY_ID", self.access_key_id),
            ("AWS_SECRET_ACCESS_KEY", self.secret_access_key),
            ("AWS_REGION", self.region),
            ("ECR_REPOSITORY", self.repository),
            ("ECR_REGISTRY", self.registry_uri),
            ("ECS_CLUSTER", self.cluster),
            ("ECS_SERVICE", self.service),
            ("ECS_TASK_DEFINITION", self.task_family),
        ]


@dataclass
class ApplyReport:
    steps: list[StepResult] = field(default_factory=list)
    outputs: CiOutputs | None = None
    credential_warning: str | None = None

    def record(self, step: StepResult) -> None:
        self.steps.append(step)

    @property
    def created(self) -> list[ResourceKind]:
        return [s.kind for s in self.steps if s.outcome is Outcome.CREATED]

    @property
    def skipped(self) -> list[ResourceKind]:
        return [s.kind for s in self.steps if s.outcome is Outcome.SKIPPED]


@dataclass(frozen=True)
class Finding:
    """Discovery result for one kind."""

    kind: ResourceKind
    name: str
    observed: Observed
    detail: str = ""

    @property
    def exists(self) -> bool:
        return self.observed.exists


@dataclass
class Discovery:
    """All kinds, in teardown order, with what was found."""

    findings: list[Finding] = field(default_factory=list)

    @property
    def present(self) -> list[Finding]:
        return [f for f in self.findings if f.exists]

    @property
    def count(self) -> int:
        return len(self.present)


@dataclass
class TeardownReport:
    steps: list[StepResult] = field(default_factory=list)

    def record(self, step: StepResult) -> None:
        self.steps.append(step)

    @property
    def deleted(self) -> list[ResourceKind]:
        return [s.kind for s in self.steps if s.outcome in (Outcome.DELETED, Outcome.ALREADY_GONE)]


def render_step(step: StepResult) -> str:
    line = f"[{step.kind}] {step.name}: {step.outcome.value}"
    if step.detail:
        line += f" ({step.detail})"
    return line


def render_ci_outputs(outputs: CiOutputs) -> str:
    """Fixed ``KEY: value`` block, one secret per line, in a stable order."""
    return "\n".join(f"{key}: {value}" for key, value in outputs.as_pairs())


def render_discovery(discovery: Discovery, region: str) -> str:
    lines = [f"Region: {region}", ""]
    for finding in discovery.findings:
        lines.append(f"{finding.kind} ({finding.name}):")
        if finding.exists:
            suffix = f" ({finding.detail})" if finding.detail else ""
            lines.append(f"   EXISTS{suffix}")
        else:
            lines.append("   NOT FOUND")
    lines.append("")
    lines.append(f"Total resources found: {discovery.count}")
    if discovery.count == 0:
        lines.append("All resources have been cleaned up. No further action needed.")
    else:
        lines.append(f"{discovery.count} resources still exist. Run 'ecs-cicd teardown' to delete them.")
    return "\n".join(lines)


def render_summary(steps: list[StepResult]) -> str:
    changed = [s for s in steps if s.outcome in (Outcome.CREATED, Outcome.DELETED)]
    if not changed:
        return "Nothing changed."
    return "\n".join(f"  {render_step(s)}" for s in changed)
