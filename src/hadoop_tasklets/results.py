"""Step and workflow outcome types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hadoop_tasklets.errors import ErrorKind, TaskletError


class JobState(str, Enum):
    """Terminal state reported by the resource manager."""

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    KILLED = "KILLED"


@dataclass(frozen=True)
class JobOutcome:
    """What a submitter observed once the external job stopped."""

    state: JobState
    diagnostic: str | None = None
    application_id: str | None = None
    exit_code: int | None = None


class StepStatus(str, Enum):
    """Terminal status of a step or of a whole workflow run."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class StepResult:
    """Result of a single tasklet."""

    status: StepStatus
    diagnostic: str | None = None
    error_kind: ErrorKind | None = None
    application_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is StepStatus.COMPLETED

    @classmethod
    def completed(cls, application_id: str | None = None) -> "StepResult":
        return cls(StepStatus.COMPLETED, application_id=application_id)

    @classmethod
    def failed(
        cls,
        diagnostic: str | None,
        error_kind: ErrorKind | None = None,
        application_id: str | None = None,
    ) -> "StepResult":
        return cls(
            StepStatus.FAILED,
            diagnostic=diagnostic,
            error_kind=error_kind,
            application_id=application_id,
        )

    @classmethod
    def from_error(cls, error: Exception) -> "StepResult":
        """Convert an exception caught at a step boundary into a failed result."""
        kind = error.kind if isinstance(error, TaskletError) else None
        return cls.failed(str(error) or type(error).__name__, error_kind=kind)


@dataclass
class WorkflowRun:
    """Ordered record of the steps executed in one workflow invocation."""

    name: str = "workflow"
    steps: list[tuple[str, StepResult]] = field(default_factory=list)
    elapsed_time_seconds: float = 0.0

    def record(self, step_name: str, result: StepResult) -> None:
        self.steps.append((step_name, result))

    @property
    def status(self) -> StepStatus:
        if any(result.status is StepStatus.FAILED for _, result in self.steps):
            return StepStatus.FAILED
        return StepStatus.COMPLETED

    @property
    def exit_code(self) -> int:
        """Process exit code a workflow engine can consume."""
        return 0 if self.status is StepStatus.COMPLETED else 1

    @property
    def step_names(self) -> list[str]:
        return [name for name, _ in self.steps]

    def result_for(self, step_name: str) -> StepResult | None:
        for name, result in self.steps:
            if name == step_name:
                return result
        return None

    def summary(self) -> str:
        """Generate summary string."""
        lines = [f"Workflow '{self.name}': {self.status.value}"]
        for name, result in self.steps:
            line = f"  {name:20} {result.status.value}"
            if result.application_id:
                line += f" [{result.application_id}]"
            if result.diagnostic:
                kind = f"{result.error_kind.value}: " if result.error_kind else ""
                line += f" ({kind}{result.diagnostic})"
            lines.append(line)
        lines.append(f"  Elapsed time:        {self.elapsed_time_seconds:.2f}s")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "exit_code": self.exit_code,
            "elapsed_time_seconds": self.elapsed_time_seconds,
            "steps": [
                {
                    "name": name,
                    "status": result.status.value,
                    "diagnostic": result.diagnostic,
                    "error_kind": result.error_kind.value if result.error_kind else None,
                    "application_id": result.application_id,
                }
                for name, result in self.steps
            ],
        }
