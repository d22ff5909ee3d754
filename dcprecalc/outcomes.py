"""
Explicit outcome types for pipeline tasks.

Tasks never let exceptions escape into the driver loop: each one returns a
TaskOutcome that is either ok or failed with an ErrorKind. The driver decides
whether to continue from the outcome alone.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dcprecalc.errors import ErrorKind, PrecalcException


@dataclass(frozen=True)
class TaskOutcome:
    """
    Result of one pipeline task.

    Attributes:
        task: Task name ("dataset", "phase1", ...).
        ok: True when the task finished and its artifact (if any) is written.
        duration: Wall-clock seconds spent in the task.
        value: Task payload on success (e.g. the written document).
        error_kind: Failure classification when ok is False.
        error: The exception that caused the failure.
        warnings: Non-fatal findings such as aggregation gaps.
    """
    task: str
    ok: bool
    duration: float = 0.0
    value: Any = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[BaseException] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, task: str, duration: float, value: Any = None,
                warnings: Optional[List[str]] = None) -> "TaskOutcome":
        return cls(task=task, ok=True, duration=duration, value=value, warnings=list(warnings or []))

    @classmethod
    def failure(cls, task: str, duration: float, error: BaseException) -> "TaskOutcome":
        if isinstance(error, PrecalcException):
            kind = error.kind
        elif isinstance(error, OSError):
            kind = ErrorKind.FILESYSTEM
        else:
            kind = ErrorKind.INTERNAL
        return cls(task=task, ok=False, duration=duration, error_kind=kind, error=error)


@dataclass
class PipelineReport:
    """Overall result of PrecalculationPipeline.run_all()."""
    success: bool
    durations: Dict[str, float] = field(default_factory=dict)
    outcomes: List[TaskOutcome] = field(default_factory=list)
    failed_task: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[BaseException] = None
    interrupted: bool = False

    @property
    def total_duration(self) -> float:
        return sum(self.durations.values())

    @property
    def completed_tasks(self) -> List[str]:
        return [o.task for o in self.outcomes if o.ok]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "durations": dict(self.durations),
            "failed_task": self.failed_task,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error": str(self.error) if self.error else None,
            "interrupted": self.interrupted,
        }
