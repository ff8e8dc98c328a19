"""Goal requests, execution results and per-update reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .pose import TargetPose


class GoalKind(Enum):
    FULL = "full"
    # Target position with a synthesized orientation.
    RELAXED = "relaxed"


@dataclass(frozen=True, slots=True)
class GoalRequest:
    kind: GoalKind
    pose: TargetPose


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of one plan-and-execute call. Failure is a value, not an error."""

    success: bool
    message: str = ""

    @classmethod
    def succeeded(cls, message: str = "") -> "ExecutionResult":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, reason: str) -> "ExecutionResult":
        return cls(success=False, message=reason)

    def __bool__(self) -> bool:
        return self.success


class UpdateOutcome(Enum):
    UNCHANGED = "unchanged"
    PRIMARY_SUCCEEDED = "primary-succeeded"
    FALLBACK_SUCCEEDED = "fallback-succeeded"
    ABANDONED = "abandoned"


@dataclass(slots=True)
class UpdateReport:
    pose: TargetPose
    outcome: UpdateOutcome
    attempts: list[tuple[GoalRequest, ExecutionResult]] = field(default_factory=list)

    @property
    def submitted(self) -> int:
        return len(self.attempts)
