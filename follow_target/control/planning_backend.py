"""Planning backend interface consumed by the retargeting controller."""

from __future__ import annotations

from .goal import ExecutionResult, GoalRequest


class PlanningBackend:
    """Base interface for motion planning + execution backends.

    Implementations own inverse kinematics, trajectory generation, collision
    checking and execution. The controller only sees success or failure.
    """

    name: str = "backend"

    def configure(self, velocity_scaling: float, acceleration_scaling: float) -> None:
        """Apply startup scaling factors in (0, 1]. Called once before any goal."""
        pass

    def submit_goal(self, goal: GoalRequest) -> ExecutionResult:
        """Plan and execute towards goal.pose, blocking until motion is done."""
        raise NotImplementedError

    def close(self) -> None:
        pass
