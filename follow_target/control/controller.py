"""Control plane for mapping target pose updates -> motion goals."""

from __future__ import annotations

import logging
import threading

from ..math3d.coords import base_yaw_rad
from ..math3d.quaternion import rpy_to_q
from .goal import ExecutionResult, GoalKind, GoalRequest, UpdateOutcome, UpdateReport
from .planning_backend import PlanningBackend
from .pose import TargetPose, format_pose, identity_pose
from .pose_filter import PoseChangeFilter

logger = logging.getLogger(__name__)

# Tool axis parallel to the base plane.
DEFAULT_FALLBACK_ROLL = 1.57
DEFAULT_FALLBACK_PITCH = 0.0


class RetargetingController:
    """
    Per changed update:
      full-pose goal -> (on failure) relaxed goal -> commit retained pose.

    The arm has fewer than 6 DOF, so a full pose is often unreachable. The
    relaxed goal keeps the position and points the tool from the base origin
    towards the target (yaw = atan2(y, x)) with fixed roll/pitch.
    """

    def __init__(
        self,
        backend: PlanningBackend,
        fallback_roll: float = DEFAULT_FALLBACK_ROLL,
        fallback_pitch: float = DEFAULT_FALLBACK_PITCH,
        change_filter: PoseChangeFilter | None = None,
    ):
        self.backend = backend
        self.fallback_roll = float(fallback_roll)
        self.fallback_pitch = float(fallback_pitch)
        self.change_filter = change_filter or PoseChangeFilter()

        self._retained = identity_pose()
        # Held for a whole update: one goal in flight, one writer of _retained.
        self._lock = threading.Lock()

    @property
    def retained_pose(self) -> TargetPose:
        return self._retained

    def relaxed_goal(self, pose: TargetPose) -> GoalRequest:
        yaw = base_yaw_rad(pose.position)
        q = rpy_to_q(self.fallback_roll, self.fallback_pitch, yaw)
        return GoalRequest(kind=GoalKind.RELAXED, pose=pose.with_quaternion(q))

    def _submit(self, goal: GoalRequest, report: UpdateReport) -> ExecutionResult:
        result = self.backend.submit_goal(goal)
        report.attempts.append((goal, result))
        logger.debug(
            "[PLAN] %s goal %s -> %s %s",
            goal.kind.value,
            format_pose(goal.pose),
            "ok" if result.success else "failed",
            result.message,
        )
        return result

    def process(self, pose: TargetPose) -> UpdateReport:
        with self._lock:
            if not self.change_filter.changed(pose, self._retained):
                return UpdateReport(pose=pose, outcome=UpdateOutcome.UNCHANGED)

            logger.info(
                "[FOLLOW] target pose has changed (%s). Planning and executing...",
                format_pose(pose),
            )
            report = UpdateReport(pose=pose, outcome=UpdateOutcome.PRIMARY_SUCCEEDED)
            try:
                result = self._submit(GoalRequest(kind=GoalKind.FULL, pose=pose), report)
                if not result.success:
                    logger.info(
                        "[FOLLOW] full pose unreachable (%s), retrying with relaxed orientation",
                        result.message or "no reason given",
                    )
                    fallback = self._submit(self.relaxed_goal(pose), report)
                    if fallback.success:
                        report.outcome = UpdateOutcome.FALLBACK_SUCCEEDED
                    else:
                        report.outcome = UpdateOutcome.ABANDONED
                        logger.warning(
                            "[FOLLOW] relaxed goal also failed (%s); waiting for a new target",
                            fallback.message or "no reason given",
                        )
            finally:
                # Exactly once per changed update, whatever the outcome.
                self._retained = pose
            return report
