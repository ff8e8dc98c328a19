"""Simulated reach-limited arm backend.

Emulates a 5-DOF arm for running the follower without a planning stack. It is
not a planner: there is no IK, collision checking or trajectory. A goal is
accepted when
  - its position lies inside a spherical shell and a z band, and
  - the tool approach axis (tool +x) lies in the vertical plane through the
    base z axis and the target, which is all a 5-DOF wrist can reach.
"""

from __future__ import annotations

import logging
import math
import threading
import time

import numpy as np

from ..control.goal import ExecutionResult, GoalRequest
from ..control.planning_backend import PlanningBackend
from ..control.pose import TargetPose, identity_pose
from ..math3d.coords import approach_plane_error_rad
from ..math3d.quaternion import q_rotate_vec

logger = logging.getLogger(__name__)

TOOL_APPROACH_AXIS = np.array([1.0, 0.0, 0.0], dtype=np.float64)


class SimulatedArmBackend(PlanningBackend):
    name = "sim"

    def __init__(
        self,
        move_group: str = "lss_arm",
        min_reach: float = 0.05,
        max_reach: float = 0.45,
        min_z: float = -0.05,
        max_z: float = 0.5,
        max_speed: float = 0.25,
        orientation_tol_deg: float = 2.0,
        time_scale: float = 1.0,
    ):
        self.move_group = str(move_group)
        self.min_reach = float(min_reach)
        self.max_reach = float(max_reach)
        self.min_z = float(min_z)
        self.max_z = float(max_z)
        self.max_speed = float(max_speed)
        self.orientation_tol = math.radians(float(orientation_tol_deg))
        self.time_scale = max(0.0, float(time_scale))

        self.velocity_scaling = 1.0
        self.acceleration_scaling = 1.0
        self.current_pose = identity_pose()
        self.executed: list[GoalRequest] = []

        self._lock = threading.Lock()
        self._in_flight = False

        logger.info(
            "[PLAN] backend=sim (group=%s, reach=[%.3f, %.3f]m, z=[%.3f, %.3f]m, tol=%.1fdeg)",
            self.move_group,
            self.min_reach,
            self.max_reach,
            self.min_z,
            self.max_z,
            math.degrees(self.orientation_tol),
        )

    def configure(self, velocity_scaling: float, acceleration_scaling: float) -> None:
        self.velocity_scaling = float(velocity_scaling)
        self.acceleration_scaling = float(acceleration_scaling)
        logger.info(
            "[PLAN] scaling velocity=%.2f acceleration=%.2f",
            self.velocity_scaling,
            self.acceleration_scaling,
        )

    def check_goal(self, pose: TargetPose) -> str | None:
        """Return a failure reason, or None when the goal is reachable."""
        p = pose.position_array()
        q = pose.quaternion_array()
        if not np.isfinite(p).all() or not np.isfinite(q).all():
            return "pose contains non-finite values"
        if float(np.linalg.norm(q)) < 1e-9:
            return "zero-length quaternion"

        reach = float(np.linalg.norm(p))
        if not (self.min_reach <= reach <= self.max_reach):
            return f"position out of reach ({reach:.3f}m)"
        if not (self.min_z <= p[2] <= self.max_z):
            return f"position z out of range ({p[2]:.3f}m)"

        approach = q_rotate_vec(q, TOOL_APPROACH_AXIS)
        err = approach_plane_error_rad(approach, p)
        if err > self.orientation_tol:
            return f"orientation needs 6 DOF (approach off-plane by {math.degrees(err):.1f}deg)"
        return None

    def _motion_time_s(self, pose: TargetPose) -> float:
        distance = float(np.linalg.norm(pose.position_array() - self.current_pose.position_array()))
        speed = self.max_speed * self.velocity_scaling
        if speed <= 0.0:
            return 0.0
        return distance / speed * self.time_scale

    def submit_goal(self, goal: GoalRequest) -> ExecutionResult:
        with self._lock:
            if self._in_flight:
                raise RuntimeError("goal submitted while another goal is executing")
            self._in_flight = True
        try:
            reason = self.check_goal(goal.pose)
            if reason is not None:
                return ExecutionResult.failed(reason)

            duration = self._motion_time_s(goal.pose)
            if duration > 0.0:
                time.sleep(duration)
            self.current_pose = goal.pose
            self.executed.append(goal)
            return ExecutionResult.succeeded(f"executed in {duration:.2f}s")
        finally:
            with self._lock:
                self._in_flight = False
