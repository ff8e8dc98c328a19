import math

import numpy as np
import pytest

from follow_target.control.controller import RetargetingController
from follow_target.control.goal import ExecutionResult, GoalKind, UpdateOutcome
from follow_target.control.planning_backend import PlanningBackend
from follow_target.control.pose import TargetPose, identity_pose
from follow_target.math3d.quaternion import q_to_rpy, rpy_to_q


def _pose(x: float, y: float, z: float, q=(0.7071, 0.0, 0.7071, 0.0)) -> TargetPose:
    return TargetPose(position=(x, y, z), quaternion=q)


class _ScriptedBackend(PlanningBackend):
    """Answers goals from a list of booleans and records every call."""

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.calls = []
        self.in_flight = False

    def submit_goal(self, goal):
        assert not self.in_flight
        self.in_flight = True
        self.calls.append(goal)
        try:
            ok = self.answers.pop(0) if self.answers else True
            return ExecutionResult.succeeded() if ok else ExecutionResult.failed("unreachable")
        finally:
            self.in_flight = False


class _RaisingBackend(PlanningBackend):
    def submit_goal(self, goal):
        raise ConnectionError("planning service unavailable")


def test_initial_retained_pose_is_identity():
    ctrl = RetargetingController(_ScriptedBackend())
    assert ctrl.retained_pose == identity_pose()


def test_primary_success_submits_once_and_commits():
    backend = _ScriptedBackend([True])
    ctrl = RetargetingController(backend)
    target = _pose(1.0, 0.0, 0.0)

    report = ctrl.process(target)

    assert report.outcome is UpdateOutcome.PRIMARY_SUCCEEDED
    assert len(backend.calls) == 1
    assert backend.calls[0].kind is GoalKind.FULL
    assert backend.calls[0].pose == target
    assert ctrl.retained_pose == target


def test_primary_failure_triggers_relaxed_goal():
    backend = _ScriptedBackend([False, True])
    ctrl = RetargetingController(backend, fallback_roll=1.57, fallback_pitch=0.0)
    target = _pose(1.0, 0.0, 0.0)

    report = ctrl.process(target)

    assert report.outcome is UpdateOutcome.FALLBACK_SUCCEEDED
    assert [g.kind for g in backend.calls] == [GoalKind.FULL, GoalKind.RELAXED]
    relaxed = backend.calls[1].pose
    assert relaxed.position == target.position
    roll, pitch, yaw = q_to_rpy(relaxed.quaternion_array())
    assert abs(roll - 1.57) < 1e-9
    assert abs(pitch) < 1e-9
    assert abs(yaw) < 1e-9
    assert ctrl.retained_pose == target


def test_both_attempts_failing_still_commits_target():
    backend = _ScriptedBackend([False, False])
    ctrl = RetargetingController(backend)
    target = _pose(0.2, 0.1, 0.3)

    report = ctrl.process(target)

    assert report.outcome is UpdateOutcome.ABANDONED
    assert report.submitted == 2
    assert ctrl.retained_pose == target

    # Abandoned targets are not re-attempted.
    again = ctrl.process(target)
    assert again.outcome is UpdateOutcome.UNCHANGED
    assert len(backend.calls) == 2


def test_repeated_target_issues_no_backend_calls():
    backend = _ScriptedBackend([False, True])
    ctrl = RetargetingController(backend)
    target = _pose(2.0, 2.0, 0.0)

    ctrl.process(target)
    second = ctrl.process(_pose(2.0, 2.0, 0.0))

    assert second.outcome is UpdateOutcome.UNCHANGED
    assert second.submitted == 0
    assert len(backend.calls) == 2


def test_new_target_after_repeat_is_processed():
    backend = _ScriptedBackend()
    ctrl = RetargetingController(backend)
    ctrl.process(_pose(0.1, 0.0, 0.0))
    ctrl.process(_pose(0.1, 0.0, 0.0))
    ctrl.process(_pose(0.2, 0.0, 0.0))
    assert len(backend.calls) == 2
    assert ctrl.retained_pose == _pose(0.2, 0.0, 0.0)


def test_fallback_yaw_points_at_target_on_y_axis():
    backend = _ScriptedBackend([False, True])
    ctrl = RetargetingController(backend)
    ctrl.process(_pose(0.0, 3.0, 0.0))
    _, _, yaw = q_to_rpy(backend.calls[1].pose.quaternion_array())
    assert abs(yaw - math.pi / 2.0) < 1e-9


@pytest.mark.parametrize(
    "x,y",
    [(0.3, 0.0), (0.0, -0.2), (-0.25, 0.1), (0.1, 0.4), (-0.3, -0.3)],
)
def test_relaxed_goal_ignores_input_orientation(x, y):
    ctrl = RetargetingController(_ScriptedBackend(), fallback_roll=0.4, fallback_pitch=-0.2)
    a = ctrl.relaxed_goal(_pose(x, y, 0.1, q=(1.0, 0.0, 0.0, 0.0)))
    b = ctrl.relaxed_goal(_pose(x, y, 0.1, q=(0.0, 0.0, 0.0, 1.0)))
    assert a == b
    expected = rpy_to_q(0.4, -0.2, math.atan2(y, x))
    np.testing.assert_allclose(a.pose.quaternion_array(), expected, atol=1e-12)


def test_backend_exception_propagates_and_target_is_committed():
    ctrl = RetargetingController(_RaisingBackend())
    target = _pose(0.2, 0.0, 0.1)
    with pytest.raises(ConnectionError):
        ctrl.process(target)
    assert ctrl.retained_pose == target


def test_report_lists_attempts_in_order():
    backend = _ScriptedBackend([False, False])
    ctrl = RetargetingController(backend)
    report = ctrl.process(_pose(0.2, 0.2, 0.0))
    kinds = [goal.kind for goal, _ in report.attempts]
    results = [result.success for _, result in report.attempts]
    assert kinds == [GoalKind.FULL, GoalKind.RELAXED]
    assert results == [False, False]


def test_array_and_list_built_targets_are_processed_once():
    backend = _ScriptedBackend()
    ctrl = RetargetingController(backend)

    first = ctrl.process(
        TargetPose(
            position=np.array([0.2, 0.0, 0.1]),
            quaternion=np.array([1.0, 0.0, 0.0, 0.0]),
        )
    )
    again_list = ctrl.process(TargetPose(position=[0.2, 0.0, 0.1], quaternion=[1.0, 0.0, 0.0, 0.0]))
    again_tuple = ctrl.process(TargetPose(position=(0.2, 0.0, 0.1), quaternion=(1.0, 0.0, 0.0, 0.0)))

    assert first.outcome is UpdateOutcome.PRIMARY_SUCCEEDED
    assert again_list.submitted == 0
    assert again_tuple.submitted == 0
    assert len(backend.calls) == 1
