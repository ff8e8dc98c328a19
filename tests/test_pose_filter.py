import numpy as np
import pytest

from follow_target.control.pose import TargetPose, identity_pose
from follow_target.control.pose_filter import PoseChangeFilter


def _pose(x: float, y: float, z: float, q=(1.0, 0.0, 0.0, 0.0)) -> TargetPose:
    return TargetPose(position=(x, y, z), quaternion=q)


def test_identical_pose_is_unchanged():
    f = PoseChangeFilter()
    assert f.changed(_pose(0.1, 0.2, 0.3), _pose(0.1, 0.2, 0.3)) is False


def test_first_target_is_changed_against_identity():
    f = PoseChangeFilter()
    assert f.changed(_pose(1.0, 0.0, 0.0), identity_pose()) is True


def test_orientation_only_change_is_detected():
    f = PoseChangeFilter()
    a = _pose(0.1, 0.2, 0.3)
    b = _pose(0.1, 0.2, 0.3, q=(0.0, 1.0, 0.0, 0.0))
    assert f.changed(b, a) is True


def test_no_tolerance_is_applied():
    f = PoseChangeFilter()
    assert f.changed(_pose(0.1 + 1e-15, 0.2, 0.3), _pose(0.1, 0.2, 0.3)) is True


def test_identity_target_matches_initial_pose():
    f = PoseChangeFilter()
    assert f.changed(identity_pose(), identity_pose()) is False


def test_from_arrays_gives_structural_equality():
    a = TargetPose.from_arrays([0.1, 0.2, 0.3], [1.0, 0.0, 0.0, 0.0])
    b = TargetPose.from_arrays((0.1, 0.2, 0.3), (1.0, 0.0, 0.0, 0.0))
    assert a == b
    assert PoseChangeFilter().changed(a, b) is False


def test_fields_are_stored_as_float_tuples():
    pose = TargetPose(position=np.array([1, 2, 3]), quaternion=[1, 0, 0, 0])
    assert pose.position == (1.0, 2.0, 3.0)
    assert pose.quaternion == (1.0, 0.0, 0.0, 0.0)
    assert isinstance(pose.position, tuple)


def test_wrong_vector_length_is_rejected():
    with pytest.raises(ValueError, match="position"):
        TargetPose(position=[0.0, 1.0], quaternion=(1.0, 0.0, 0.0, 0.0))
    with pytest.raises(ValueError, match="quaternion"):
        TargetPose(position=(0.0, 1.0, 2.0), quaternion=[1.0, 0.0, 0.0])
