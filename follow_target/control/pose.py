"""Pose data structures for end-effector targets."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class TargetPose:
    """End-effector target in the robot base frame.

    position:
      3D translation (x, y, z), meters.
    quaternion:
      Orientation quaternion (w, x, y, z).

    Equality is exact on both tuples.
    """

    position: tuple[float, float, float]
    quaternion: tuple[float, float, float, float]

    def __post_init__(self) -> None:
        # Lists and numpy arrays are stored as float tuples so == stays structural.
        p = np.asarray(self.position, dtype=np.float64).reshape(-1)
        q = np.asarray(self.quaternion, dtype=np.float64).reshape(-1)
        if p.size != 3:
            raise ValueError(f"position expects 3 values, got {p.size}")
        if q.size != 4:
            raise ValueError(f"quaternion expects 4 values, got {q.size}")
        object.__setattr__(self, "position", tuple(float(v) for v in p))
        object.__setattr__(self, "quaternion", tuple(float(v) for v in q))

    @classmethod
    def from_arrays(cls, position, quaternion) -> "TargetPose":
        return cls(position=position, quaternion=quaternion)

    def position_array(self) -> np.ndarray:
        return np.array(self.position, dtype=np.float64)

    def quaternion_array(self) -> np.ndarray:
        return np.array(self.quaternion, dtype=np.float64)

    def with_quaternion(self, quaternion) -> "TargetPose":
        return TargetPose.from_arrays(self.position, quaternion)


def identity_pose() -> TargetPose:
    return TargetPose(position=(0.0, 0.0, 0.0), quaternion=(1.0, 0.0, 0.0, 0.0))


def format_pose(pose: TargetPose) -> str:
    p = pose.position
    q = pose.quaternion
    return (
        f"xyz=[{p[0]: .3f}, {p[1]: .3f}, {p[2]: .3f}] "
        f"q=[{q[0]: .4f}, {q[1]: .4f}, {q[2]: .4f}, {q[3]: .4f}]"
    )
