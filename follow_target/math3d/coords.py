"""Base-frame helpers for the manipulator workspace."""

from __future__ import annotations

import math

import numpy as np


def base_yaw_rad(position) -> float:
    """
    Heading of a point as seen from the robot base origin.

    Base axes are (x forward, y left, z up), so the yaw is
      atan2(y, x)  => 0=straight ahead, +pi/2=left
    The z component is ignored (projection onto the base XY-plane).
    """
    return math.atan2(float(position[1]), float(position[0]))


def horizontal_distance(position) -> float:
    x, y = float(position[0]), float(position[1])
    return math.sqrt(x * x + y * y)


def approach_plane_error_rad(approach: np.ndarray, position) -> float:
    """Angle between an approach vector and the vertical plane through the base and a point.

    Returns 0.0 when the point lies on the base z axis or the approach is vertical,
    since every vertical plane contains them.
    """
    r = horizontal_distance(position)
    a = np.asarray(approach, dtype=np.float64).reshape(3)
    n = float(np.linalg.norm(a))
    if r < 1e-9 or n < 1e-12:
        return 0.0
    # Plane normal is the horizontal unit vector perpendicular to the target heading.
    normal = np.array([-float(position[1]) / r, float(position[0]) / r, 0.0])
    s = abs(float(np.dot(a, normal))) / n
    return math.asin(min(1.0, s))
