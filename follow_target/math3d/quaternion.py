"""Quaternion utilities for right-handed robot base coordinates.

Quaternions are stored as [w, x, y, z].
"""

from __future__ import annotations

import math

import numpy as np


def q_normalize(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n = float(np.linalg.norm(q))
    if n < 1e-12:
        return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
    return q / n


def q_conj(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def q_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def q_rotate_vec(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector v by unit quaternion q: v' = q*(0,v)*q^{-1}."""
    q = q_normalize(q)
    vq = np.array([0.0, float(v[0]), float(v[1]), float(v[2])], dtype=np.float64)
    return q_mul(q_mul(q, vq), q_conj(q))[1:]


def axis_angle_to_q(axis: np.ndarray, angle_rad: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / (np.linalg.norm(axis) + 1e-12)
    s = math.sin(angle_rad / 2.0)
    return q_normalize(
        np.array(
            [math.cos(angle_rad / 2.0), axis[0] * s, axis[1] * s, axis[2] * s],
            dtype=np.float64,
        )
    )


def rpy_to_q(roll: float, pitch: float, yaw: float) -> np.ndarray:
    """
    Fixed-axis roll/pitch/yaw in radians (same as tf2 setRPY):
      roll around base +x, then pitch around base +y, then yaw around base +z
    Composition: q = q_yaw * q_pitch * q_roll
    """
    q_roll = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), roll)
    q_pitch = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), pitch)
    q_yaw = axis_angle_to_q(np.array([0.0, 0.0, 1.0]), yaw)
    return q_normalize(q_mul(q_mul(q_yaw, q_pitch), q_roll))


def q_to_rpy(q: np.ndarray) -> tuple[float, float, float]:
    """Inverse of rpy_to_q. Pitch is clamped to [-pi/2, pi/2]."""
    w, x, y, z = q_normalize(q)
    roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    sinp = max(-1.0, min(1.0, 2.0 * (w * y - z * x)))
    pitch = math.asin(sinp)
    yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return roll, pitch, yaw
