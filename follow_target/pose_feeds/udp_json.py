"""Target pose feed via UDP JSON packets.

The feed does not own any tracking or teleoperation logic. Whatever produces
targets (a perception node, a teleop bridge, a test script) sends one JSON
packet per pose to a local UDP port.
"""

from __future__ import annotations

import json
import logging
import socket
import time
from typing import Callable, Optional

import numpy as np

from ..config import _parse_bool
from ..control.pose import TargetPose
from ..control.pose_feed import PoseFeed

logger = logging.getLogger(__name__)


def _parse_pose_payload(payload: dict) -> Optional[TargetPose]:
    try:
        tracked = _parse_bool(payload.get("tracked", True), "tracked")
    except ValueError:
        return None
    if not tracked:
        return None
    position = payload.get("position_m", payload.get("position"))
    quaternion = payload.get("quaternion_wxyz", payload.get("quaternion"))
    xyzw = payload.get("quaternion_xyzw") if quaternion is None else None
    if position is None or (quaternion is None and xyzw is None):
        return None

    try:
        p = np.asarray(position, dtype=np.float64).reshape(-1)
        if quaternion is not None:
            q = np.asarray(quaternion, dtype=np.float64).reshape(-1)
        else:
            q = np.roll(np.asarray(xyzw, dtype=np.float64).reshape(-1), 1)
    except (TypeError, ValueError):
        return None
    if p.size != 3 or q.size != 4:
        return None
    if not np.isfinite(p).all() or not np.isfinite(q).all():
        return None

    # Values pass through verbatim so repeated packets compare equal.
    return TargetPose.from_arrays(p, q)


def _parse_pose_packet(data: bytes) -> Optional[TargetPose]:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return _parse_pose_payload(payload)


class _UdpPoseReceiver:
    def __init__(self, host: str, port: int):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((host, int(port)))
        self.sock.setblocking(False)

    def recv_latest(self) -> Optional[TargetPose]:
        latest = None
        while True:
            try:
                data, _ = self.sock.recvfrom(65535)
            except BlockingIOError:
                break
            except OSError:
                break
            parsed = _parse_pose_packet(data)
            if parsed is not None:
                latest = parsed
        return latest

    def close(self) -> None:
        self.sock.close()


class UdpJsonPoseFeed(PoseFeed):
    """Target feed fed by external JSON packets over UDP.

    Expected JSON packet schema:
    {
      "position_m": [x, y, z],
      "quaternion_wxyz": [w, x, y, z]
    }

    "quaternion_xyzw" is also accepted. Each poll drains the socket and only the
    newest valid packet is delivered.
    """

    name = "udp"

    def __init__(self, host: str = "127.0.0.1", port: int = 24601, poll_ms: int = 10):
        self.host = str(host)
        self.port = int(port)
        self.poll_s = max(0.001, float(poll_ms) / 1000.0)

        self._receiver = _UdpPoseReceiver(self.host, self.port)
        self._closed = False
        self._last_warn_t = 0.0
        self._last_recv_t = 0.0
        self._recv_count = 0

        logger.info(
            "[FEED] provider=udp-json (host=%s, port=%s, poll_ms=%.1f)",
            self.host,
            self.port,
            self.poll_s * 1000.0,
        )

    @property
    def bound_port(self) -> int:
        return int(self._receiver.sock.getsockname()[1])

    def poll_once(self) -> Optional[TargetPose]:
        sample = self._receiver.recv_latest()
        if sample is None:
            now = time.time()
            if (now - self._last_recv_t) > 2.0 and (now - self._last_warn_t) > 2.0:
                logger.info("[FEED] waiting for target packets on %s:%s", self.host, self.port)
                self._last_warn_t = now
            return None

        self._last_recv_t = time.time()
        self._recv_count += 1
        if self._recv_count == 1:
            logger.info("[FEED] first target packet received on %s:%s", self.host, self.port)
        return sample

    def run(self, on_pose: Callable[[TargetPose], None]) -> None:
        while not self._closed:
            sample = self.poll_once()
            if sample is not None:
                on_pose(sample)
            time.sleep(self.poll_s)
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._receiver.close()
        except OSError:
            pass
