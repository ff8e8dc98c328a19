"""Scripted target feed replayed from a YAML/JSON file."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Sequence

import yaml

from ..config import _parse_bool
from ..control.pose import TargetPose
from ..control.pose_feed import PoseFeed
from .udp_json import _parse_pose_payload

logger = logging.getLogger(__name__)


def load_pose_script(path: str) -> tuple[list[TargetPose], dict[str, Any]]:
    """Load a pose list plus optional `interval_ms` / `loop` settings.

    Accepted layouts:
      - a list of pose entries
      - a mapping with `poses: [...]` and optional `interval_ms`, `loop`
    Each entry uses the UDP packet schema (position_m + quaternion_wxyz).
    """
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"pose script not found: {p}")
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() == ".json":
            loaded = json.loads(text)
        else:
            loaded = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValueError(f"failed to parse pose script {p}: {exc}") from exc

    options: dict[str, Any] = {}
    if isinstance(loaded, dict):
        entries = loaded.get("poses")
        try:
            if "interval_ms" in loaded:
                options["interval_ms"] = float(loaded["interval_ms"])
            if "loop" in loaded:
                options["loop"] = _parse_bool(loaded["loop"], "loop")
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{p}: invalid script option: {exc}") from exc
    else:
        entries = loaded
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"pose script {p} must contain a non-empty list of poses")

    poses: list[TargetPose] = []
    for i, entry in enumerate(entries):
        pose = _parse_pose_payload(entry) if isinstance(entry, dict) else None
        if pose is None:
            raise ValueError(f"{p}: invalid pose entry #{i}: {entry!r}")
        poses.append(pose)
    return poses, options


class ScriptedPoseFeed(PoseFeed):
    """Replays a fixed pose sequence at a fixed interval, optionally looping."""

    name = "scripted"

    def __init__(self, poses: Sequence[TargetPose], interval_ms: float = 500.0, loop: bool = False):
        if not poses:
            raise ValueError("scripted feed needs at least one pose")
        self.poses = list(poses)
        self.interval_s = max(0.0, float(interval_ms) / 1000.0)
        self.loop = bool(loop)
        self._closed = False

    @classmethod
    def from_file(
        cls, path: str, interval_ms: float = 500.0, loop: bool = False
    ) -> "ScriptedPoseFeed":
        poses, options = load_pose_script(path)
        feed = cls(
            poses,
            interval_ms=float(options.get("interval_ms", interval_ms)),
            loop=options.get("loop", bool(loop)),
        )
        logger.info(
            "[FEED] provider=scripted (file=%s, poses=%d, interval_ms=%.1f, loop=%s)",
            path,
            len(feed.poses),
            feed.interval_s * 1000.0,
            feed.loop,
        )
        return feed

    def run(self, on_pose: Callable[[TargetPose], None]) -> None:
        while not self._closed:
            for pose in self.poses:
                if self._closed:
                    return
                on_pose(pose)
                if self.interval_s > 0.0:
                    time.sleep(self.interval_s)
            if not self.loop:
                break

    def close(self) -> None:
        self._closed = True
