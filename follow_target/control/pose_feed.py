"""Pose feed interfaces for streamed end-effector targets."""

from __future__ import annotations

from typing import Callable

from .pose import TargetPose


class PoseFeed:
    """Base interface for target pose feeds.

    Implementations may be network streams (UDP JSON) or scripted replays.
    """

    name: str = "feed"

    def run(self, on_pose: Callable[[TargetPose], None]) -> None:
        """Run the feed loop and call on_pose for each delivered target.

        Returns when the feed is exhausted or closed.
        """
        raise NotImplementedError

    def close(self) -> None:
        pass
