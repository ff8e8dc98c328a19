"""Change detection between an incoming target and the last one acted on."""

from __future__ import annotations

from .pose import TargetPose


class PoseChangeFilter:
    """Reports whether a target differs from the retained one.

    Comparison is exact per field, with no tolerance. A streaming source that
    repeats the same values bit-for-bit is suppressed; any jitter is not.
    """

    def changed(self, incoming: TargetPose, retained: TargetPose) -> bool:
        return (
            incoming.position != retained.position
            or incoming.quaternion != retained.quaternion
        )
