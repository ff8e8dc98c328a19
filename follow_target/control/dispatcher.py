"""Single-worker update dispatch with a bounded keep-last queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Optional

from .pose import TargetPose

logger = logging.getLogger(__name__)


class UpdateDispatcher:
    """
    Feed thread -> submit() -> pending queue (depth N) -> one worker -> handler.

    - Poses are handled in arrival order, one at a time, each to completion.
    - When `depth` poses are already pending the oldest pending one is dropped.
      The pose being handled is never preempted.
    - A handler exception stops the worker and is re-raised by stop()/join().
    """

    def __init__(self, handler: Callable[[TargetPose], object], depth: int = 1):
        if depth < 1:
            raise ValueError(f"depth must be >= 1, got {depth}")
        self.handler = handler
        self.depth = int(depth)

        self._pending: deque[TargetPose] = deque()
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._stopping = False
        self._drain = True
        self._busy = False
        self._error: Optional[BaseException] = None

        self.dropped = 0
        self.processed = 0

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._worker_loop, name="update-dispatcher", daemon=True
        )
        self._thread.start()

    def submit(self, pose: TargetPose) -> None:
        with self._cond:
            if self._stopping:
                raise RuntimeError("dispatcher is stopped")
            if len(self._pending) >= self.depth:
                self._pending.popleft()
                self.dropped += 1
                logger.debug("[FEED] queue full, dropped stale target (total=%d)", self.dropped)
            self._pending.append(pose)
            self._cond.notify_all()

    def _next(self) -> Optional[TargetPose]:
        with self._cond:
            while not self._pending and not self._stopping:
                self._cond.wait()
            if not self._pending or (self._stopping and not self._drain):
                return None
            self._busy = True
            return self._pending.popleft()

    def _worker_loop(self) -> None:
        while True:
            pose = self._next()
            if pose is None:
                return
            try:
                self.handler(pose)
            except Exception as exc:
                logger.exception("[FOLLOW] update handler failed, stopping dispatcher")
                with self._cond:
                    self._error = exc
                    self._stopping = True
                    self._busy = False
                    self._pending.clear()
                    self._cond.notify_all()
                return
            with self._cond:
                self._busy = False
                self.processed += 1
                self._cond.notify_all()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until nothing is pending or being handled. False on timeout."""
        with self._cond:
            return self._cond.wait_for(
                lambda: (not self._pending and not self._busy) or self._error is not None,
                timeout=timeout,
            )

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> None:
        with self._cond:
            self._stopping = True
            self._drain = bool(drain)
            if not drain:
                self._pending.clear()
            self._cond.notify_all()
        self.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
        if self._error is not None:
            raise self._error
