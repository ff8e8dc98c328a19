"""
Target follower for reduced-DOF arms:
- Pose feed (UDP JSON packets or scripted file) delivers target poses
- Update dispatcher keeps at most `queue_depth` pending targets, one worker
- Retargeting controller: change filter -> full-pose goal -> relaxed goal
- Planning backend plans and executes each goal synchronously

Deps:
  pip install numpy pyyaml
"""

from __future__ import annotations

import logging

from .backends.sim_arm import SimulatedArmBackend
from .config import parse_args
from .control.controller import RetargetingController
from .control.dispatcher import UpdateDispatcher
from .pose_feeds.scripted import ScriptedPoseFeed
from .pose_feeds.udp_json import UdpJsonPoseFeed

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_backend(cfg):
    if cfg.backend == "sim":
        backend = SimulatedArmBackend(
            move_group=cfg.move_group,
            min_reach=cfg.sim_min_reach,
            max_reach=cfg.sim_max_reach,
            min_z=cfg.sim_min_z,
            max_z=cfg.sim_max_z,
            max_speed=cfg.sim_max_speed,
            orientation_tol_deg=cfg.sim_orientation_tol_deg,
            time_scale=cfg.sim_time_scale,
        )
    else:
        raise RuntimeError(f"Unsupported planning backend: {cfg.backend}")

    backend.configure(
        velocity_scaling=cfg.velocity_scaling,
        acceleration_scaling=cfg.acceleration_scaling,
    )
    return backend


def build_pose_feed(cfg):
    if cfg.pose_feed == "udp":
        return UdpJsonPoseFeed(
            host=cfg.feed_host,
            port=cfg.feed_port,
            poll_ms=cfg.feed_poll_ms,
        )
    if cfg.pose_feed == "scripted":
        return ScriptedPoseFeed.from_file(
            cfg.feed_file,
            interval_ms=cfg.feed_interval_ms,
            loop=cfg.feed_loop,
        )
    raise RuntimeError(f"Unsupported pose feed: {cfg.pose_feed}")


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    backend = build_backend(cfg)
    try:
        controller = RetargetingController(
            backend,
            fallback_roll=cfg.fallback_roll,
            fallback_pitch=cfg.fallback_pitch,
        )
        logger.info(
            "[FOLLOW] relaxed orientation roll=%.3f pitch=%.3f (yaw from target position)",
            controller.fallback_roll,
            controller.fallback_pitch,
        )
        dispatcher = UpdateDispatcher(controller.process, depth=cfg.queue_depth)
        feed = build_pose_feed(cfg)
        try:
            dispatcher.start()
            logger.info("[FOLLOW] Initialization successful.")
            try:
                feed.run(dispatcher.submit)
            except KeyboardInterrupt:
                logger.info("[FOLLOW] interrupted, shutting down")
            finally:
                dispatcher.stop(drain=True)
            logger.info(
                "[FOLLOW] done (processed=%d, dropped=%d)",
                dispatcher.processed,
                dispatcher.dropped,
            )
        finally:
            feed.close()
    finally:
        backend.close()


if __name__ == "__main__":
    main()
