"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass(frozen=True)
class AppConfig:
    log_level: str = "info"
    pose_feed: str = "udp"
    feed_host: str = "127.0.0.1"
    feed_port: int = 24601
    feed_poll_ms: int = 10
    feed_file: str = ""
    feed_interval_ms: float = 500.0
    feed_loop: bool = False
    queue_depth: int = 1
    backend: str = "sim"
    move_group: str = "lss_arm"
    velocity_scaling: float = 1.0
    acceleration_scaling: float = 1.0
    fallback_roll: float = 1.57
    fallback_pitch: float = 0.0
    sim_min_reach: float = 0.05
    sim_max_reach: float = 0.45
    sim_min_z: float = -0.05
    sim_max_z: float = 0.5
    sim_max_speed: float = 0.25
    sim_orientation_tol_deg: float = 2.0
    sim_time_scale: float = 1.0


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_BOOL_FIELDS = {"feed_loop"}
_INT_FIELDS = {"feed_port", "feed_poll_ms", "queue_depth"}
_FLOAT_FIELDS = {
    "feed_interval_ms",
    "velocity_scaling",
    "acceleration_scaling",
    "fallback_roll",
    "fallback_pitch",
    "sim_min_reach",
    "sim_max_reach",
    "sim_min_z",
    "sim_max_z",
    "sim_max_speed",
    "sim_orientation_tol_deg",
    "sim_time_scale",
}
_STRING_FIELDS = {
    "log_level",
    "pose_feed",
    "feed_host",
    "feed_file",
    "backend",
    "move_group",
}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"config key '{key}' expects a bool, got {value!r}")


def _coerce_config_value(key: str, value: Any) -> Any:
    try:
        if key in _BOOL_FIELDS:
            return _parse_bool(value, key)
        if key in _INT_FIELDS:
            return int(value)
        if key in _FLOAT_FIELDS:
            return float(value)
        if key == "log_level":
            return "" if value is None else str(value).strip().lower()
        if key in _STRING_FIELDS:
            return "" if value is None else str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for config key '{key}': {value!r}") from exc
    raise ValueError(f"unsupported config key '{key}'")


def _normalize_config_key(raw_key: Any) -> str:
    if not isinstance(raw_key, str):
        raise ValueError(f"config key must be string, got {type(raw_key).__name__}")
    key = raw_key.strip().replace("-", "_")
    if not key:
        raise ValueError("config key cannot be empty")
    return key


def _load_yaml_config(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ValueError(f"--config file not found: {p}")
    if not p.is_file():
        raise ValueError(f"--config must point to a file: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"failed to read --config file {p}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse YAML config {p}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"--config root must be a mapping/object, got {type(loaded).__name__}")

    normalized: dict[str, Any] = {}
    for raw_key, raw_value in loaded.items():
        key = _normalize_config_key(raw_key)
        if key not in _APP_CONFIG_FIELDS:
            raise ValueError(f"unknown config key in {p}: {raw_key!r}")
        normalized[key] = _coerce_config_value(key, raw_value)
    return normalized


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Follow a streamed target pose with a reduced-DOF arm.",
    )
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )

    ap.add_argument(
        "--pose-feed",
        choices=["udp", "scripted"],
        default="udp",
        help="Target source: UDP JSON packets or a scripted pose file.",
    )
    ap.add_argument(
        "--feed-host",
        type=str,
        default="127.0.0.1",
        help="Host for the UDP target pose stream.",
    )
    ap.add_argument(
        "--feed-port",
        type=int,
        default=24601,
        help="Port for the UDP target pose stream.",
    )
    ap.add_argument(
        "--feed-poll-ms",
        type=int,
        default=10,
        help="UDP polling sleep in milliseconds.",
    )
    ap.add_argument(
        "--feed-file",
        type=str,
        default="",
        help="YAML/JSON pose script for --pose-feed scripted.",
    )
    ap.add_argument(
        "--feed-interval-ms",
        type=float,
        default=500.0,
        help="Delay between scripted poses (the script may override it).",
    )
    ap.add_argument("--feed-loop", action="store_true", help="Loop the scripted poses.")
    ap.add_argument(
        "--queue-depth",
        type=int,
        default=1,
        help="Pending target updates kept while a motion executes (oldest dropped).",
    )

    ap.add_argument(
        "--backend",
        choices=["sim"],
        default="sim",
        help="Planning backend.",
    )
    ap.add_argument(
        "--move-group",
        type=str,
        default="lss_arm",
        help="Planning group name passed to the backend.",
    )
    ap.add_argument(
        "--velocity-scaling",
        type=float,
        default=1.0,
        help="Max velocity scaling factor in (0,1].",
    )
    ap.add_argument(
        "--acceleration-scaling",
        type=float,
        default=1.0,
        help="Max acceleration scaling factor in (0,1].",
    )
    ap.add_argument(
        "--fallback-roll",
        type=float,
        default=1.57,
        help="Roll (rad) of the relaxed goal orientation.",
    )
    ap.add_argument(
        "--fallback-pitch",
        type=float,
        default=0.0,
        help="Pitch (rad) of the relaxed goal orientation.",
    )

    ap.add_argument("--sim-min-reach", type=float, default=0.05, help="Sim arm min reach (m).")
    ap.add_argument("--sim-max-reach", type=float, default=0.45, help="Sim arm max reach (m).")
    ap.add_argument("--sim-min-z", type=float, default=-0.05, help="Sim arm min z (m).")
    ap.add_argument("--sim-max-z", type=float, default=0.5, help="Sim arm max z (m).")
    ap.add_argument(
        "--sim-max-speed",
        type=float,
        default=0.25,
        help="Sim arm Cartesian speed (m/s) at velocity scaling 1.0.",
    )
    ap.add_argument(
        "--sim-orientation-tol-deg",
        type=float,
        default=2.0,
        help="Sim arm tolerance for the approach-plane constraint.",
    )
    ap.add_argument(
        "--sim-time-scale",
        type=float,
        default=1.0,
        help="Multiplier on simulated motion time (0 executes instantly).",
    )
    return ap


def validate_config(cfg: AppConfig) -> None:
    if cfg.log_level not in {"debug", "info", "warning", "error"}:
        raise ValueError(f"--log-level must be one of debug|info|warning|error, got {cfg.log_level}")
    if cfg.pose_feed not in {"udp", "scripted"}:
        raise ValueError(f"--pose-feed must be one of udp|scripted, got {cfg.pose_feed}")
    if not cfg.feed_host.strip():
        raise ValueError("--feed-host must be non-empty")
    if not (1 <= cfg.feed_port <= 65535):
        raise ValueError(f"--feed-port must be in [1,65535], got {cfg.feed_port}")
    if cfg.feed_poll_ms <= 0:
        raise ValueError(f"--feed-poll-ms must be > 0, got {cfg.feed_poll_ms}")
    if cfg.pose_feed == "scripted" and not cfg.feed_file.strip():
        raise ValueError("--feed-file must be provided for --pose-feed scripted")
    if cfg.feed_interval_ms < 0.0:
        raise ValueError(f"--feed-interval-ms must be >= 0, got {cfg.feed_interval_ms}")
    if cfg.queue_depth < 1:
        raise ValueError(f"--queue-depth must be >= 1, got {cfg.queue_depth}")
    if cfg.backend != "sim":
        raise ValueError(f"--backend must be sim, got {cfg.backend}")
    if not cfg.move_group.strip():
        raise ValueError("--move-group must be non-empty")
    if not (0.0 < cfg.velocity_scaling <= 1.0):
        raise ValueError(f"--velocity-scaling must be in (0,1], got {cfg.velocity_scaling}")
    if not (0.0 < cfg.acceleration_scaling <= 1.0):
        raise ValueError(
            f"--acceleration-scaling must be in (0,1], got {cfg.acceleration_scaling}"
        )
    if not math.isfinite(cfg.fallback_roll) or not math.isfinite(cfg.fallback_pitch):
        raise ValueError("--fallback-roll/--fallback-pitch must be finite numbers")
    if cfg.sim_min_reach < 0.0:
        raise ValueError(f"--sim-min-reach must be >= 0, got {cfg.sim_min_reach}")
    if cfg.sim_max_reach <= cfg.sim_min_reach:
        raise ValueError(
            f"--sim-max-reach must be > --sim-min-reach, got {cfg.sim_max_reach}"
        )
    if cfg.sim_max_z <= cfg.sim_min_z:
        raise ValueError(f"--sim-max-z must be > --sim-min-z, got {cfg.sim_max_z}")
    if cfg.sim_max_speed <= 0.0:
        raise ValueError(f"--sim-max-speed must be > 0, got {cfg.sim_max_speed}")
    if cfg.sim_orientation_tol_deg < 0.0:
        raise ValueError(
            f"--sim-orientation-tol-deg must be >= 0, got {cfg.sim_orientation_tol_deg}"
        )
    if cfg.sim_time_scale < 0.0:
        raise ValueError(f"--sim-time-scale must be >= 0, got {cfg.sim_time_scale}")


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    yaml_cfg: dict[str, Any] = {}
    yaml_error: Optional[str] = None
    if bootstrap_ns.config:
        try:
            yaml_cfg = _load_yaml_config(bootstrap_ns.config)
        except ValueError as exc:
            yaml_error = str(exc)

    ap = build_arg_parser()
    if yaml_error is not None:
        ap.error(yaml_error)
    if yaml_cfg:
        ap.set_defaults(**yaml_cfg)
    args = ap.parse_args(argv)

    cfg = AppConfig(**{name: getattr(args, name) for name in _APP_CONFIG_FIELDS})
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
