"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .control.sensitivity import (
    DEFAULT_SENSITIVITY_X,
    DEFAULT_SENSITIVITY_Y,
    DEFAULT_SENSITIVITY_Z,
    SensitivityConfig,
)
from .control.settings_store import SettingsStore

TARGET_FPS_CHOICES = (15, 30)


@dataclass(frozen=True)
class AppConfig:
    image: str
    pose_provider: str = "mediapipe"
    camera_index: int = 0
    camera_width: int = 1280
    camera_height: int = 720
    camera_mirror: bool = True
    sensitivity_x: float = DEFAULT_SENSITIVITY_X
    sensitivity_y: float = DEFAULT_SENSITIVITY_Y
    sensitivity_z: float = DEFAULT_SENSITIVITY_Z
    enable_x: bool = True
    enable_y: bool = True
    enable_z: bool = True
    target_fps: int = 30
    window_width: int = 1280
    window_height: int = 720
    settings_file: str = ""
    display_hz: float = 5.0
    cli_output: str = "live"
    log_level: str = "info"
    mp_task_model: str = "assets/models/face_landmarker.task"
    mp_task_url: str = (
        "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
        "face_landmarker/float16/latest/face_landmarker.task"
    )

    def sensitivity(self) -> SensitivityConfig:
        return SensitivityConfig(
            sensitivity_x=self.sensitivity_x,
            sensitivity_y=self.sensitivity_y,
            sensitivity_z=self.sensitivity_z,
            enable_x=self.enable_x,
            enable_y=self.enable_y,
            enable_z=self.enable_z,
        )


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_BOOL_FIELDS = {
    "camera_mirror",
    "enable_x",
    "enable_y",
    "enable_z",
}
_INT_FIELDS = {
    "camera_index",
    "camera_width",
    "camera_height",
    "target_fps",
    "window_width",
    "window_height",
}
_FLOAT_FIELDS = {
    "sensitivity_x",
    "sensitivity_y",
    "sensitivity_z",
    "display_hz",
}
_STRING_FIELDS = {
    "image",
    "pose_provider",
    "settings_file",
    "cli_output",
    "log_level",
    "mp_task_model",
    "mp_task_url",
}
# CLI switches that store the negation of a config field.
_NEGATED_FLAGS = {
    "camera_mirror": "no_camera_mirror",
    "enable_x": "disable_x",
    "enable_y": "disable_y",
    "enable_z": "disable_z",
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


def _load_persisted_settings(path: str) -> dict[str, Any]:
    return {
        key: _coerce_config_value(key, value)
        for key, value in SettingsStore(path).load().items()
    }


def _config_to_argparse_defaults(cfg: dict[str, Any]) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for key, value in cfg.items():
        if key in _NEGATED_FLAGS:
            defaults[_NEGATED_FLAGS[key]] = not bool(value)
        else:
            defaults[key] = value
    return defaults


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pose2view",
        description="Head-tracked virtual window over a background image.",
    )
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument("--image", required=False, default=None, help="Background image path.")
    ap.add_argument(
        "--pose-provider",
        choices=["mediapipe", "toycv"],
        default="mediapipe",
        help="Head pose backend: webcam MediaPipe or ToyCV sliders.",
    )
    ap.add_argument(
        "--camera-index",
        type=int,
        default=0,
        help="OpenCV camera index for --pose-provider mediapipe.",
    )
    ap.add_argument(
        "--camera-width",
        type=int,
        default=1280,
        help="Requested camera frame width.",
    )
    ap.add_argument(
        "--camera-height",
        type=int,
        default=720,
        help="Requested camera frame height.",
    )
    ap.add_argument(
        "--no-camera-mirror",
        action="store_true",
        help="Do not mirror webcam frames before detection.",
    )
    ap.add_argument(
        "--sensitivity-x",
        type=float,
        default=DEFAULT_SENSITIVITY_X,
        help="Horizontal pan gain (pixels per unit of head movement).",
    )
    ap.add_argument(
        "--sensitivity-y",
        type=float,
        default=DEFAULT_SENSITIVITY_Y,
        help="Vertical pan gain (pixels per unit of head movement).",
    )
    ap.add_argument(
        "--sensitivity-z",
        type=float,
        default=DEFAULT_SENSITIVITY_Z,
        help="Zoom gain (relative distance change per unit of z movement).",
    )
    ap.add_argument("--disable-x", action="store_true", help="Ignore horizontal head movement.")
    ap.add_argument("--disable-y", action="store_true", help="Ignore vertical head movement.")
    ap.add_argument("--disable-z", action="store_true", help="Ignore distance changes (no zoom).")
    ap.add_argument(
        "--target-fps",
        type=int,
        choices=list(TARGET_FPS_CHOICES),
        default=30,
        help="Processing/render rate cap.",
    )
    ap.add_argument("--window-width", type=int, default=1280, help="Render window width.")
    ap.add_argument("--window-height", type=int, default=720, help="Render window height.")
    ap.add_argument(
        "--settings-file",
        type=str,
        default="",
        help=(
            "YAML file persisting sensitivities, axis toggles and target fps "
            "across sessions (empty disables)."
        ),
    )
    ap.add_argument(
        "--display-hz",
        type=float,
        default=5.0,
        help="Status display refresh rate in Hz (0 disables display updates).",
    )
    ap.add_argument(
        "--cli-output",
        choices=["live", "scroll"],
        default="live",
        help="TUI output mode: in-place live panel or scrolling logs.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )
    ap.add_argument(
        "--mp-task-model",
        type=str,
        default="assets/models/face_landmarker.task",
        help="Path to MediaPipe FaceLandmarker .task model.",
    )
    ap.add_argument(
        "--mp-task-url",
        type=str,
        default=(
            "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
            "face_landmarker/float16/latest/face_landmarker.task"
        ),
        help="Download URL for .task model when local file is missing.",
    )

    return ap


def validate_config(cfg: AppConfig) -> None:
    if not str(cfg.image).strip():
        raise ValueError("--image must be provided (CLI or --config)")
    if cfg.pose_provider not in {"mediapipe", "toycv"}:
        raise ValueError(
            f"--pose-provider must be one of mediapipe|toycv, got {cfg.pose_provider}"
        )
    if cfg.camera_index < 0:
        raise ValueError(f"--camera-index must be >= 0, got {cfg.camera_index}")
    if cfg.camera_width < 0:
        raise ValueError(f"--camera-width must be >= 0, got {cfg.camera_width}")
    if cfg.camera_height < 0:
        raise ValueError(f"--camera-height must be >= 0, got {cfg.camera_height}")
    for name in ("sensitivity_x", "sensitivity_y", "sensitivity_z"):
        value = getattr(cfg, name)
        if not math.isfinite(value) or value <= 0.0:
            flag = "--" + name.replace("_", "-")
            raise ValueError(f"{flag} must be a finite number > 0, got {value}")
    if cfg.target_fps not in TARGET_FPS_CHOICES:
        raise ValueError(
            f"--target-fps must be one of {'|'.join(map(str, TARGET_FPS_CHOICES))}, "
            f"got {cfg.target_fps}"
        )
    if cfg.window_width <= 0 or cfg.window_height <= 0:
        raise ValueError(
            f"--window-width/--window-height must be > 0, got {cfg.window_width}x{cfg.window_height}"
        )
    if cfg.display_hz < 0.0:
        raise ValueError(f"--display-hz must be >= 0, got {cfg.display_hz}")
    if cfg.cli_output not in {"live", "scroll"}:
        raise ValueError(f"--cli-output must be live|scroll, got {cfg.cli_output}")


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap.add_argument("--settings-file", type=str, default=None)
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    # Layering: built-in < settings store < YAML config < CLI.
    layered: dict[str, Any] = {}
    load_error: Optional[str] = None
    try:
        yaml_cfg = _load_yaml_config(bootstrap_ns.config) if bootstrap_ns.config else {}
        settings_file = bootstrap_ns.settings_file
        if settings_file is None:
            settings_file = yaml_cfg.get("settings_file", "")
        if settings_file:
            layered.update(_load_persisted_settings(settings_file))
        layered.update(yaml_cfg)
    except ValueError as exc:
        load_error = str(exc)

    ap = build_arg_parser()
    if load_error is not None:
        ap.error(load_error)
    if layered:
        ap.set_defaults(**_config_to_argparse_defaults(layered))
    args = ap.parse_args(argv)

    cfg = AppConfig(
        image=str(args.image or ""),
        pose_provider=args.pose_provider,
        camera_index=args.camera_index,
        camera_width=args.camera_width,
        camera_height=args.camera_height,
        camera_mirror=not args.no_camera_mirror,
        sensitivity_x=float(args.sensitivity_x),
        sensitivity_y=float(args.sensitivity_y),
        sensitivity_z=float(args.sensitivity_z),
        enable_x=not args.disable_x,
        enable_y=not args.disable_y,
        enable_z=not args.disable_z,
        target_fps=int(args.target_fps),
        window_width=args.window_width,
        window_height=args.window_height,
        settings_file=str(args.settings_file or ""),
        display_hz=float(args.display_hz),
        cli_output=args.cli_output,
        log_level=args.log_level,
        mp_task_model=args.mp_task_model,
        mp_task_url=args.mp_task_url,
    )
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
