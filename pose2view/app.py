"""
Head-tracked virtual window:
- head position from MediaPipe webcam tracking (or ToyCV sliders)
- pose normalizer: baseline capture, noise gating, Z smoothing,
  distance -> angular size -> display percent
- viewport model: zoom scale + boundary-damped pan offsets
- OpenCV window renders the visible part of the background image
- TUI display reports tracking state
- sensitivities / axis toggles / fps persist via --settings-file

Deps:
  pip install numpy opencv-python mediapipe pyyaml
"""

from __future__ import annotations

import logging

from .config import AppConfig, parse_args
from .control.controller import ViewWindowController
from .control.display_provider import TuiDisplayProvider
from .control.pose_normalizer import PoseNormalizer
from .control.settings_store import SettingsStore
from .control.viewport import ViewportModel
from .pose_providers.toycv_tk import ToyCvTkPoseProvider
from .render_sinks.cv_window import CvWindowRenderSink

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_pose_provider(cfg: AppConfig):
    if cfg.pose_provider == "toycv":
        return ToyCvTkPoseProvider(title="Pose2View - ToyCV Head Position")

    try:
        if cfg.pose_provider == "mediapipe":
            from .pose_providers.mediapipe_cam import MediaPipeCamPoseProvider

            return MediaPipeCamPoseProvider(
                camera_index=cfg.camera_index,
                camera_width=cfg.camera_width,
                camera_height=cfg.camera_height,
                mirror=cfg.camera_mirror,
                task_model_path=cfg.mp_task_model,
                task_model_url=cfg.mp_task_url,
            )
        raise RuntimeError(f"Unsupported pose provider: {cfg.pose_provider}")
    except (ImportError, RuntimeError, OSError):
        logger.exception("[POSE] failed to init requested pose provider")
        logger.warning("[POSE] fallback to ToyCV sliders")
        return ToyCvTkPoseProvider(title="Pose2View - ToyCV Head Position (fallback)")


def build_render_sink(cfg: AppConfig) -> CvWindowRenderSink:
    return CvWindowRenderSink(
        image_path=cfg.image,
        title="Pose2View",
        window_width=cfg.window_width,
        window_height=cfg.window_height,
    )


def build_controller(cfg: AppConfig, pose_provider, render_sink) -> ViewWindowController:
    image_w, image_h = render_sink.image_size()
    display_w, display_h = render_sink.display_size()
    normalizer = PoseNormalizer(display_w, display_h)
    viewport = ViewportModel(image_w, image_h, display_w, display_h)
    display_provider = TuiDisplayProvider(
        pose_provider=pose_provider,
        cli_output=cfg.cli_output,
    )
    sensitivity = cfg.sensitivity()
    logger.info(
        "[TRACK] sensitivity x=%.1f%s y=%.1f%s z=%.4f%s target_fps=%d",
        sensitivity.sensitivity_x,
        "" if sensitivity.enable_x else " (off)",
        sensitivity.sensitivity_y,
        "" if sensitivity.enable_y else " (off)",
        sensitivity.sensitivity_z,
        "" if sensitivity.enable_z else " (off)",
        cfg.target_fps,
    )
    return ViewWindowController(
        pose_provider=pose_provider,
        normalizer=normalizer,
        viewport=viewport,
        render_sink=render_sink,
        display_provider=display_provider,
        sensitivity=sensitivity,
        target_fps=cfg.target_fps,
        display_hz=cfg.display_hz,
    )


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    try:
        render_sink = build_render_sink(cfg)
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    pose_provider = build_pose_provider(cfg)
    controller = build_controller(cfg, pose_provider, render_sink)
    controller.render()

    try:
        pose_provider.run(controller.tick, controller.handle_command)
    finally:
        try:
            if cfg.settings_file:
                SettingsStore(cfg.settings_file).save(controller.sensitivity, controller.target_fps)
        finally:
            render_sink.close()
            pose_provider.close()


if __name__ == "__main__":
    main()
