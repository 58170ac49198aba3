import math

import numpy as np
import pytest

from pose2view.control.controller import ViewWindowController
from pose2view.control.display_provider import DisplayFrame, DisplayProvider
from pose2view.control.pose import PoseSample, make_sample
from pose2view.control.pose_normalizer import PoseNormalizer
from pose2view.control.pose_provider import COMMAND_RECENTER, COMMAND_RESET, PoseProvider
from pose2view.control.render_sink import NullRenderSink
from pose2view.control.sensitivity import SensitivityConfig
from pose2view.control.viewport import ViewportModel


class _DummyPoseProvider(PoseProvider):
    def __init__(self):
        self.sample = None

    def get_sample(self):
        return self.sample

    def run(self, on_tick, on_command=None):
        raise NotImplementedError


class _RecordingDisplay(DisplayProvider):
    def __init__(self):
        self.frames: list[DisplayFrame] = []

    def update(self, frame: DisplayFrame) -> None:
        self.frames.append(frame)


def _controller(target_fps: int = 30, display_hz: float = 0.0, sensitivity=None):
    pose = _DummyPoseProvider()
    sink = NullRenderSink(2000, 1000, 1920, 1080)
    display = _RecordingDisplay()
    ctrl = ViewWindowController(
        pose_provider=pose,
        normalizer=PoseNormalizer(1920, 1080),
        viewport=ViewportModel(2000, 1000, 1920, 1080),
        render_sink=sink,
        display_provider=display,
        sensitivity=sensitivity or SensitivityConfig(sensitivity_x=1000.0, sensitivity_y=1000.0),
        target_fps=target_fps,
        display_hz=display_hz,
        clock=lambda: 0.0,
    )
    return ctrl, pose, sink, display


def test_ticks_faster_than_target_fps_are_skipped():
    ctrl, pose, sink, _ = _controller(target_fps=30)
    pose.sample = make_sample(0.0, 0.0, -50.0)
    assert ctrl.tick(0.0) is True
    assert ctrl.tick(0.01) is False
    assert ctrl.tick(0.04) is True
    assert ctrl.frames_processed == 2
    assert ctrl.frames_skipped == 1
    assert sink.render_count == 2


def test_no_detection_does_not_render_or_move_viewport():
    ctrl, pose, sink, _ = _controller()
    assert ctrl.tick(0.0) is True
    assert ctrl.last_result is None
    assert sink.render_count == 0
    assert ctrl.viewport.scale == 2.0


def test_tracked_sample_updates_viewport():
    ctrl, pose, sink, _ = _controller()
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.5, 0.5, 0.0))
    ctrl.tick(0.0)
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.6, 0.45, 0.0))
    ctrl.tick(1.0)
    assert ctrl.viewport.offset_x == pytest.approx(100.0)
    assert ctrl.viewport.offset_y == pytest.approx(50.0)
    assert sink.last_rect.x == pytest.approx(600.0)


def test_recenter_keeps_zoom_and_zeroes_pan():
    ctrl, pose, _, _ = _controller()
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.5, 0.5, 0.0))
    ctrl.tick(0.0)
    pose.sample = make_sample(0.0, 0.0, -20.0, stable_point=(0.6, 0.5, 0.0))
    for i in range(1, 40):
        ctrl.tick(float(i))
    zoomed_percent = ctrl.viewport.display_percent
    assert zoomed_percent > 60.0
    assert ctrl.viewport.offset_x != 0.0

    ctrl.handle_command(COMMAND_RECENTER)
    ctrl.tick(100.0)
    assert ctrl.viewport.offset_x == 0.0
    assert ctrl.viewport.display_percent == pytest.approx(zoomed_percent, abs=0.5)


def test_reset_restores_viewport_and_baseline():
    ctrl, pose, sink, _ = _controller()
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.5, 0.5, 0.0))
    ctrl.tick(0.0)
    pose.sample = make_sample(0.0, 0.0, -20.0, stable_point=(0.6, 0.5, 0.0))
    for i in range(1, 10):
        ctrl.tick(float(i))

    ctrl.handle_command(COMMAND_RESET)
    assert ctrl.viewport.scale == 2.0
    assert ctrl.viewport.offset_x == 0.0
    assert ctrl.normalizer.baseline.base_z is None
    assert sink.last_rect.x == pytest.approx(500.0)


def test_resize_reaches_normalizer_and_viewport():
    ctrl, _, sink, _ = _controller()
    ctrl.handle_resize(800, 600)
    assert ctrl.normalizer.display_width == 800
    assert ctrl.viewport.geometry.display_height == 600
    assert sink.render_count == 1


def test_display_updates_are_throttled():
    ctrl, pose, _, display = _controller(target_fps=30, display_hz=5.0)
    pose.sample = make_sample(0.0, 0.0, -50.0)
    for t in (0.0, 0.1, 0.25):
        ctrl.tick(t)
    assert len(display.frames) == 2
    assert display.frames[0].tracked is True

    pose.sample = None
    ctrl.tick(0.5)
    assert display.frames[-1].tracked is False
    assert display.frames[-1].distance is None


def test_set_target_fps_changes_pacing():
    ctrl, pose, _, _ = _controller(target_fps=30)
    ctrl.set_target_fps(15)
    pose.sample = make_sample(0.0, 0.0, -50.0)
    assert ctrl.tick(0.0) is True
    assert ctrl.tick(0.05) is False
    assert ctrl.tick(0.07) is True


class _TkStylePoseProvider(_DummyPoseProvider):
    """Drives ticks from its own mainloop and never touches OpenCV."""

    def run(self, on_tick, on_command=None):
        for _ in range(3):
            on_tick()


class _CvLoopPoseProvider(_DummyPoseProvider):
    pumps_window_events = True


def test_sink_is_pumped_when_provider_has_no_cv_loop():
    pose = _TkStylePoseProvider()
    sink = NullRenderSink(2000, 1000, 1920, 1080)
    clock = iter([0.0, 1.0, 2.0])
    ctrl = ViewWindowController(
        pose_provider=pose,
        normalizer=PoseNormalizer(1920, 1080),
        viewport=ViewportModel(2000, 1000, 1920, 1080),
        render_sink=sink,
        display_provider=None,
        sensitivity=SensitivityConfig(),
        clock=lambda: next(clock),
    )
    pose.run(ctrl.tick)
    assert ctrl.frames_processed == 3
    assert sink.pump_count == 3
    assert sink.render_count == 0


def test_sink_is_not_pumped_when_provider_runs_cv_loop():
    ctrl, _, sink, _ = _controller()
    ctrl.pose_provider = _CvLoopPoseProvider()
    ctrl.tick(0.0)
    ctrl.tick(1.0)
    assert sink.pump_count == 0


def test_skipped_ticks_do_not_pump():
    ctrl, _, sink, _ = _controller(target_fps=30)
    ctrl.tick(0.0)
    ctrl.tick(0.01)
    assert sink.pump_count == 1


def test_set_sensitivity_applies_on_next_tick():
    ctrl, pose, _, _ = _controller()
    pose.sample = make_sample(0.0, 0.0, -50.0)
    ctrl.tick(0.0)
    pose.sample = make_sample(0.1, 0.0, -50.0)
    ctrl.tick(1.0)
    assert ctrl.last_result.pan_offset_x == pytest.approx(100.0)

    ctrl.set_sensitivity(SensitivityConfig(sensitivity_x=1000.0, enable_x=False))
    ctrl.tick(2.0)
    assert ctrl.last_result.pan_offset_x == 0.0
    assert ctrl.viewport.offset_x == 0.0


def test_non_finite_frame_holds_viewport():
    ctrl, pose, sink, _ = _controller()
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.5, 0.5, 0.0))
    ctrl.tick(0.0)
    pose.sample = make_sample(0.0, 0.0, -50.0, stable_point=(0.6, 0.45, 0.0))
    ctrl.tick(1.0)
    held = (ctrl.viewport.scale, ctrl.viewport.offset_x, ctrl.viewport.offset_y)
    renders = sink.render_count

    pose.sample = PoseSample(translation=np.array([math.nan, 0.0, -50.0], dtype=np.float64))
    assert ctrl.tick(2.0) is True
    assert ctrl.last_result is None
    assert (ctrl.viewport.scale, ctrl.viewport.offset_x, ctrl.viewport.offset_y) == held
    assert sink.render_count == renders
