"""Control plane for mapping head pose -> viewport -> render."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .display_provider import DisplayFrame, DisplayProvider
from .pose_normalizer import PoseNormalizer, TrackingResult
from .pose_provider import COMMAND_RECENTER, COMMAND_RESET, PoseProvider
from .render_sink import RenderSink
from .sensitivity import SensitivityConfig
from .viewport import ViewportModel

logger = logging.getLogger(__name__)


class ViewWindowController:
    """Runs one [sample -> normalize -> viewport -> render] cycle per accepted tick.

    Ticks arriving sooner than ``1 / target_fps`` after the last accepted one
    are skipped without sampling or rendering.
    """

    def __init__(
        self,
        pose_provider: PoseProvider,
        normalizer: PoseNormalizer,
        viewport: ViewportModel,
        render_sink: RenderSink,
        display_provider: DisplayProvider | None,
        sensitivity: SensitivityConfig,
        target_fps: int = 30,
        display_hz: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pose_provider = pose_provider
        self.normalizer = normalizer
        self.viewport = viewport
        self.render_sink = render_sink
        self.display_provider = display_provider
        self.sensitivity = sensitivity
        self.clock = clock

        self.frame_interval = 0.0
        self.set_target_fps(target_fps)
        self.display_interval = (1.0 / display_hz) if display_hz > 0.0 else 0.0
        self.last_frame_t: float | None = None
        self.last_display_t: float | None = None
        self.last_result: TrackingResult | None = None
        self.frames_processed = 0
        self.frames_skipped = 0

    def set_target_fps(self, target_fps: int) -> None:
        self.target_fps = int(target_fps)
        self.frame_interval = (1.0 / self.target_fps) if self.target_fps > 0 else 0.0

    def set_sensitivity(self, sensitivity: SensitivityConfig) -> None:
        self.sensitivity = sensitivity

    def render(self) -> None:
        self.render_sink.render(
            self.viewport.scale,
            self.viewport.offset_x,
            self.viewport.offset_y,
        )

    def tick(self, now: float | None = None) -> bool:
        """Process one frame; False when skipped by frame pacing."""
        if now is None:
            now = self.clock()
        if self.last_frame_t is not None and (now - self.last_frame_t) < self.frame_interval:
            self.frames_skipped += 1
            return False
        self.last_frame_t = now

        if self.render_sink.poll_resize():
            self.handle_resize(*self.render_sink.display_size())

        sample = self.pose_provider.get_sample()
        result = self.normalizer.process_sample(sample, self.sensitivity)
        self.last_result = result
        self.frames_processed += 1

        if result is not None:
            self.viewport.set_zoom(result.zoom_percent)
            self.viewport.set_pan(result.pan_offset_x, result.pan_offset_y)
            self.render()

        if not self.pose_provider.pumps_window_events:
            self.render_sink.pump()

        self._maybe_update_display(now, result)
        return True

    def _maybe_update_display(self, now: float, result: TrackingResult | None) -> None:
        if self.display_provider is None or self.display_interval <= 0.0:
            return
        if self.last_display_t is not None and (now - self.last_display_t) < self.display_interval:
            return
        self.display_provider.update(
            DisplayFrame(
                tracked=result is not None,
                distance=None if result is None else result.distance,
                angular_size=None if result is None else result.angular_size,
                display_percent=self.viewport.display_percent,
                scale=self.viewport.scale,
                offset_x=self.viewport.offset_x,
                offset_y=self.viewport.offset_y,
                pan_offset_x=0.0 if result is None else result.pan_offset_x,
                pan_offset_y=0.0 if result is None else result.pan_offset_y,
                frames_processed=self.frames_processed,
                frames_skipped=self.frames_skipped,
            )
        )
        self.last_display_t = now

    def recenter(self) -> None:
        """New X/Y reference at the current head position; zoom is kept."""
        self.normalizer.recenter()

    def reset(self) -> None:
        self.normalizer.reset()
        self.viewport.reset()
        self.render()
        logger.info("[VIEW] viewport reset to %.0f%%", self.viewport.display_percent)

    def handle_command(self, command: str) -> None:
        if command == COMMAND_RECENTER:
            self.recenter()
        elif command == COMMAND_RESET:
            self.reset()
        else:
            logger.warning("[VIEW] unknown command %r", command)

    def handle_resize(self, display_width: int, display_height: int) -> None:
        self.normalizer.update_display_size(display_width, display_height)
        self.viewport.update_display_size(display_width, display_height)
        self.render()
