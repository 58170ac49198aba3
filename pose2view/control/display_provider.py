"""Display providers for rendering runtime tracking state."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Optional

from .pose_provider import PoseProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DisplayFrame:
    """Runtime frame data shared by all display providers."""

    tracked: bool
    distance: Optional[float]
    angular_size: Optional[float]
    display_percent: float
    scale: float
    offset_x: float
    offset_y: float
    pan_offset_x: float
    pan_offset_y: float
    frames_processed: int
    frames_skipped: int


def _status_lines(frame: DisplayFrame) -> list[str]:
    if not frame.tracked:
        tracking = "face not detected"
    else:
        tracking = f"distance {frame.distance:.2f} m | angle {frame.angular_size:.1f} deg"
    return [
        f"tracking        = {tracking}",
        f"display percent = {frame.display_percent:6.2f} %  (scale {frame.scale:.3f})",
        f"pan request     = ({frame.pan_offset_x: .1f}, {frame.pan_offset_y: .1f})",
        f"viewport offset = ({frame.offset_x: .1f}, {frame.offset_y: .1f}) px",
        f"frames          = {frame.frames_processed} processed, {frame.frames_skipped} skipped",
    ]


class DisplayProvider:
    """Base display provider interface."""

    def update(self, frame: DisplayFrame) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class _CliStatsSink:
    def __init__(self, mode: str):
        self.mode = "live" if mode == "live" else "scroll"
        self._is_tty = bool(getattr(sys.stderr, "isatty", lambda: False)())
        self._live_enabled = self.mode == "live" and self._is_tty
        self._line_count = 0

    def emit(self, lines: list[str], scroll_line: str) -> None:
        if not self._live_enabled:
            logger.info(scroll_line)
            return

        out = sys.stderr
        if self._line_count > 0:
            out.write(f"\x1b[{self._line_count}F")

        max_lines = max(self._line_count, len(lines))
        for i in range(max_lines):
            line = lines[i] if i < len(lines) else ""
            out.write("\x1b[2K")
            out.write(line)
            out.write("\n")
        out.flush()
        self._line_count = len(lines)


class TuiDisplayProvider(DisplayProvider):
    """Terminal + pose UI text display provider."""

    def __init__(self, pose_provider: PoseProvider | None = None, cli_output: str = "live"):
        self.pose_provider = pose_provider
        self.cli_sink = _CliStatsSink(cli_output)

    def update(self, frame: DisplayFrame) -> None:
        lines = _status_lines(frame)
        if self.pose_provider is not None:
            self.pose_provider.set_status("\n".join(lines))

        if frame.tracked:
            scroll_line = (
                "[VIEW] distance=%.2fm angle=%.1fdeg percent=%.1f scale=%.3f offset=(%.1f, %.1f)"
                % (
                    frame.distance,
                    frame.angular_size,
                    frame.display_percent,
                    frame.scale,
                    frame.offset_x,
                    frame.offset_y,
                )
            )
        else:
            scroll_line = "[VIEW] face not detected"
        self.cli_sink.emit(lines=["Pose2View Live", *lines], scroll_line=scroll_line)
