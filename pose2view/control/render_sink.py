"""Render sink interface and source-rectangle geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SourceRect:
    """Region of the source image (pixels) mapped onto the whole display."""

    x: float
    y: float
    width: float
    height: float


def source_rect(
    image_width: float,
    image_height: float,
    scale: float,
    offset_x: float,
    offset_y: float,
) -> SourceRect:
    """Centered sub-rectangle of size image/scale, shifted by the offsets.

    Damped viewport offsets may overshoot the image, so the rectangle is
    re-clamped to stay inside it.
    """
    if not math.isfinite(scale) or scale < 1.0:
        scale = 1.0
    if not math.isfinite(offset_x):
        offset_x = 0.0
    if not math.isfinite(offset_y):
        offset_y = 0.0

    w = image_width / scale
    h = image_height / scale
    sx = image_width * 0.5 - w * 0.5 + offset_x
    sy = image_height * 0.5 - h * 0.5 + offset_y
    sx = max(0.0, min(image_width - w, sx))
    sy = max(0.0, min(image_height - h, sy))
    return SourceRect(x=sx, y=sy, width=w, height=h)


class RenderSink:
    """Base interface for drawing the current viewport."""

    def image_size(self) -> tuple[int, int]:
        raise NotImplementedError

    def display_size(self) -> tuple[int, int]:
        raise NotImplementedError

    def poll_resize(self) -> bool:
        """Refresh the display size from the surface; True when it changed."""
        return False

    def render(self, scale: float, offset_x: float, offset_y: float) -> None:
        raise NotImplementedError

    def pump(self) -> None:
        """Service the surface's event queue when no one else does."""
        pass

    def close(self) -> None:
        pass


class NullRenderSink(RenderSink):
    """Headless sink; keeps the last requested rectangle."""

    def __init__(
        self,
        image_width: int,
        image_height: int,
        display_width: int,
        display_height: int,
    ):
        self._image_size = (int(image_width), int(image_height))
        self._display_size = (int(display_width), int(display_height))
        self.last_rect: Optional[SourceRect] = None
        self.render_count = 0
        self.pump_count = 0

    def image_size(self) -> tuple[int, int]:
        return self._image_size

    def display_size(self) -> tuple[int, int]:
        return self._display_size

    def resize_display(self, width: int, height: int) -> None:
        self._display_size = (int(width), int(height))

    def render(self, scale: float, offset_x: float, offset_y: float) -> None:
        w, h = self._image_size
        self.last_rect = source_rect(w, h, scale, offset_x, offset_y)
        self.render_count += 1

    def pump(self) -> None:
        self.pump_count += 1
