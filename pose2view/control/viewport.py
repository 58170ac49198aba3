"""Viewport over the background image: zoom scale and pan offsets."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from ..math3d.filters import clamp, soft_clamp
from ..math3d.viewing import MAX_DISPLAY_PERCENT, MIN_DISPLAY_PERCENT

logger = logging.getLogger(__name__)

INITIAL_DISPLAY_PERCENT = 50.0
BOUNDARY_DAMPING = 0.3
PAN_NOISE_THRESHOLD = 0.01


@dataclass(frozen=True, slots=True)
class ViewGeometry:
    """Pixel sizes of the source image and of the display surface."""

    image_width: int
    image_height: int
    display_width: int
    display_height: int


@dataclass(frozen=True, slots=True)
class ViewportState:
    """Visible sub-rectangle of the image.

    offset_x, offset_y:
      Image-pixel offset of the viewport center from the image center.
    """

    display_percent: float = INITIAL_DISPLAY_PERCENT
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def scale(self) -> float:
        return MAX_DISPLAY_PERCENT / self.display_percent


def max_pan_offset(image_dimension: float, scale: float) -> float:
    """Half of the image extent hidden at this scale; 0 at scale 1."""
    if scale <= 1.0:
        return 0.0
    return float(image_dimension) * (scale - 1.0) / (2.0 * scale)


def apply_zoom(
    state: ViewportState,
    display_percent: float,
    min_display_percent: float = MIN_DISPLAY_PERCENT,
) -> ViewportState:
    display_percent = float(display_percent)
    if math.isnan(display_percent):
        return state
    return replace(
        state,
        display_percent=clamp(display_percent, min_display_percent, MAX_DISPLAY_PERCENT),
    )


def apply_pan(
    state: ViewportState,
    geometry: ViewGeometry,
    raw_offset_x: float,
    raw_offset_y: float,
    damping: float = BOUNDARY_DAMPING,
    noise_threshold: float = PAN_NOISE_THRESHOLD,
) -> ViewportState:
    """Map raw pan offsets into image-space offsets.

    Y is inverted (head down -> reveal content below). Offsets past the
    permitted range are damped, not clipped.
    """
    raw_offset_x = float(raw_offset_x)
    raw_offset_y = float(raw_offset_y)
    if not math.isfinite(raw_offset_x):
        raw_offset_x = 0.0
    if not math.isfinite(raw_offset_y):
        raw_offset_y = 0.0

    scale = state.scale
    max_x = max_pan_offset(geometry.image_width, scale)
    max_y = max_pan_offset(geometry.image_height, scale)

    candidate_x = raw_offset_x if abs(raw_offset_x) > noise_threshold else 0.0
    candidate_y = -raw_offset_y if abs(raw_offset_y) > noise_threshold else 0.0

    return replace(
        state,
        offset_x=soft_clamp(candidate_x, -max_x, max_x, damping),
        offset_y=soft_clamp(candidate_y, -max_y, max_y, damping),
    )


class ViewportModel:
    def __init__(
        self,
        image_width: int,
        image_height: int,
        display_width: int,
        display_height: int,
        initial_display_percent: float = INITIAL_DISPLAY_PERCENT,
        min_display_percent: float = MIN_DISPLAY_PERCENT,
        damping: float = BOUNDARY_DAMPING,
        noise_threshold: float = PAN_NOISE_THRESHOLD,
    ):
        self.geometry = ViewGeometry(
            image_width=int(image_width),
            image_height=int(image_height),
            display_width=int(display_width),
            display_height=int(display_height),
        )
        self.min_display_percent = float(min_display_percent)
        self.initial_display_percent = clamp(
            float(initial_display_percent), self.min_display_percent, MAX_DISPLAY_PERCENT
        )
        self.damping = float(damping)
        self.noise_threshold = float(noise_threshold)
        self.state = ViewportState(display_percent=self.initial_display_percent)

    def set_zoom(self, display_percent: float) -> None:
        self.state = apply_zoom(self.state, display_percent, self.min_display_percent)

    def set_pan(self, raw_offset_x: float, raw_offset_y: float) -> None:
        self.state = apply_pan(
            self.state,
            self.geometry,
            raw_offset_x,
            raw_offset_y,
            damping=self.damping,
            noise_threshold=self.noise_threshold,
        )

    def reset(self) -> None:
        self.state = ViewportState(display_percent=self.initial_display_percent)

    def update_image_size(self, width: int, height: int) -> None:
        self.geometry = replace(self.geometry, image_width=int(width), image_height=int(height))

    def update_display_size(self, width: int, height: int) -> None:
        self.geometry = replace(
            self.geometry, display_width=int(width), display_height=int(height)
        )
        logger.debug("[VIEW] display resized to %dx%d", width, height)

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def offset_x(self) -> float:
        return self.state.offset_x

    @property
    def offset_y(self) -> float:
        return self.state.offset_y

    @property
    def display_percent(self) -> float:
        return self.state.display_percent

    def get_scale(self) -> float:
        return self.scale

    def get_offset_x(self) -> float:
        return self.offset_x

    def get_offset_y(self) -> float:
        return self.offset_y

    def get_display_percent(self) -> float:
        return self.display_percent
