"""Pose normalization: raw head samples -> baseline-relative pan/zoom targets.

Pipeline per accepted sample:
- lazy baseline capture (stable point and translation tracked separately)
- X/Y: threshold-gated deltas from baseline, scaled by sensitivity
- Z: lightly gated delta, exponentially smoothed, turned into a viewer
  distance around the baseline distance
- distance -> angular size of the display -> display percent

``normalize_pose`` is the pure state transition; ``PoseNormalizer`` owns the
state for one tracking session.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np

from ..math3d.filters import clamp, smooth_value
from ..math3d.viewing import (
    MAX_ANGLE_DEG,
    MAX_DISPLAY_PERCENT,
    MAX_DISTANCE_M,
    MIN_ANGLE_DEG,
    MIN_DISPLAY_PERCENT,
    MIN_DISTANCE_M,
    RESPONSE_EXPONENT,
    Z_TO_METERS,
    angular_size_deg,
    display_percent_from_angle,
    z_to_distance,
)
from .pose import PoseSample
from .sensitivity import SensitivityConfig

logger = logging.getLogger(__name__)

LOG_EVERY_N_FRAMES = 30


@dataclass(frozen=True, slots=True)
class NormalizerParams:
    min_change_threshold: float = 0.001
    min_z_threshold: float = 0.0001
    smoothing_factor: float = 0.7
    # Sensitivity Z values are small; this restores a usable zoom range.
    z_gain: float = 2.5
    min_distance: float = MIN_DISTANCE_M
    max_distance: float = MAX_DISTANCE_M
    z_to_meters: float = Z_TO_METERS
    min_angle: float = MIN_ANGLE_DEG
    max_angle: float = MAX_ANGLE_DEG
    min_display_percent: float = MIN_DISPLAY_PERCENT
    response_exponent: float = RESPONSE_EXPONENT


@dataclass(frozen=True, slots=True)
class TrackingBaseline:
    """Head-centered reference captured from the first valid sample."""

    base_x: Optional[float] = None
    base_y: Optional[float] = None
    base_z: Optional[float] = None
    base_stable_x: Optional[float] = None
    base_stable_y: Optional[float] = None
    base_stable_z: Optional[float] = None
    previous_smoothed_z: float = 0.0

    def recentered(self) -> "TrackingBaseline":
        """Drop the X/Y references; keep Z so the current zoom survives."""
        return replace(
            self,
            base_x=None,
            base_y=None,
            base_stable_x=None,
            base_stable_y=None,
            base_stable_z=None,
        )


@dataclass(frozen=True, slots=True)
class TrackingResult:
    zoom_percent: float
    pan_offset_x: float
    pan_offset_y: float
    distance: float
    angular_size: float


def _as_vec3(v) -> Optional[np.ndarray]:
    if v is None:
        return None
    arr = np.asarray(v, dtype=np.float64).reshape(3)
    if not np.isfinite(arr).all():
        return None
    return arr


def _gate(delta: float, threshold: float, gain: float) -> float:
    if abs(delta) <= threshold:
        return 0.0
    return delta * gain


def _zoom_from_distance(
    distance: float,
    display_width: float,
    params: NormalizerParams,
) -> tuple[float, float]:
    angle = angular_size_deg(display_width, distance, fallback_deg=params.min_angle)
    percent = display_percent_from_angle(
        angle,
        min_angle=params.min_angle,
        max_angle=params.max_angle,
        min_percent=params.min_display_percent,
        max_percent=MAX_DISPLAY_PERCENT,
        exponent=params.response_exponent,
    )
    return clamp(angle, params.min_angle, params.max_angle), percent


def capture_baseline(
    baseline: TrackingBaseline,
    translation: np.ndarray,
    stable_point: Optional[np.ndarray],
) -> TrackingBaseline:
    """Fill any unset baseline field from the current sample."""
    updates = {}
    if baseline.base_x is None:
        updates["base_x"] = float(translation[0])
    if baseline.base_y is None:
        updates["base_y"] = float(translation[1])
    if baseline.base_z is None:
        updates["base_z"] = float(translation[2])
    if stable_point is not None and baseline.base_stable_x is None:
        updates["base_stable_x"] = float(stable_point[0])
        updates["base_stable_y"] = float(stable_point[1])
        updates["base_stable_z"] = float(stable_point[2])
    if not updates:
        return baseline
    return replace(baseline, **updates)


def normalize_pose(
    baseline: TrackingBaseline,
    sample: Optional[PoseSample],
    sensitivity: SensitivityConfig,
    display_width: float,
    params: NormalizerParams = NormalizerParams(),
) -> tuple[TrackingBaseline, Optional[TrackingResult]]:
    """One normalization step: (baseline, sample) -> (baseline', result).

    Returns ``None`` as the result when no pose was detected. A sample with
    non-finite translation is dropped the same way and leaves the baseline
    untouched.
    """
    if sample is None or sample.translation is None:
        return baseline, None

    translation = _as_vec3(sample.translation)
    if translation is None:
        return baseline, None
    stable_point = _as_vec3(sample.stable_point)

    baseline = capture_baseline(baseline, translation, stable_point)

    if stable_point is not None:
        delta_x = float(stable_point[0]) - baseline.base_stable_x
        delta_y = float(stable_point[1]) - baseline.base_stable_y
    else:
        delta_x = float(translation[0]) - baseline.base_x
        delta_y = float(translation[1]) - baseline.base_y
    delta_z = float(translation[2]) - baseline.base_z

    pan_x = _gate(delta_x, params.min_change_threshold, sensitivity.effective_x)
    pan_y = _gate(delta_y, params.min_change_threshold, sensitivity.effective_y)

    if abs(delta_z) > params.min_z_threshold:
        smoothed_z = smooth_value(
            delta_z, baseline.previous_smoothed_z, params.smoothing_factor
        )
    else:
        smoothed_z = 0.0
    baseline = replace(baseline, previous_smoothed_z=smoothed_z)

    base_distance = z_to_distance(
        baseline.base_z,
        params.min_distance,
        params.max_distance,
        params.z_to_meters,
    )
    # Moving closer raises z (toward 0) and shrinks the distance.
    relative_change = smoothed_z * sensitivity.effective_z * params.z_gain
    distance = base_distance * (1.0 - relative_change)
    if not math.isfinite(distance):
        distance = base_distance
    distance = clamp(distance, params.min_distance, params.max_distance)

    angle, percent = _zoom_from_distance(distance, display_width, params)
    return baseline, TrackingResult(
        zoom_percent=percent,
        pan_offset_x=pan_x,
        pan_offset_y=pan_y,
        distance=distance,
        angular_size=angle,
    )


class PoseNormalizer:
    """Session-owned wrapper around ``normalize_pose``."""

    def __init__(
        self,
        display_width: int,
        display_height: int,
        params: NormalizerParams | None = None,
    ):
        self.display_width = int(display_width)
        self.display_height = int(display_height)
        self.params = params or NormalizerParams()
        self.baseline = TrackingBaseline()
        self.last_result: TrackingResult | None = None
        self._frame_count = 0

    def process_sample(
        self,
        sample: Optional[PoseSample],
        sensitivity: SensitivityConfig,
    ) -> Optional[TrackingResult]:
        before = self.baseline
        self.baseline, result = normalize_pose(
            before,
            sample,
            sensitivity,
            self.display_width,
            self.params,
        )
        if result is None:
            return None

        if before.base_stable_x is None and self.baseline.base_stable_x is not None:
            logger.info(
                "[TRACK] stable-point baseline set: (%.4f, %.4f, %.4f)",
                self.baseline.base_stable_x,
                self.baseline.base_stable_y,
                self.baseline.base_stable_z,
            )
        if before.base_x is None and self.baseline.base_x is not None:
            logger.info(
                "[TRACK] translation baseline set: (%.4f, %.4f, %.4f)",
                self.baseline.base_x,
                self.baseline.base_y,
                self.baseline.base_z,
            )

        self._frame_count += 1
        if self._frame_count % LOG_EVERY_N_FRAMES == 0:
            logger.debug(
                "[TRACK] frame=%d pan=(%.2f, %.2f) smoothed_dz=%.4f "
                "distance=%.3fm angle=%.2fdeg percent=%.2f",
                self._frame_count,
                result.pan_offset_x,
                result.pan_offset_y,
                self.baseline.previous_smoothed_z,
                result.distance,
                result.angular_size,
                result.zoom_percent,
            )

        self.last_result = result
        return result

    @property
    def current_distance(self) -> float | None:
        return None if self.last_result is None else self.last_result.distance

    @property
    def current_angular_size(self) -> float | None:
        return None if self.last_result is None else self.last_result.angular_size

    @property
    def current_display_percent(self) -> float:
        if self.last_result is None:
            return self.params.min_display_percent
        return self.last_result.zoom_percent

    def update_display_size(self, width: int, height: int) -> None:
        self.display_width = int(width)
        self.display_height = int(height)

    def recenter(self) -> None:
        self.baseline = self.baseline.recentered()
        logger.info("[TRACK] baseline reset (X/Y only), Z kept to preserve distance")

    def reset(self) -> None:
        self.baseline = TrackingBaseline()
        self.last_result = None
        self._frame_count = 0
        logger.info("[TRACK] baseline cleared")
