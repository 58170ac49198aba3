"""Viewing-geometry model: camera z -> viewer distance -> angular size -> display percent.

Conventions:
- distances are meters
- angles are degrees
- display percent is the share of the source image extent that is shown
  (100 = whole image, 50 = central half)
"""

from __future__ import annotations

import math

from .filters import clamp

SCREEN_DPI = 96.0
METERS_PER_PIXEL = 0.0254 / SCREEN_DPI

# Face landmarker transformation matrices report translation in centimeters,
# with z negative in front of the camera.
Z_TO_METERS = 0.025

MIN_DISTANCE_M = 0.1
MAX_DISTANCE_M = 1.5

MIN_ANGLE_DEG = 28.0
MAX_ANGLE_DEG = 180.0

MIN_DISPLAY_PERCENT = 50.0
MAX_DISPLAY_PERCENT = 100.0
RESPONSE_EXPONENT = 0.7


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def pixels_to_meters(pixels: float) -> float:
    return float(pixels) * METERS_PER_PIXEL


def angular_size_deg(
    width_px: float,
    distance_m: float,
    fallback_deg: float = MIN_ANGLE_DEG,
) -> float:
    """Horizontal angular size of a surface: 2 * atan(W / (2 * L)).

    Non-positive or non-finite width/distance yields ``fallback_deg``.
    """
    width_px = float(width_px)
    distance_m = float(distance_m)
    if not _finite(width_px, distance_m) or width_px <= 0.0 or distance_m <= 0.0:
        return fallback_deg
    width_m = pixels_to_meters(width_px)
    return math.degrees(2.0 * math.atan(width_m / (2.0 * distance_m)))


def display_percent_from_angle(
    angle_deg: float,
    min_angle: float = MIN_ANGLE_DEG,
    max_angle: float = MAX_ANGLE_DEG,
    min_percent: float = MIN_DISPLAY_PERCENT,
    max_percent: float = MAX_DISPLAY_PERCENT,
    exponent: float = RESPONSE_EXPONENT,
) -> float:
    """Map angular size onto [min_percent, max_percent].

    The normalized angle is raised to ``exponent`` (< 1) so the response is
    gentler than linear near the far end and finer near the screen.
    """
    angle_deg = float(angle_deg)
    if not math.isfinite(angle_deg) or max_angle <= min_angle:
        return min_percent
    a = clamp(angle_deg, min_angle, max_angle)
    normalized = (a - min_angle) / (max_angle - min_angle)
    percent = min_percent + (max_percent - min_percent) * normalized**exponent
    if not math.isfinite(percent):
        return min_percent
    return clamp(percent, min_percent, max_percent)


def z_to_distance(
    z: float,
    min_distance: float = MIN_DISTANCE_M,
    max_distance: float = MAX_DISTANCE_M,
    z_to_meters: float = Z_TO_METERS,
) -> float:
    """Camera-space z (negative in front of the lens) to viewer distance.

    Linear in ``-z`` so proportional z changes stay proportional in distance.
    Non-finite z maps to ``max_distance``.
    """
    z = float(z)
    if not math.isfinite(z):
        return max_distance
    return clamp(-z * z_to_meters, min_distance, max_distance)
