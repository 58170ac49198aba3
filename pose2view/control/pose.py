"""Pose data structures for head-position tracking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(slots=True)
class PoseSample:
    """One frame of head position relative to the camera.

    translation:
      Camera-relative head translation [x, y, z] in pose-source units
      (centimeters for the face landmarker, z negative in front of the lens).
    stable_point:
      Optional anchor [x, y, z] that moves less with head rotation than the
      raw translation (eye midpoint in normalized image coordinates).
    """

    translation: np.ndarray
    stable_point: Optional[np.ndarray] = None


def make_sample(
    x: float,
    y: float,
    z: float,
    stable_point: Optional[tuple[float, float, float]] = None,
) -> PoseSample:
    return PoseSample(
        translation=np.array([x, y, z], dtype=np.float64),
        stable_point=(
            None
            if stable_point is None
            else np.asarray(stable_point, dtype=np.float64).reshape(3)
        ),
    )
