"""Face landmarker output -> head translation and stable anchor point."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

# Inner eye corners; their midpoint barely moves when the head turns.
LEFT_EYE_INNER = 133
RIGHT_EYE_INNER = 362


def translation_from_matrix(matrix) -> Optional[np.ndarray]:
    """Translation column of a 4x4 facial transformation matrix."""
    m = np.asarray(matrix, dtype=np.float64)
    if m.shape != (4, 4):
        return None
    t = m[:3, 3].copy()
    if not np.isfinite(t).all():
        return None
    return t


def stable_point_from_landmarks(landmarks: Sequence) -> Optional[np.ndarray]:
    """Midpoint between the inner eye corners in normalized image coordinates."""
    if len(landmarks) <= max(LEFT_EYE_INNER, RIGHT_EYE_INNER):
        return None
    a = landmarks[LEFT_EYE_INNER]
    b = landmarks[RIGHT_EYE_INNER]
    p = np.array(
        [
            (float(a.x) + float(b.x)) * 0.5,
            (float(a.y) + float(b.y)) * 0.5,
            (float(a.z) + float(b.z)) * 0.5,
        ],
        dtype=np.float64,
    )
    if not np.isfinite(p).all():
        return None
    return p
