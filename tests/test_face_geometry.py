from types import SimpleNamespace

import numpy as np

from pose2view.math3d.face_geometry import (
    LEFT_EYE_INNER,
    RIGHT_EYE_INNER,
    stable_point_from_landmarks,
    translation_from_matrix,
)


def _landmarks(n: int = 478):
    return [SimpleNamespace(x=0.0, y=0.0, z=0.0) for _ in range(n)]


def test_translation_from_matrix_reads_last_column():
    m = np.eye(4, dtype=np.float64)
    m[:3, 3] = [1.5, -2.0, -48.0]
    np.testing.assert_allclose(translation_from_matrix(m), np.array([1.5, -2.0, -48.0]))


def test_translation_from_matrix_rejects_bad_shape_and_nan():
    assert translation_from_matrix(np.zeros(16, dtype=np.float64)) is None
    m = np.eye(4, dtype=np.float64)
    m[2, 3] = np.nan
    assert translation_from_matrix(m) is None


def test_stable_point_is_inner_eye_midpoint():
    lms = _landmarks()
    lms[LEFT_EYE_INNER] = SimpleNamespace(x=0.40, y=0.50, z=-0.02)
    lms[RIGHT_EYE_INNER] = SimpleNamespace(x=0.60, y=0.52, z=-0.04)
    np.testing.assert_allclose(
        stable_point_from_landmarks(lms), np.array([0.50, 0.51, -0.03]), atol=1e-12
    )


def test_stable_point_requires_enough_landmarks():
    assert stable_point_from_landmarks(_landmarks(100)) is None
