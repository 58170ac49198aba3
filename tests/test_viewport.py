import math

import pytest

from pose2view.control.viewport import (
    ViewGeometry,
    ViewportModel,
    ViewportState,
    apply_pan,
    max_pan_offset,
)


def _viewport() -> ViewportModel:
    return ViewportModel(image_width=2000, image_height=1000, display_width=1280, display_height=720)


def test_initial_state_is_centered_half_view():
    vp = _viewport()
    assert vp.get_scale() == 2.0
    assert vp.get_offset_x() == 0.0
    assert vp.get_offset_y() == 0.0
    assert vp.get_display_percent() == 50.0


def test_set_zoom_clamps_and_derives_scale():
    vp = _viewport()
    vp.set_zoom(30.0)
    assert vp.display_percent == 50.0
    assert vp.scale == 2.0
    vp.set_zoom(150.0)
    assert vp.display_percent == 100.0
    assert vp.scale == 1.0
    vp.set_zoom(80.0)
    assert vp.scale == pytest.approx(1.25)


def test_set_zoom_ignores_nan():
    vp = _viewport()
    vp.set_zoom(80.0)
    vp.set_zoom(math.nan)
    assert vp.display_percent == 80.0


def test_max_pan_offset():
    assert max_pan_offset(1000.0, 2.0) == pytest.approx(250.0)
    assert max_pan_offset(1000.0, 1.0) == 0.0


def test_pan_within_bounds_inverts_y():
    vp = _viewport()
    vp.set_pan(100.0, 50.0)
    assert vp.offset_x == pytest.approx(100.0)
    assert vp.offset_y == pytest.approx(-50.0)


def test_pan_is_not_accumulated():
    vp = _viewport()
    vp.set_pan(100.0, 0.0)
    vp.set_pan(100.0, 0.0)
    assert vp.offset_x == pytest.approx(100.0)
    vp.set_pan(0.0, 0.0)
    assert vp.offset_x == 0.0


def test_pan_below_noise_threshold_is_zero():
    vp = _viewport()
    vp.set_pan(0.005, -0.005)
    assert vp.offset_x == 0.0
    assert vp.offset_y == 0.0


def test_boundary_damping_beyond_max_offset():
    vp = _viewport()
    # scale 2: max_x = 2000 / 4 = 500, max_y = 1000 / 4 = 250
    vp.set_pan(500.0 + 100.0, 250.0 + 40.0)
    assert vp.offset_x == pytest.approx(500.0 + 0.3 * 100.0)
    assert vp.offset_y == pytest.approx(-(250.0 + 0.3 * 40.0))


def test_boundary_damping_is_contractive():
    geometry = ViewGeometry(image_width=2000, image_height=1000, display_width=1280, display_height=720)
    state = ViewportState()
    max_x = max_pan_offset(geometry.image_width, state.scale)
    for excess in (0.5, 3.0, 120.0, 5000.0):
        out = apply_pan(state, geometry, -(max_x + excess), 0.0)
        stored_excess = -max_x - out.offset_x
        assert 0.0 < stored_excess < excess


def test_non_finite_pan_is_treated_as_zero():
    vp = _viewport()
    vp.set_pan(math.nan, math.inf)
    assert vp.offset_x == 0.0
    assert vp.offset_y == 0.0


def test_reset_is_idempotent():
    vp = _viewport()
    vp.set_zoom(90.0)
    vp.set_pan(40.0, 10.0)
    vp.reset()
    once = vp.state
    vp.reset()
    assert vp.state == once
    assert vp.scale == 2.0
    assert vp.offset_x == 0.0
    assert vp.offset_y == 0.0


def test_resize_updates_geometry_used_for_bounds():
    vp = _viewport()
    vp.update_image_size(4000, 2000)
    vp.set_pan(900.0, 0.0)
    # max_x = 4000 / 4 = 1000, so no damping
    assert vp.offset_x == pytest.approx(900.0)
    vp.update_display_size(800, 600)
    assert vp.geometry.display_width == 800
