import math

import pytest

from pose2view.control.render_sink import NullRenderSink, source_rect


def test_source_rect_centered_at_scale_two():
    r = source_rect(2000, 1000, 2.0, 0.0, 0.0)
    assert (r.x, r.y, r.width, r.height) == pytest.approx((500.0, 250.0, 1000.0, 500.0))


def test_source_rect_follows_offsets_inside_image():
    r = source_rect(2000, 1000, 2.0, 120.0, -80.0)
    assert r.x == pytest.approx(620.0)
    assert r.y == pytest.approx(170.0)


def test_source_rect_reclamps_damped_overshoot():
    r = source_rect(2000, 1000, 2.0, 530.0, -262.0)
    assert r.x == pytest.approx(1000.0)
    assert r.y == pytest.approx(0.0)
    assert r.x + r.width <= 2000.0


def test_source_rect_sanitizes_bad_scale_and_offsets():
    r = source_rect(2000, 1000, 0.5, math.nan, math.inf)
    assert (r.x, r.y, r.width, r.height) == pytest.approx((0.0, 0.0, 2000.0, 1000.0))


def test_null_render_sink_records_last_rect():
    sink = NullRenderSink(2000, 1000, 1280, 720)
    sink.render(2.0, 0.0, 0.0)
    assert sink.render_count == 1
    assert sink.last_rect.width == pytest.approx(1000.0)
    assert sink.image_size() == (2000, 1000)
    assert sink.display_size() == (1280, 720)
    assert sink.poll_resize() is False
