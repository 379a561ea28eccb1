"""
Tests for the pan/zoom view transform and SVG transform parsing.
"""

import math

import numpy as np
import pytest

from techdraw.annotations.coordinate_mapper import (
    ViewTransform,
    parse_svg_transform,
    rotation_matrix,
    translation_matrix,
)


# =============================================================================
# VIEW TRANSFORM TESTS
# =============================================================================


class TestViewTransform:
    """Test screen/local mapping."""

    def test_identity(self):
        vt = ViewTransform()
        assert vt.screen_to_local(10, 20) == pytest.approx((10.0, 20.0))
        assert vt.local_to_screen(10, 20) == pytest.approx((10.0, 20.0))

    def test_pan_and_zoom(self):
        vt = ViewTransform(pan_x=10, pan_y=20, zoom=2)
        assert vt.local_to_screen(5, 5) == pytest.approx((20.0, 30.0))
        assert vt.screen_to_local(20, 30) == pytest.approx((5.0, 5.0))

    def test_local_transform_composed_last(self):
        vt = ViewTransform(pan_x=1, zoom=2, local=translation_matrix(100, 0))
        assert vt.local_to_screen(0, 0) == pytest.approx((201.0, 0.0))
        assert vt.screen_to_local(201, 0) == pytest.approx((0.0, 0.0))

    @pytest.mark.parametrize(
        "vt",
        [
            ViewTransform(zoom=0.0),
            ViewTransform(local=np.zeros((3, 3))),
            ViewTransform(zoom=float("nan")),
            ViewTransform(pan_x=float("inf")),
        ],
    )
    def test_degenerate_maps_to_origin(self, vt):
        assert vt.screen_to_local(50, 50) == (0.0, 0.0)
        assert vt.screen_delta_to_local(5, 5) == (0.0, 0.0)

    def test_delta_ignores_pan(self):
        vt = ViewTransform(pan_x=300, pan_y=-40, zoom=2)
        assert vt.screen_delta_to_local(10, 10) == pytest.approx((5.0, 5.0))

    def test_delta_through_rotation(self):
        vt = ViewTransform(local=rotation_matrix(90))
        assert vt.screen_delta_to_local(0, 10) == pytest.approx((10.0, 0.0), abs=1e-9)

    def test_local_shape_validated(self):
        with pytest.raises(ValueError):
            ViewTransform(local=np.identity(2))


class TestZoom:
    """Test wheel zoom about the cursor."""

    def test_zoom_in_step(self):
        vt = ViewTransform()
        assert vt.zoom_at(0, 0, -120) == pytest.approx(1.1)

    def test_zoom_out_step(self):
        vt = ViewTransform()
        assert vt.zoom_at(0, 0, 120) == pytest.approx(0.9)

    @pytest.mark.parametrize("delta", [-120, 120, -1, 3])
    def test_cursor_point_stays_fixed(self, delta):
        vt = ViewTransform(pan_x=15, pan_y=-7, zoom=1.7)
        before = vt.screen_to_local(240, 130)
        vt.zoom_at(240, 130, delta)
        assert vt.screen_to_local(240, 130) == pytest.approx(before)

    def test_clamped(self):
        vt = ViewTransform(zoom=10.0)
        assert vt.zoom_at(0, 0, -1) == 10.0
        vt = ViewTransform(zoom=0.1)
        assert vt.zoom_at(0, 0, 1) == 0.1

    def test_no_delta(self):
        vt = ViewTransform(pan_x=3, zoom=2)
        assert vt.zoom_at(10, 10, 0) == 2
        assert vt.pan_x == 3

    def test_pan_and_reset(self):
        vt = ViewTransform()
        vt.pan_by(5, -5)
        vt.zoom_at(10, 10, -1)
        assert (vt.pan_x, vt.pan_y) != (0.0, 0.0)
        vt.reset()
        assert (vt.pan_x, vt.pan_y, vt.zoom) == (0.0, 0.0, 1.0)

    def test_svg_transform(self):
        vt = ViewTransform(pan_x=10, pan_y=5, zoom=2)
        assert vt.svg_transform() == "translate(10.00,5.00) scale(2.0000)"


# =============================================================================
# SVG TRANSFORM PARSING TESTS
# =============================================================================


def _apply(m, x, y):
    px, py, _ = m @ np.array([x, y, 1.0])
    return (px, py)


class TestParseSvgTransform:
    """Test parse_svg_transform."""

    def test_empty_is_identity(self):
        assert np.allclose(parse_svg_transform(""), np.identity(3))

    def test_translate_then_scale(self):
        """SVG applies the rightmost transform to the point first."""
        m = parse_svg_transform("translate(10,20) scale(2)")
        assert _apply(m, 1, 1) == pytest.approx((12.0, 22.0))

    def test_non_uniform_scale(self):
        m = parse_svg_transform("scale(1,-1)")
        assert _apply(m, 3, 4) == pytest.approx((3.0, -4.0))

    def test_matrix(self):
        m = parse_svg_transform("matrix(1 0 0 1 5 6)")
        assert _apply(m, 0, 0) == pytest.approx((5.0, 6.0))

    def test_rotate_about_point(self):
        m = parse_svg_transform("rotate(180, 5, 5)")
        assert _apply(m, 0, 0) == pytest.approx((10.0, 10.0))

    def test_unknown_parts_ignored(self):
        m = parse_svg_transform("skewX(30) translate(1)")
        assert _apply(m, 0, 0) == pytest.approx((1.0, 0.0))

    def test_rotation_matrix(self):
        assert _apply(rotation_matrix(90), 1, 0) == pytest.approx((0.0, 1.0), abs=1e-12)
        assert math.isclose(np.linalg.det(rotation_matrix(33)), 1.0)
