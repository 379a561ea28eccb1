"""
Tests for the primitive classifier.

Tests cover:
- Line, polyline, circle, ellipse and fallback classification
- Arc centre recovery for half and quarter arcs
- Element ids and referenceability
- Bounding boxes and key points
"""

import logging
import math

import pytest

from techdraw.geometry.primitives import (
    BoundingBox,
    CircleData,
    ClassifierConfig,
    EllipseData,
    LineData,
    OtherData,
    PolylineData,
    arc_center,
    classify_path,
    classify_paths,
    count_by_type,
    make_element_id,
)


# =============================================================================
# CLASSIFICATION TESTS
# =============================================================================


class TestLineClassification:
    """Test classification of single straight segments."""

    def test_horizontal_line(self):
        el = classify_path("M0 0L10 0")
        assert el.type == "line"
        assert isinstance(el.data, LineData)
        assert el.data.start == (0.0, 0.0)
        assert el.data.end == (10.0, 0.0)
        assert el.data.length == pytest.approx(10.0)
        assert el.data.angle == pytest.approx(0.0)
        assert el.data.midpoint == (5.0, 0.0)

    def test_diagonal_line(self):
        el = classify_path("M0 0 L3,4")
        assert el.type == "line"
        assert el.data.length == pytest.approx(5.0)
        assert el.data.angle == pytest.approx(math.degrees(math.atan2(4, 3)))

    def test_vertical_line_angle(self):
        el = classify_path("M0 10L0 0")
        assert el.data.angle == pytest.approx(-90.0)

    def test_surrounding_whitespace(self):
        el = classify_path("  M1 2L3 4  ")
        assert el.type == "line"
        assert el.raw == "M1 2L3 4"

    @pytest.mark.parametrize("raw", ["M0 0L10 0Z", "M0 0 L10,0 z", "M0 0L10 0 Z "])
    def test_closed_two_point_path(self, raw):
        el = classify_path(raw)
        assert el.type == "line"
        assert el.referenceable
        assert el.data.end == (10.0, 0.0)
        assert el.data.length == pytest.approx(10.0)


class TestPolylineClassification:
    """Test classification of multi-segment straight paths."""

    def test_three_points(self):
        el = classify_path("M0 0L10 0L10 10")
        assert el.type == "polyline"
        assert isinstance(el.data, PolylineData)
        assert el.data.points == ((0.0, 0.0), (10.0, 0.0), (10.0, 10.0))
        assert el.data.segments == 2
        assert el.data.bounding_box == BoundingBox(0.0, 0.0, 10.0, 10.0)

    def test_polyline_is_referenceable(self):
        assert classify_path("M0 0L1 0L1 1L0 1").referenceable


class TestArcClassification:
    """Test circle and ellipse detection from arc commands."""

    def test_half_circle(self):
        el = classify_path("M5 0A5 5 0 0 1 -5 0")
        assert el.type == "circle"
        assert isinstance(el.data, CircleData)
        assert el.data.center[0] == pytest.approx(0.0)
        assert el.data.center[1] == pytest.approx(0.0)
        assert el.data.radius == pytest.approx(5.0)
        assert el.data.diameter == pytest.approx(10.0)
        assert el.data.circumference == pytest.approx(2 * math.pi * 5)

    def test_full_circle_as_two_arcs(self):
        """The first arc command determines the centre."""
        el = classify_path("M5 0A5 5 0 0 1 -5 0A5 5 0 0 1 5 0")
        assert el.type == "circle"
        assert el.data.center == pytest.approx((0.0, 0.0))

    def test_radius_within_tolerance_is_circle(self):
        el = classify_path("M5 0A5 5.0005 0 0 1 -5 0")
        assert el.type == "circle"
        assert el.data.radius == pytest.approx(5.0)

    def test_custom_tolerance(self):
        el = classify_path(
            "M5 0A5 5.0005 0 0 1 -5 0",
            config=ClassifierConfig(radius_tolerance=0.0001),
        )
        assert el.type == "ellipse"

    def test_ellipse(self):
        el = classify_path("M10 0A10 5 0 0 1 -10 0")
        assert el.type == "ellipse"
        assert isinstance(el.data, EllipseData)
        assert el.data.center == pytest.approx((0.0, 0.0))
        assert el.data.radius_x == pytest.approx(10.0)
        assert el.data.radius_y == pytest.approx(5.0)
        assert el.data.bounding_box.width == pytest.approx(20.0)
        assert el.data.bounding_box.height == pytest.approx(10.0)

    def test_translated_circle(self):
        el = classify_path("M25 20A5 5 0 0 1 15 20")
        assert el.data.center == pytest.approx((20.0, 20.0))

    def test_undersized_radius_reported_as_fitted(self, caplog):
        """Centre and radius describe the same enlarged circle."""
        with caplog.at_level(logging.DEBUG, logger="techdraw"):
            el = classify_path("M0 0A1 1 0 0 1 10 0")
        assert el.type == "circle"
        assert el.data.center == pytest.approx((5.0, 0.0), abs=1e-9)
        assert el.data.radius == pytest.approx(5.0)
        assert el.data.diameter == pytest.approx(10.0)
        assert "too small for its chord" in caplog.text


class TestArcCenter:
    """Test endpoint to centre arc conversion."""

    def test_quarter_arc_sweep_one(self):
        cx, cy, rx, ry = arc_center(10, 0, 10, 10, 0, False, True, 0, 10)
        assert (cx, cy) == pytest.approx((0.0, 0.0), abs=1e-9)
        assert (rx, ry) == pytest.approx((10.0, 10.0))

    def test_quarter_arc_sweep_zero(self):
        cx, cy, _, _ = arc_center(10, 0, 10, 10, 0, False, False, 0, 10)
        assert (cx, cy) == pytest.approx((10.0, 10.0), abs=1e-9)

    def test_radius_scaled_up(self):
        """Radii too small to span the chord are enlarged."""
        cx, cy, rx, ry = arc_center(0, 0, 1, 1, 0, False, True, 10, 0)
        assert rx == pytest.approx(5.0)
        assert (cx, cy) == pytest.approx((5.0, 0.0), abs=1e-9)

    def test_zero_radius_raises(self):
        with pytest.raises(ValueError):
            arc_center(0, 0, 0, 5, 0, False, True, 10, 0)

    def test_coincident_endpoints_raise(self):
        with pytest.raises(ValueError):
            arc_center(1, 1, 5, 5, 0, False, True, 1, 1)


class TestFallback:
    """Test that anything unclassifiable becomes 'other'."""

    @pytest.mark.parametrize(
        "raw, hint",
        [
            ("M0 0C1 1 2 2 3 3", "M"),
            ("Q1 1 2 2", "Q"),
            ("M0 0A0 0 0 0 1 10 0", "M"),   # zero radius
            ("M1 1A5 5 0 0 1 1 1", "M"),    # coincident endpoints
            ("", ""),
        ],
    )
    def test_other(self, raw, hint):
        el = classify_path(raw)
        assert el.type == "other"
        assert isinstance(el.data, OtherData)
        assert el.data.command_hint == hint
        assert not el.referenceable

    def test_non_string_input(self):
        el = classify_path(None)
        assert el.type == "other"
        assert el.raw == ""

    def test_invalid_visibility_raises(self):
        with pytest.raises(ValueError):
            classify_path("M0 0L1 1", visibility="ghost")


# =============================================================================
# ELEMENT TESTS
# =============================================================================


class TestElementIds:
    """Test element id construction."""

    def test_with_part_name(self):
        assert make_element_id("Base Plate", "front", "visible", 3) == "Base_Plate_front_visible_3"

    def test_without_part_name(self):
        assert make_element_id("", "top", "hidden", 0) == "top_hidden_0"

    def test_classify_paths_numbers_in_order(self):
        elements = classify_paths(
            ["M0 0L1 0", "M0 0L0 1"], visibility="hidden", view_name="left", part_name="Bracket"
        )
        assert [el.id for el in elements] == ["Bracket_left_hidden_0", "Bracket_left_hidden_1"]
        assert all(el.visibility == "hidden" for el in elements)
        assert [el.index for el in elements] == [0, 1]

    def test_element_is_frozen(self):
        el = classify_path("M0 0L1 0")
        with pytest.raises(AttributeError):
            el.id = "other"


class TestElementGeometry:
    """Test bounding boxes, key points and counts."""

    def test_line_bounding_box(self):
        box = classify_path("M10 5L0 0").bounding_box()
        assert box == BoundingBox(0.0, 0.0, 10.0, 5.0)
        assert box.right == 10.0
        assert box.bottom == 5.0
        assert box.center == (5.0, 2.5)

    def test_circle_bounding_box(self):
        box = classify_path("M5 0A5 5 0 0 1 -5 0").bounding_box()
        assert box.x == pytest.approx(-5.0)
        assert box.width == pytest.approx(10.0)

    def test_other_has_no_bounding_box(self):
        assert classify_path("Q1 1 2 2").bounding_box() is None

    def test_key_points(self):
        assert classify_path("M0 0L4 0").key_points() == [(0.0, 0.0), (4.0, 0.0)]
        assert classify_path("M5 0A5 5 0 0 1 -5 0").key_points() == [pytest.approx((0.0, 0.0))]
        assert classify_path("Q1 1 2 2").key_points() == []

    def test_bounding_box_union(self):
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(5, -5, 10, 10)
        assert a.union(b) == BoundingBox(0, -5, 15, 15)

    def test_from_points_empty_raises(self):
        with pytest.raises(ValueError):
            BoundingBox.from_points([])

    def test_count_by_type(self):
        elements = classify_paths(["M0 0L1 0", "M0 0L1 0L1 1", "M5 0A5 5 0 0 1 -5 0", "Q1 1 2 2"])
        assert count_by_type(elements) == {
            "line": 1,
            "polyline": 1,
            "circle": 1,
            "ellipse": 0,
            "other": 1,
        }
