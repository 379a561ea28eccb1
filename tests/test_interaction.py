"""
Tests for pointer interaction.

Tests cover:
- Label drag through the Idle / Dragging state machine, at any zoom
- Panning
- Two-click custom lines with snapping
- Endpoint hit testing and selection sets
"""

import pytest

from techdraw.annotations.coordinate_mapper import ViewTransform
from techdraw.annotations.interaction import (
    CustomLine,
    Dragging,
    FirstPointCaptured,
    Idle,
    InteractionController,
    Panning,
    SelectionSet,
    find_grabbed_endpoint,
    snap_point,
)
from techdraw.annotations.measurements import MeasurementSet
from techdraw.geometry.primitives import classify_paths
from techdraw.views.projection import RawView, build_projection_view


@pytest.fixture
def view():
    raw = RawView(
        "front",
        visible_paths=["M0 0L100 0", "M0 0L0 50", "M55 25A5 5 0 0 1 45 25"],
        visible_frame="0 0 100 50",
    )
    return build_projection_view(raw)


@pytest.fixture
def controller(view):
    mset = MeasurementSet(view)
    mset.generate()
    return InteractionController(mset)


# =============================================================================
# DRAG TESTS
# =============================================================================


class TestLabelDrag:
    """Test dragging measurement labels."""

    def test_press_on_label_starts_drag(self, controller):
        state = controller.press(100, 100, "front_overall_horizontal")
        assert isinstance(state, Dragging)
        assert state.measurement_id == "front_overall_horizontal"
        assert state.start_screen == (100, 100)
        assert "front_overall_horizontal" in controller.selection

    def test_drag_moves_anchor(self, controller):
        m = controller.measurements.get("front_overall_horizontal")
        start = m.anchor.as_tuple()
        controller.press(100, 100, m.id)
        controller.move(110, 130)
        assert m.anchor.as_tuple() == pytest.approx((start[0] + 10, start[1] + 30))
        controller.release()
        assert isinstance(controller.state, Idle)

    def test_drag_is_relative_to_press_point(self, controller):
        """Every move is measured from the press, not from the last move."""
        m = controller.measurements.get("front_overall_horizontal")
        start = m.anchor.as_tuple()
        controller.press(0, 0, m.id)
        controller.move(5, 0)
        controller.move(8, 0)
        assert m.anchor.x == pytest.approx(start[0] + 8)

    def test_drag_scaled_by_zoom(self, view):
        mset = MeasurementSet(view)
        mset.generate()
        ctl = InteractionController(mset, ViewTransform(pan_x=50, pan_y=50, zoom=2.0))
        m = mset.get("front_overall_vertical")
        start = m.anchor.as_tuple()
        ctl.press(200, 200, m.id)
        ctl.move(220, 180)
        assert m.anchor.as_tuple() == pytest.approx((start[0] + 10, start[1] - 10))

    def test_drag_changes_layout(self, controller):
        m = controller.measurements.get("front_overall_horizontal")
        before = dict(controller.measurements.layouts())[m.id].dimension_line
        controller.press(0, 0, m.id)
        controller.move(0, 15)
        controller.release()
        after = dict(controller.measurements.layouts())[m.id].dimension_line
        assert after[0][1] == pytest.approx(before[0][1] + 15)

    def test_release_without_press(self, controller):
        controller.release()
        assert isinstance(controller.state, Idle)

    def test_press_on_unknown_label_pans(self, controller):
        assert isinstance(controller.press(0, 0, "nope"), Panning)


class TestPanning:
    """Test panning by dragging the background."""

    def test_pan(self, controller):
        controller.press(10, 10)
        controller.move(25, 5)
        assert (controller.transform.pan_x, controller.transform.pan_y) == (15, -5)
        controller.release()
        assert isinstance(controller.state, Idle)

    def test_second_press_ignored_while_panning(self, controller):
        first = controller.press(10, 10)
        assert controller.press(50, 50, "front_overall_horizontal") is first

    def test_wheel(self, controller):
        assert controller.wheel(0, 0, -120) == pytest.approx(1.1)

    def test_reset(self, controller):
        controller.press(0, 0, "front_overall_horizontal")
        controller.transform.pan_by(3, 3)
        controller.reset()
        assert isinstance(controller.state, Idle)
        assert len(controller.selection) == 0
        assert controller.transform.pan_x == 0.0


# =============================================================================
# CLICK TESTS
# =============================================================================


class TestClicks:
    """Test click-to-toggle and two-click custom lines."""

    def test_click_element_toggles(self, controller, view):
        line = view.element_by_id("front_visible_0")
        m = controller.click_element(line)
        assert m.id == line.id
        assert controller.click_element(line) is None
        assert line.id not in controller.measurements

    def test_click_element_ignored_in_draw_mode(self, controller, view):
        controller.set_mode("draw")
        assert controller.click_element(view.element_by_id("front_visible_0")) is None

    def test_two_click_line(self, controller):
        controller.set_mode("draw")
        assert controller.click(30, 30) is None
        assert isinstance(controller.state, FirstPointCaptured)
        line = controller.click(70, 40)
        assert isinstance(line, CustomLine)
        assert line.start == (30.0, 30.0)
        assert line.end == (70.0, 40.0)
        assert controller.custom_lines == [line]
        assert isinstance(controller.state, Idle)

    def test_click_snaps_to_endpoint(self, controller):
        controller.set_mode("draw")
        controller.click(98, 2)
        line = controller.click(52, 24)
        assert line.start == (100.0, 0.0)
        assert line.end == pytest.approx((50.0, 25.0))
        assert line.length == pytest.approx(((50.0 ** 2) + (25.0 ** 2)) ** 0.5)

    def test_click_ignored_in_measure_mode(self, controller):
        assert controller.click(10, 10) is None
        assert isinstance(controller.state, Idle)

    def test_custom_line_svg(self):
        svg = CustomLine("custom_line_0", (0, 0), (10, 5)).to_svg()
        assert svg.startswith('<line id="custom_line_0" x1="0.00" y1="0.00" x2="10.00" y2="5.00"')

    def test_custom_line_svg_escapes_id(self):
        svg = CustomLine('a"&b', (0, 0), (10, 5)).to_svg()
        assert svg.startswith("<line id='a\"&amp;b' ")

    def test_invalid_mode(self, controller):
        with pytest.raises(ValueError):
            controller.set_mode("erase")


# =============================================================================
# HIT TEST TESTS
# =============================================================================


class TestHitTesting:
    """Test endpoint grabs and snapping."""

    @pytest.fixture
    def elements(self):
        return classify_paths(["M0 0L10 0", "M20 20L30 20", "M55 25A5 5 0 0 1 45 25"])

    def test_grab_end(self, elements):
        element, which = find_grabbed_endpoint((10.5, 0.5), elements)
        assert element.id == "view_visible_0"
        assert which == "end"

    def test_grab_closest(self, elements):
        element, which = find_grabbed_endpoint((22, 20), elements, threshold=15)
        assert element.id == "view_visible_1"
        assert which == "start"

    def test_threshold_shrinks_with_zoom(self, elements):
        assert find_grabbed_endpoint((11, 0), elements, zoom=1.0) is not None
        assert find_grabbed_endpoint((11, 0), elements, zoom=10.0) is None

    def test_nothing_in_range(self, elements):
        assert find_grabbed_endpoint((50, 50), elements) is None

    def test_snap_to_circle_centre(self, elements):
        assert snap_point((51, 26), elements) == pytest.approx((50.0, 25.0))

    def test_no_snap_out_of_range(self, elements):
        assert snap_point((80, 80), elements) == (80, 80)


class TestSelectionSet:
    """Test the immutable selection value."""

    def test_operations(self):
        sel = SelectionSet().add("a").add("b")
        assert "a" in sel and "b" in sel
        assert len(sel.remove("a")) == 1
        assert "a" not in sel.toggle("a")
        assert "c" in sel.toggle("c")
        assert len(sel.clear()) == 0

    def test_immutable(self):
        sel = SelectionSet()
        sel.add("a")
        assert len(sel) == 0
