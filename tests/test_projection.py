"""
Tests for projection view assembly, standard layout and view rendering.
"""

import xml.etree.ElementTree as ET

import pytest

from techdraw.geometry.primitives import BoundingBox
from techdraw.geometry.view_frame import ViewFrame
from techdraw.views.projection import (
    RawView,
    build_projection_view,
    build_standard_layout,
    normalize_part_views,
)
from techdraw.views.render import render_element_svg, render_elements_svg, render_view_svg


@pytest.fixture
def front_raw() -> RawView:
    """Front view of a plate with one hole and one hidden edge."""
    return RawView(
        name="front",
        visible_paths=["M0 0L100 0", "M0 50L100 50", "M55 25A5 5 0 0 1 45 25", ""],
        hidden_paths=["M20 0L20 50"],
        visible_frame="0 0 100 50",
        hidden_frame="0 0 100 50",
    )


# =============================================================================
# PROJECTION VIEW TESTS
# =============================================================================


class TestBuildProjectionView:
    """Test build_projection_view."""

    def test_layers_classified(self, front_raw):
        view = build_projection_view(front_raw, part_name="Plate")
        assert [el.type for el in view.visible.elements] == ["line", "line", "circle"]
        assert [el.type for el in view.hidden.elements] == ["line"]
        assert view.hidden.elements[0].id == "Plate_front_hidden_0"

    def test_blank_paths_skipped(self, front_raw):
        view = build_projection_view(front_raw)
        assert len(view.visible.paths) == 3

    def test_element_lookup(self, front_raw):
        view = build_projection_view(front_raw, part_name="Plate")
        assert "Plate_front_visible_2" in view
        assert view.element_by_id("Plate_front_visible_2").type == "circle"
        assert view.element_by_id("missing") is None

    def test_combined_frame(self):
        raw = RawView("top", ["M0 0L10 0"], ["M0 0L0 30"], "0 0 10 5", "-2 0 4 30")
        view = build_projection_view(raw)
        assert view.combined_frame == ViewFrame(-2, 0, 12, 30)

    def test_missing_frames_default(self):
        view = build_projection_view(RawView("top", ["M0 0L10 0"]))
        assert view.combined_frame == ViewFrame(0, 0, 100, 100)

    def test_bounding_box_covers_referenceable_geometry(self):
        raw = RawView("front", ["M0 0L10 0", "M5 0A5 5 0 0 1 -5 0", "Q1 1 50 50"])
        view = build_projection_view(raw)
        assert view.bounding_box == BoundingBox(-5.0, -5.0, 15.0, 10.0)

    def test_bounding_box_falls_back_to_frame(self):
        view = build_projection_view(RawView("front", ["Q1 1 2 2"], visible_frame="1 2 3 4"))
        assert view.bounding_box == BoundingBox(1, 2, 3, 4)

    def test_translation(self):
        raw = RawView("side", ["M0 0L10 0"], visible_frame="0 0 10 10")
        view = build_projection_view(raw, tx=5, ty=-5)
        line = view.visible.elements[0]
        assert line.data.start == (5.0, -5.0)
        assert line.raw == "M5 -5L15 -5"
        assert view.combined_frame == ViewFrame(5, -5, 10, 10)


# =============================================================================
# STANDARD LAYOUT TESTS
# =============================================================================


class TestStandardLayout:
    """Test build_standard_layout placement."""

    @pytest.fixture
    def views(self):
        front = RawView("front", ["M0 0L100 0"], visible_frame="0 0 100 50")
        bottom = RawView("bottom", ["M0 0L60 0"], visible_frame="0 0 60 40")
        side = RawView("side", ["M10 10L40 10"], visible_frame="10 10 30 50")
        return front, bottom, side

    def test_offsets(self, views):
        layout = build_standard_layout(*views)
        assert layout.offsets["front"] == (0.0, 0.0)
        assert layout.offsets["bottom"] == pytest.approx((20.0, 70.0))
        assert layout.offsets["side"] == pytest.approx((110.0, -10.0))

    def test_combined_frame(self, views):
        layout = build_standard_layout(*views)
        assert layout.combined_frame.to_string() == "0 0 150 110"

    def test_paths_translated(self, views):
        layout = build_standard_layout(*views)
        side = layout.views["side"]
        line = side.visible.elements[0]
        assert line.id == "standard_side_visible_0"
        assert line.data.start == (120.0, 0.0)
        assert line.data.end == (150.0, 0.0)

    def test_custom_gap(self, views):
        layout = build_standard_layout(*views, gap=10)
        assert layout.offsets["bottom"] == pytest.approx((20.0, 60.0))

    def test_front_only(self, views):
        layout = build_standard_layout(views[0])
        assert list(layout.views) == ["front"]
        assert len(layout.elements) == 1

    def test_invalid_bottom_skipped(self, views):
        front, _, side = views
        bottom = RawView("bottom", ["M0 0L1 0"], visible_frame="bad")
        layout = build_standard_layout(front, bottom, side)
        assert "bottom" not in layout.views
        assert "side" in layout.views

    def test_invalid_front_returns_none(self, views):
        _, bottom, side = views
        assert build_standard_layout(RawView("front", ["M0 0L1 0"]), bottom, side) is None


class TestNormalizePartViews:
    def test_common_size(self, front_raw):
        top = build_projection_view(RawView("top", ["M0 0L100 0"], visible_frame="0 0 100 30"))
        front = build_projection_view(front_raw)
        frames = normalize_part_views({"front": front, "top": top})
        assert frames["front"].width == pytest.approx(130.0)
        assert frames["top"].width == pytest.approx(130.0)
        assert frames["top"].height == pytest.approx(65.0)
        assert frames["top"].center == pytest.approx((50.0, 15.0))

    def test_margin_factor(self, front_raw):
        front = build_projection_view(front_raw)
        frames = normalize_part_views({"front": front}, margin_factor=1.0)
        assert frames["front"].width == pytest.approx(100.0)


# =============================================================================
# RENDERING TESTS
# =============================================================================


class TestRenderView:
    """Test SVG output of elements and views."""

    def test_hidden_element_dashed(self, front_raw):
        view = build_projection_view(front_raw)
        svg = render_element_svg(view.hidden.elements[0])
        assert 'stroke-dasharray="2,1"' in svg
        assert 'd="M20 0L20 50"' in svg

    def test_highlight(self, front_raw):
        view = build_projection_view(front_raw)
        line = view.visible.elements[0]
        svg = render_elements_svg(view.elements, selected=frozenset({line.id}))
        assert f'<path id="{line.id}" class="element element-line" d="M0 0L100 0" fill="none" stroke="#0066cc"' in svg

    def test_hidden_drawn_first(self, front_raw):
        view = build_projection_view(front_raw)
        svg = render_elements_svg(view.elements)
        assert svg.index("front_hidden_0") < svg.index("front_visible_0")

    def test_view_document(self, front_raw):
        view = build_projection_view(front_raw)
        svg = render_view_svg(view, overlay="<g id=\"overlay\"/>", transform="scale(2)")
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 50">')
        assert 'transform="scale(2)"' in svg
        assert '<g id="overlay"/>' in svg

    def test_view_name_with_markup(self):
        raw = RawView(name="A&B <left>", visible_paths=["M0 0L10 0"], visible_frame="0 0 10 10")
        root = ET.fromstring(render_view_svg(build_projection_view(raw)))
        group = root[0]
        assert group.get("data-view") == "A&B <left>"
        assert group[0].get("id") == "A&B <left>_elements"
        assert group[0][0].get("id") == "A&B <left>_visible_0"
