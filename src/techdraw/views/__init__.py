"""
Views Module

Builds annotatable projection views from raw kernel output and renders
them to SVG.

Usage:
    from techdraw.views import RawView, build_projection_view, render_view_svg

    view = build_projection_view(
        RawView("front", visible_paths, hidden_paths, "0 0 50 30"),
        part_name="Bracket",
    )
    svg = render_view_svg(view)
"""

from .projection import (
    ProjectionView,
    RawView,
    StandardLayout,
    ViewLayer,
    build_projection_view,
    build_standard_layout,
    normalize_part_views,
)
from .render import (
    render_element_svg,
    render_elements_svg,
    render_view_svg,
)

__all__ = [
    'ProjectionView',
    'RawView',
    'StandardLayout',
    'ViewLayer',
    'build_projection_view',
    'build_standard_layout',
    'normalize_part_views',
    'render_element_svg',
    'render_elements_svg',
    'render_view_svg',
]
