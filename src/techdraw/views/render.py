"""
SVG rendering of projection views.

Visible edges are drawn solid, hidden edges thin and dashed. Elements whose
id is in the selection are drawn in the highlight colour so a clicked
element stands out while its measurement is shown.
"""

from __future__ import annotations

from typing import Container, Iterable
from xml.sax.saxutils import quoteattr

from ..annotations.constants import (
    HIDDEN_COLOR,
    HIDDEN_DASH,
    HIDDEN_STROKE_WIDTH,
    HIGHLIGHT_COLOR,
    VISIBLE_COLOR,
    VISIBLE_STROKE_WIDTH,
)
from ..geometry.primitives import GeometryElement
from .projection import ProjectionView


def render_element_svg(
    element: GeometryElement,
    highlighted: bool = False,
    highlight_color: str = HIGHLIGHT_COLOR,
) -> str:
    """Render one element as an SVG path carrying its id and type."""
    if element.visibility == "hidden":
        color, width, dash = HIDDEN_COLOR, HIDDEN_STROKE_WIDTH, f' stroke-dasharray="{HIDDEN_DASH}"'
    else:
        color, width, dash = VISIBLE_COLOR, VISIBLE_STROKE_WIDTH, ""
    if highlighted:
        color = highlight_color
    return (
        f'<path id={quoteattr(element.id)} class="element element-{element.type}" d={quoteattr(element.raw)} '
        f'fill="none" stroke="{color}" stroke-width="{width}"{dash}/>'
    )


def render_elements_svg(
    elements: Iterable[GeometryElement],
    selected: Container[str] = frozenset(),
    highlight_color: str = HIGHLIGHT_COLOR,
    group_id: str = "elements",
) -> str:
    """Render elements as one group, hidden edges first so visible ones draw on top."""
    ordered = sorted(elements, key=lambda el: el.visibility != "hidden")
    parts = [f'<g id={quoteattr(group_id)}>']
    for el in ordered:
        parts.append(render_element_svg(el, el.id in selected, highlight_color))
    parts.append('</g>')
    return '\n'.join(parts)


def render_view_svg(
    view: ProjectionView,
    overlay: str = "",
    selected: Container[str] = frozenset(),
    highlight_color: str = HIGHLIGHT_COLOR,
    transform: str | None = None,
) -> str:
    """
    Standalone SVG document for one view.

    Args:
        view: View to render; its combined frame becomes the viewBox
        overlay: Extra SVG (usually rendered measurements) drawn above the geometry
        selected: Ids to highlight
        highlight_color: Stroke colour for highlighted elements
        transform: Optional pan/zoom transform attribute for the content group

    Returns:
        SVG document string
    """
    frame = view.combined_frame
    content_attr = f" transform={quoteattr(transform)}" if transform else ""
    elements_svg = render_elements_svg(
        view.elements, selected, highlight_color, group_id=f"{view.name}_elements"
    )
    return f'''<svg xmlns="http://www.w3.org/2000/svg" viewBox="{frame.to_string()}">
<g class="view" data-view={quoteattr(view.name)}{content_attr}>
{elements_svg}
{overlay}
</g>
</svg>
'''
