"""
Dimension Layout Engine

Computes the render geometry of a dimension from the measured geometry and
the current label anchor. The anchor is what the user drags; every drag
step re-runs the layout, so these functions are pure and cheap.

Line dimensions:
- Dimension line parallel to the measured segment, offset towards the anchor
  (never closer than a minimum offset)
- Extension lines with a small gap at the geometry and an overhang past the
  dimension line
- Triangular arrowheads at both ends
- The dimension line is broken around the label; the break is centred on
  the anchor's projection and never enters the arrowhead zones

Circle dimensions:
- A diameter chord through the centre, turned towards the anchor, broken
  and arrowed like a line dimension
- Small circles get a leader from the centre and a centre crosshair instead

Components:
- DimensionStyle: styling and placement configuration
- LineDimensionLayout / CircleDimensionLayout: computed geometry
- layout_line_dimension / layout_circle_dimension: the layout algorithms
- render_dimension_svg / render_measurements_svg: SVG output
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from xml.sax.saxutils import escape, quoteattr

from ..geometry.constants import MIN_SEGMENT_LENGTH, NORMALIZE_EPSILON
from ..geometry.vectors import Point, add, dot, length, midpoint, scale, sub
from .constants import (
    ARROW_HALF_WIDTH_FACTOR,
    ARROW_SIZE,
    CROSSHAIR_MAX_SIZE,
    DIAMETER_SYMBOL,
    DIMENSION_COLOR,
    DIMENSION_FONT_FAMILY,
    DIMENSION_FONT_SIZE,
    DIMENSION_LINE_WIDTH,
    EXTENSION_LINE_GAP,
    EXTENSION_LINE_OVERHANG,
    LEADER_LENGTH_FACTOR,
    LEADER_TEXT_CLEARANCE,
    MIN_DIMENSION_OFFSET,
    RADIUS_PREFIX,
    SMALL_CIRCLE_FACTOR,
    TEXT_WIDTH_FACTOR,
    VALUE_PRECISION,
    VERTICAL_TEXT_ANGLE,
)

Segment = tuple[Point, Point]

ARROW_STYLES = ("filled", "open", "tick")


# =============================================================================
# STYLE
# =============================================================================

@dataclass
class DimensionStyle:
    """
    Dimension styling and placement configuration.

    The offset, gap and tolerance values have no derivation beyond looking
    right at typical drawing scales, so they are all overridable.
    """
    # Line styling
    line_stroke_width: float = DIMENSION_LINE_WIDTH
    line_color: str = DIMENSION_COLOR
    extension_line_gap: float = EXTENSION_LINE_GAP
    extension_line_overhang: float = EXTENSION_LINE_OVERHANG

    # Arrow styling
    arrow_size: float = ARROW_SIZE
    arrow_half_width_factor: float = ARROW_HALF_WIDTH_FACTOR
    arrow_style: str = "filled"  # "filled", "open", "tick"

    # Text styling
    font_family: str = DIMENSION_FONT_FAMILY
    font_size: float = DIMENSION_FONT_SIZE
    text_width_factor: float = TEXT_WIDTH_FACTOR
    precision: int = VALUE_PRECISION
    show_units: bool = False

    # Placement parameters
    min_offset: float = MIN_DIMENSION_OFFSET
    small_circle_factor: float = SMALL_CIRCLE_FACTOR

    def __post_init__(self):
        for name in ("line_stroke_width", "arrow_size", "font_size", "text_width_factor"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("extension_line_gap", "extension_line_overhang", "min_offset"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.arrow_style not in ARROW_STYLES:
            raise ValueError(f"arrow_style must be one of {ARROW_STYLES}, got {self.arrow_style!r}")
        if self.precision < 0:
            raise ValueError(f"precision must be >= 0, got {self.precision}")

    def text_width(self, text: str) -> float:
        """Estimated rendered width of a label."""
        return len(text) * self.font_size * self.text_width_factor

    def gap_size(self, text: str) -> float:
        """Length of the dimension-line break that holds a label."""
        return self.text_width(text) + 2 * self.min_offset


# =============================================================================
# LABELS
# =============================================================================

def format_value(value: float, precision: int = VALUE_PRECISION) -> str:
    """Fixed precision with trailing zeros removed ("12.50" -> "12.5")."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def format_measurement_text(
    kind: str,
    value: float,
    override: str | None = None,
    precision: int = VALUE_PRECISION,
    unit: str | None = None,
) -> str:
    """
    Label text for a measurement.

    Args:
        kind: "line", "horizontal", "vertical", "diameter" or "radius"
        value: Measured value
        override: User text; wins when not empty
        precision: Decimal places before trailing zeros are stripped
        unit: Appended after a space when given

    Returns:
        Display string
    """
    if override:
        return override

    number = format_value(value, precision)
    if kind == "diameter":
        text = f"{DIAMETER_SYMBOL}{number}"
    elif kind == "radius":
        text = f"{RADIUS_PREFIX}{number}"
    else:
        text = number
    if unit:
        text = f"{text} {unit}"
    return text


# =============================================================================
# LAYOUT RESULTS
# =============================================================================

@dataclass
class ArrowHead:
    """Triangular arrowhead; ``direction`` points from base to tip."""
    tip: Point
    base_left: Point
    base_right: Point
    direction: Point


@dataclass
class DimensionBreak:
    """
    A dimension line split around its label.

    Distances are measured from the start of the dimension line.
    """
    line_length: float
    gap_start: float
    gap_end: float

    @property
    def gap_length(self) -> float:
        return self.gap_end - self.gap_start

    @property
    def first_length(self) -> float:
        return self.gap_start

    @property
    def second_length(self) -> float:
        return self.line_length - self.gap_end


@dataclass
class LineDimensionLayout:
    """
    Render geometry for a dimension along a straight segment.

    Attributes:
        start, end: Measured points
        offset: Signed distance from the segment to the dimension line
        direction: Unit vector from start to end
        normal: Unit perpendicular (direction rotated 90 degrees CCW)
        dimension_line: Full (unbroken) dimension line
        extension_lines: One extension line per measured point
        segments: Drawn parts of the dimension line (0 to 2)
        arrows: Arrowheads at both ends of the dimension line
        gap: Where the dimension line is broken
        text: Label text
        text_position: Label centre
        text_rotation: Label rotation in degrees
    """
    start: Point
    end: Point
    offset: float
    direction: Point
    normal: Point
    dimension_line: Segment
    extension_lines: list[Segment]
    segments: list[Segment]
    arrows: list[ArrowHead]
    gap: DimensionBreak
    text: str
    text_position: Point
    text_rotation: float = 0.0
    kind: str = "line"

    @property
    def length(self) -> float:
        return self.gap.line_length

    def segment_lengths(self) -> list[float]:
        return [length(sub(b, a)) for a, b in self.segments]


@dataclass
class CircleDimensionLayout:
    """
    Render geometry for a circle diameter.

    ``mode`` is "diameter" (broken chord through the centre) or "leader"
    (small circles: leader line from the centre, label outside).
    """
    center: Point
    radius: float
    angle: float
    mode: str
    text: str
    text_position: Point
    dimension_line: Segment | None = None
    segments: list[Segment] = field(default_factory=list)
    arrows: list[ArrowHead] = field(default_factory=list)
    gap: DimensionBreak | None = None
    leader: Segment | None = None
    crosshair: list[Segment] = field(default_factory=list)
    text_rotation: float = 0.0
    kind: str = "circle"


DimensionLayout = LineDimensionLayout | CircleDimensionLayout


# =============================================================================
# LAYOUT ALGORITHMS
# =============================================================================

def _arrow(tip: Point, direction: Point, style: DimensionStyle) -> ArrowHead:
    """Arrowhead with its tip at ``tip`` pointing along ``direction``."""
    base = sub(tip, scale(direction, style.arrow_size))
    half_width = style.arrow_size * style.arrow_half_width_factor
    side = scale((-direction[1], direction[0]), half_width)
    return ArrowHead(tip=tip, base_left=add(base, side), base_right=sub(base, side), direction=direction)


def break_dimension_line(
    line_length: float,
    label_position: float,
    gap_size: float,
    arrow_size: float,
) -> DimensionBreak:
    """
    Place the label gap on a dimension line.

    The gap is centred on ``label_position`` (distance from the line start)
    and clamped so it stays clear of the arrowheads at both ends. On lines
    too short for two arrowheads the clamp range collapses to the middle.
    """
    line_length = max(0.0, line_length)
    low = min(arrow_size, line_length / 2)
    high = max(line_length - arrow_size, line_length / 2)

    half = gap_size / 2
    gap_start = min(max(label_position - half, low), high)
    gap_end = min(max(label_position + half, low), high)
    if gap_end < gap_start:
        gap_end = gap_start
    return DimensionBreak(line_length=line_length, gap_start=gap_start, gap_end=gap_end)


def _broken_segments(p1: Point, u: Point, brk: DimensionBreak) -> list[Segment]:
    """Dimension-line parts either side of the gap; empty parts are left out."""
    segments: list[Segment] = []
    if brk.first_length > 0:
        segments.append((p1, add(p1, scale(u, brk.gap_start))))
    if brk.second_length > 0:
        segments.append((add(p1, scale(u, brk.gap_end)), add(p1, scale(u, brk.line_length))))
    return segments


def _text_rotation(direction: Point) -> float:
    """Labels on steep lines are turned to read bottom-to-top."""
    angle = math.degrees(math.atan2(direction[1], direction[0]))
    if VERTICAL_TEXT_ANGLE < abs(angle) < 180 - VERTICAL_TEXT_ANGLE:
        return -90.0
    return 0.0


def layout_line_dimension(
    start: Point,
    end: Point,
    anchor: Point,
    text: str,
    style: DimensionStyle | None = None,
) -> LineDimensionLayout:
    """
    Lay out a dimension for the segment start-end with its label at ``anchor``.

    Args:
        start, end: Measured points
        anchor: Label position (user-draggable)
        text: Label text, used for the gap width
        style: DimensionStyle configuration

    Returns:
        LineDimensionLayout
    """
    if style is None:
        style = DimensionStyle()

    v = sub(end, start)
    seg_len = length(v)
    if seg_len > MIN_SEGMENT_LENGTH:
        u = (v[0] / seg_len, v[1] / seg_len)
    else:
        u = (1.0, 0.0)
    n = (-u[1], u[0])

    mid = midpoint(start, end)
    offset = dot(sub(anchor, mid), n)
    if abs(offset) < style.min_offset:
        offset = math.copysign(style.min_offset, offset) if offset != 0 else style.min_offset
    side = 1.0 if offset >= 0 else -1.0

    dim_p1 = add(start, scale(n, offset))
    dim_p2 = add(end, scale(n, offset))

    extension_lines = [
        (add(start, scale(n, side * style.extension_line_gap)),
         add(dim_p1, scale(n, side * style.extension_line_overhang))),
        (add(end, scale(n, side * style.extension_line_gap)),
         add(dim_p2, scale(n, side * style.extension_line_overhang))),
    ]

    label_position = dot(sub(anchor, dim_p1), u)
    brk = break_dimension_line(seg_len, label_position, style.gap_size(text), style.arrow_size)

    return LineDimensionLayout(
        start=start,
        end=end,
        offset=offset,
        direction=u,
        normal=n,
        dimension_line=(dim_p1, dim_p2),
        extension_lines=extension_lines,
        segments=_broken_segments(dim_p1, u, brk),
        arrows=[_arrow(dim_p1, scale(u, -1.0), style), _arrow(dim_p2, u, style)],
        gap=brk,
        text=text,
        text_position=anchor,
        text_rotation=_text_rotation(u),
    )


def layout_circle_dimension(
    center: Point,
    radius: float,
    anchor: Point,
    text: str,
    style: DimensionStyle | None = None,
) -> CircleDimensionLayout:
    """
    Lay out a diameter dimension for a circle with its label at ``anchor``.

    The chord is turned to point at the anchor (horizontal when the anchor
    sits on the centre). Circles too small to hold the label inside get a
    leader line instead.
    """
    if style is None:
        style = DimensionStyle()

    to_anchor = sub(anchor, center)
    if dot(to_anchor, to_anchor) < NORMALIZE_EPSILON:
        angle = 0.0
    else:
        angle = math.atan2(to_anchor[1], to_anchor[0])
    u = (math.cos(angle), math.sin(angle))

    text_width = style.text_width(text)
    if radius * 2 < text_width * style.small_circle_factor:
        clearance = radius + LEADER_TEXT_CLEARANCE * style.min_offset
        distance = max(length(to_anchor), clearance)
        crosshair_size = min(radius * 0.5, CROSSHAIR_MAX_SIZE)
        return CircleDimensionLayout(
            center=center,
            radius=radius,
            angle=math.degrees(angle),
            mode="leader",
            text=text,
            text_position=add(center, scale(u, distance)),
            leader=(center, add(center, scale(u, distance * LEADER_LENGTH_FACTOR))),
            crosshair=[
                ((center[0] - crosshair_size, center[1]), (center[0] + crosshair_size, center[1])),
                ((center[0], center[1] - crosshair_size), (center[0], center[1] + crosshair_size)),
            ],
        )

    p1 = sub(center, scale(u, radius))
    p2 = add(center, scale(u, radius))
    # Gap limits of [-r + arrow, r - arrow] about the centre, measured from p1
    label_position = dot(to_anchor, u) + radius
    brk = break_dimension_line(2 * radius, label_position, style.gap_size(text), style.arrow_size)

    return CircleDimensionLayout(
        center=center,
        radius=radius,
        angle=math.degrees(angle),
        mode="diameter",
        text=text,
        text_position=anchor,
        dimension_line=(p1, p2),
        segments=_broken_segments(p1, u, brk),
        arrows=[_arrow(p1, scale(u, -1.0), style), _arrow(p2, u, style)],
        gap=brk,
    )


# =============================================================================
# SVG RENDERING
# =============================================================================

def _line_svg(seg: Segment, style: DimensionStyle, color: str) -> str:
    (x1, y1), (x2, y2) = seg
    return (
        f'<line x1="{x1:.2f}" y1="{y1:.2f}" x2="{x2:.2f}" y2="{y2:.2f}" '
        f'stroke="{color}" stroke-width="{style.line_stroke_width}"/>'
    )


def _render_arrow_svg(arrow: ArrowHead, style: DimensionStyle, color: str) -> str:
    """
    Render an arrowhead.

    Args:
        arrow: Computed arrowhead geometry
        style: DimensionStyle configuration
        color: Stroke / fill colour

    Returns:
        SVG element for the arrowhead
    """
    x, y = arrow.tip
    b1_x, b1_y = arrow.base_left
    b2_x, b2_y = arrow.base_right

    if style.arrow_style == "filled":
        return (
            f'<polygon points="{x:.2f},{y:.2f} {b1_x:.2f},{b1_y:.2f} {b2_x:.2f},{b2_y:.2f}" '
            f'fill="{color}" stroke="none"/>'
        )
    elif style.arrow_style == "tick":
        # 45-degree tick mark (architectural style) across the tip
        tick_len = style.arrow_size * 0.5
        dx, dy = arrow.direction
        tx = (dx - dy) * tick_len * math.sqrt(0.5)
        ty = (dy + dx) * tick_len * math.sqrt(0.5)
        return (
            f'<line x1="{x - tx:.2f}" y1="{y - ty:.2f}" '
            f'x2="{x + tx:.2f}" y2="{y + ty:.2f}" '
            f'stroke="{color}" stroke-width="{style.line_stroke_width}"/>'
        )
    else:  # open
        return (
            f'<polyline points="{b1_x:.2f},{b1_y:.2f} {x:.2f},{y:.2f} {b2_x:.2f},{b2_y:.2f}" '
            f'fill="none" stroke="{color}" stroke-width="{style.line_stroke_width}"/>'
        )


def _text_svg(layout: DimensionLayout, style: DimensionStyle, color: str) -> str:
    tx, ty = layout.text_position
    transform = ""
    if layout.text_rotation:
        transform = f' transform="rotate({layout.text_rotation:.1f}, {tx:.2f}, {ty:.2f})"'
    return (
        f'<text x="{tx:.2f}" y="{ty:.2f}" '
        f'text-anchor="middle" '
        f'dominant-baseline="middle" '
        f'font-family="{style.font_family}" '
        f'font-size="{style.font_size}" '
        f'fill="{color}"{transform}>'
        f'{escape(layout.text)}</text>'
    )


def render_dimension_svg(
    layout: DimensionLayout,
    style: DimensionStyle | None = None,
    dimension_id: str | None = None,
    highlight_color: str | None = None,
) -> str:
    """
    Render one laid-out dimension as an SVG group.

    Args:
        layout: Result of layout_line_dimension / layout_circle_dimension
        style: DimensionStyle configuration
        dimension_id: Id for the group, so a host UI can hit-test it
        highlight_color: Overrides the line colour for selected dimensions

    Returns:
        SVG string for the complete dimension
    """
    if style is None:
        style = DimensionStyle()
    color = highlight_color or style.line_color

    id_attr = f" data-measurement={quoteattr(dimension_id)}" if dimension_id else ""
    parts: list[str] = [f'<g{id_attr} class="measurement-group">']

    if isinstance(layout, LineDimensionLayout):
        for seg in layout.extension_lines:
            parts.append("  " + _line_svg(seg, style, color))

    if isinstance(layout, CircleDimensionLayout) and layout.mode == "leader":
        for seg in layout.crosshair:
            parts.append("  " + _line_svg(seg, style, color))
        if layout.leader is not None:
            parts.append("  " + _line_svg(layout.leader, style, color))
    else:
        for seg in layout.segments:
            parts.append("  " + _line_svg(seg, style, color))
        for arrow in layout.arrows:
            parts.append("  " + _render_arrow_svg(arrow, style, color))

    parts.append("  " + _text_svg(layout, style, color))
    parts.append("</g>")
    return "\n".join(parts)


def render_measurements_svg(
    layouts: list[tuple[str, DimensionLayout]],
    style: DimensionStyle | None = None,
    group_id: str = "dimensions",
    selected: frozenset[str] = frozenset(),
    highlight_color: str | None = None,
) -> str:
    """
    Render several dimensions as one SVG group.

    Args:
        layouts: (dimension id, layout) pairs
        style: DimensionStyle configuration
        group_id: ID for the SVG group element
        selected: Dimension ids drawn in the highlight colour
        highlight_color: Colour for selected dimensions

    Returns:
        SVG string containing all dimensions, empty when there are none
    """
    if style is None:
        style = DimensionStyle()

    if not layouts:
        return ""

    parts: list[str] = [f"<g id={quoteattr(group_id)}>"]
    for dimension_id, layout in layouts:
        color = highlight_color if dimension_id in selected else None
        dim_svg = render_dimension_svg(layout, style, dimension_id, color)
        parts.append("  " + dim_svg.replace("\n", "\n  "))
    parts.append("</g>")

    return "\n".join(parts)
