"""
Primitive Classifier

Turns raw path strings from the projection kernel into typed geometry
elements that annotations can reference.

Classification order (first match wins):
1. Line      - starts with M, exactly one L, no A
2. Polyline  - starts with M, two or more L
3. Circle    - contains A, radii equal within tolerance
   Ellipse   - contains A, radii differ
4. Other     - anything else; kept for display, never measurable

Any parse failure inside a branch falls through to "other" instead of
raising, so one bad path never stops a view from rendering.

Components:
- LineData / PolylineData / CircleData / EllipseData / OtherData: payloads
- GeometryElement: tagged element, ``type`` follows the payload class
- ClassifierConfig: tolerances
- classify_path / classify_paths: the classifier entry points
- arc_center: SVG endpoint-to-center arc conversion
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import ClassVar, Iterable, Union

import numpy as np

from .constants import DENOMINATOR_EPSILON, RADIUS_TOLERANCE
from .path_data import parse_path_data
from .vectors import Point

logger = logging.getLogger(__name__)

_NUM = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_SEP = r"[\s,]*"
_NUMBER_RE = re.compile(_NUM)
_LINE_RE = re.compile(
    rf"^M\s*({_NUM}){_SEP}({_NUM})\s*L\s*({_NUM}){_SEP}({_NUM})\s*(?:[Zz]\s*)?$"
)

VISIBILITIES = ("visible", "hidden")


# =============================================================================
# PAYLOADS
# =============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box as origin plus size."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> BoundingBox:
        """Bounding box of a non-empty point set."""
        arr = np.asarray(list(points), dtype=float)
        if arr.size == 0:
            raise ValueError("Cannot bound an empty point set")
        min_x, min_y = arr.min(axis=0)
        max_x, max_y = arr.max(axis=0)
        return cls(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))

    def union(self, other: BoundingBox) -> BoundingBox:
        min_x = min(self.x, other.x)
        min_y = min(self.y, other.y)
        return BoundingBox(
            min_x,
            min_y,
            max(self.right, other.right) - min_x,
            max(self.bottom, other.bottom) - min_y,
        )


@dataclass(frozen=True)
class LineData:
    """Straight segment; angle is in degrees from +x."""
    kind: ClassVar[str] = "line"

    start: Point
    end: Point
    length: float
    angle: float
    midpoint: Point


@dataclass(frozen=True)
class PolylineData:
    kind: ClassVar[str] = "polyline"

    points: tuple[Point, ...]
    segments: int
    bounding_box: BoundingBox


@dataclass(frozen=True)
class CircleData:
    kind: ClassVar[str] = "circle"

    center: Point
    radius: float
    diameter: float
    circumference: float


@dataclass(frozen=True)
class EllipseData:
    kind: ClassVar[str] = "ellipse"

    center: Point
    radius_x: float
    radius_y: float
    bounding_box: BoundingBox


@dataclass(frozen=True)
class OtherData:
    """Unclassified path; ``command_hint`` is the first character only."""
    kind: ClassVar[str] = "other"

    command_hint: str
    raw: str


GeometryData = Union[LineData, PolylineData, CircleData, EllipseData, OtherData]

REFERENCEABLE_TYPES = ("line", "polyline", "circle", "ellipse")


@dataclass(frozen=True)
class GeometryElement:
    """
    One classified path of a projected view.

    The element is immutable once classified. Its ``type`` is taken from the
    payload class, so a payload can never disagree with its tag.

    Attributes:
        id: Unique per part + view + visibility + index
        visibility: "visible" or "hidden"
        view_name: Name of the view the path was projected into
        part_name: Name of the part (may be empty for assembly views)
        index: Position of the path in its visibility layer
        data: Type-specific payload
        raw: Path string the element was classified from
    """
    id: str
    visibility: str
    view_name: str
    part_name: str
    index: int
    data: GeometryData
    raw: str = ""

    @property
    def type(self) -> str:
        return self.data.kind

    @property
    def referenceable(self) -> bool:
        """True for successfully parsed line, polyline, circle and ellipse paths."""
        return self.data.kind in REFERENCEABLE_TYPES

    def key_points(self) -> list[Point]:
        """Points used for snapping and bounds: endpoints, vertices or centre."""
        data = self.data
        if isinstance(data, LineData):
            return [data.start, data.end]
        if isinstance(data, PolylineData):
            return list(data.points)
        if isinstance(data, (CircleData, EllipseData)):
            return [data.center]
        return []

    def bounding_box(self) -> BoundingBox | None:
        """Extent of the geometry, or None for unclassified paths."""
        data = self.data
        if isinstance(data, LineData):
            return BoundingBox.from_points([data.start, data.end])
        if isinstance(data, PolylineData):
            return data.bounding_box
        if isinstance(data, CircleData):
            cx, cy = data.center
            r = data.radius
            return BoundingBox(cx - r, cy - r, 2 * r, 2 * r)
        if isinstance(data, EllipseData):
            return data.bounding_box
        return None


@dataclass
class ClassifierConfig:
    """Tolerances used by the classifier."""
    radius_tolerance: float = RADIUS_TOLERANCE

    def __post_init__(self):
        if self.radius_tolerance < 0:
            raise ValueError(f"radius_tolerance must be >= 0, got {self.radius_tolerance}")


def make_element_id(part_name: str, view_name: str, visibility: str, index: int) -> str:
    """Build an element id; whitespace in the part name becomes underscores."""
    prefix_parts = [re.sub(r"\s+", "_", part_name.strip())] if part_name and part_name.strip() else []
    prefix_parts.append(view_name)
    return "_".join(prefix_parts + [visibility, str(index)])


# =============================================================================
# ARC GEOMETRY
# =============================================================================

def arc_center(
    x1: float,
    y1: float,
    rx: float,
    ry: float,
    rotation_deg: float,
    large_arc: bool,
    sweep: bool,
    x2: float,
    y2: float,
) -> tuple[float, float, float, float]:
    """
    Convert an endpoint-parameterised arc to its centre.

    Follows the endpoint-to-center conversion of the SVG arc notes: rotate
    the half chord into the ellipse frame, scale up radii that are too small
    to span the chord, then solve for the centre on the side selected by
    the two flags.

    Args:
        x1, y1: Arc start point
        rx, ry: Ellipse radii as written in the path
        rotation_deg: Ellipse x-axis rotation in degrees
        large_arc: Large-arc flag
        sweep: Sweep flag
        x2, y2: Arc end point

    Returns:
        (cx, cy, rx, ry) with the radii after scale-up correction

    Raises:
        ValueError: For zero radii or coincident endpoints
    """
    rx = abs(rx)
    ry = abs(ry)
    if rx < DENOMINATOR_EPSILON or ry < DENOMINATOR_EPSILON:
        raise ValueError("Arc has a zero radius")
    if abs(x1 - x2) < DENOMINATOR_EPSILON and abs(y1 - y2) < DENOMINATOR_EPSILON:
        raise ValueError("Arc endpoints coincide")

    phi = math.radians(rotation_deg)
    cos_phi = math.cos(phi)
    sin_phi = math.sin(phi)

    dx2 = (x1 - x2) / 2
    dy2 = (y1 - y2) / 2
    x1p = cos_phi * dx2 + sin_phi * dy2
    y1p = -sin_phi * dx2 + cos_phi * dy2

    # Radii too small to reach between the endpoints are scaled up
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        s = math.sqrt(lam)
        rx *= s
        ry *= s

    rx2 = rx * rx
    ry2 = ry * ry
    denom = rx2 * y1p * y1p + ry2 * x1p * x1p
    if denom < DENOMINATOR_EPSILON:
        raise ValueError("Degenerate arc")

    sign = -1.0 if bool(large_arc) == bool(sweep) else 1.0
    sq = max(0.0, (rx2 * ry2 - rx2 * y1p * y1p - ry2 * x1p * x1p) / denom)
    coef = sign * math.sqrt(sq)

    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx

    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2
    return (cx, cy, rx, ry)


# =============================================================================
# CLASSIFICATION BRANCHES
# =============================================================================

def _classify_line(path: str) -> LineData | None:
    match = _LINE_RE.match(path)
    if not match:
        return None
    x1, y1, x2, y2 = (float(g) for g in match.groups())
    length = math.hypot(x2 - x1, y2 - y1)
    angle = math.degrees(math.atan2(y2 - y1, x2 - x1))
    return LineData(
        start=(x1, y1),
        end=(x2, y2),
        length=length,
        angle=angle,
        midpoint=((x1 + x2) / 2, (y1 + y2) / 2),
    )


def _classify_polyline(path: str) -> PolylineData | None:
    numbers = [float(t) for t in _NUMBER_RE.findall(path)]
    points = tuple(
        (numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)
    )
    if len(points) < 2:
        return None
    return PolylineData(
        points=points,
        segments=len(points) - 1,
        bounding_box=BoundingBox.from_points(points),
    )


def _classify_arc(path: str, config: ClassifierConfig) -> CircleData | EllipseData | None:
    commands = parse_path_data(path)
    if len(commands) < 2 or commands[0].command != "M":
        return None
    arc = next((c for c in commands[1:] if c.command == "A"), None)
    if arc is None:
        return None

    x1, y1 = commands[0].values[-2], commands[0].values[-1]
    rx, ry, rotation, large_arc, sweep, x2, y2 = arc.values[:7]
    cx, cy, fitted_rx, fitted_ry = arc_center(
        x1, y1, rx, ry, rotation, bool(large_arc), bool(sweep), x2, y2
    )
    if fitted_rx > abs(rx) or fitted_ry > abs(ry):
        logger.debug(
            f"Arc radii {abs(rx)}x{abs(ry)} too small for its chord, "
            f"using {fitted_rx:.4f}x{fitted_ry:.4f}"
        )
    rx = fitted_rx
    ry = fitted_ry
    if abs(rx - ry) < config.radius_tolerance:
        return CircleData(
            center=(cx, cy),
            radius=rx,
            diameter=2 * rx,
            circumference=2 * math.pi * rx,
        )
    return EllipseData(
        center=(cx, cy),
        radius_x=rx,
        radius_y=ry,
        bounding_box=BoundingBox(cx - rx, cy - ry, 2 * rx, 2 * ry),
    )


def _detect(path: str, config: ClassifierConfig) -> GeometryData:
    """Run the classification branches in order; see module docstring."""
    starts_with_m = path.startswith("M")
    line_count = path.count("L")

    if starts_with_m and line_count == 1 and "A" not in path:
        try:
            line = _classify_line(path)
            if line is not None:
                return line
        except (ValueError, IndexError) as e:
            logger.debug(f"Line parse failed for {path[:50]!r}: {e}")

    if starts_with_m and line_count >= 2:
        try:
            polyline = _classify_polyline(path)
            if polyline is not None:
                return polyline
        except (ValueError, IndexError) as e:
            logger.debug(f"Polyline parse failed for {path[:50]!r}: {e}")

    if "A" in path:
        try:
            arc = _classify_arc(path, config)
            if arc is not None:
                return arc
        except (ValueError, IndexError, ZeroDivisionError) as e:
            logger.debug(f"Arc parse failed for {path[:50]!r}: {e}")

    return OtherData(command_hint=path[:1], raw=path)


def classify_path(
    raw: str,
    *,
    index: int = 0,
    visibility: str = "visible",
    view_name: str = "view",
    part_name: str = "",
    config: ClassifierConfig | None = None,
) -> GeometryElement:
    """
    Classify one raw path string.

    Args:
        raw: Path string from the projection kernel
        index: Position of the path in its layer
        visibility: "visible" or "hidden"
        view_name: View the path belongs to
        part_name: Part the path belongs to
        config: Classifier tolerances

    Returns:
        GeometryElement; type "other" when nothing matched
    """
    if config is None:
        config = ClassifierConfig()
    if visibility not in VISIBILITIES:
        raise ValueError(f"visibility must be one of {VISIBILITIES}, got {visibility!r}")

    element_id = make_element_id(part_name, view_name, visibility, index)

    if not isinstance(raw, str):
        logger.debug(f"Non-string path {raw!r} for {element_id}")
        text = "" if raw is None else str(raw)
        return GeometryElement(
            element_id, visibility, view_name, part_name, index,
            OtherData(command_hint=text[:1], raw=text), raw=text,
        )

    path = raw.strip()
    data = _detect(path, config)
    return GeometryElement(
        id=element_id,
        visibility=visibility,
        view_name=view_name,
        part_name=part_name,
        index=index,
        data=data,
        raw=path,
    )


def classify_paths(
    paths: Iterable[str],
    *,
    visibility: str = "visible",
    view_name: str = "view",
    part_name: str = "",
    config: ClassifierConfig | None = None,
) -> list[GeometryElement]:
    """Classify a layer of paths, numbering them in order."""
    elements = [
        classify_path(
            path,
            index=i,
            visibility=visibility,
            view_name=view_name,
            part_name=part_name,
            config=config,
        )
        for i, path in enumerate(paths)
    ]
    counts: dict[str, int] = {}
    for el in elements:
        counts[el.type] = counts.get(el.type, 0) + 1
    logger.debug(f"Classified {len(elements)} {visibility} paths in {view_name}: {counts}")
    return elements


def count_by_type(elements: Iterable[GeometryElement]) -> dict[str, int]:
    """Number of elements per type, with every type present."""
    counts = {kind: 0 for kind in (*REFERENCEABLE_TYPES, "other")}
    for el in elements:
        counts[el.type] += 1
    return counts
