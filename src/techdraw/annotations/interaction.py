"""
Pointer interaction for annotated views.

An explicit state machine drives label drags, panning and two-click line
drawing:

    Idle --press on label--> Dragging --release--> Idle
    Idle --press elsewhere--> Panning --release--> Idle
    Idle --click (draw mode)--> FirstPointCaptured --click--> Idle (+ CustomLine)

Label drags move the measurement anchor by the screen delta mapped through
the inverse of the view transform, so a label follows the pointer at any
zoom. Endpoint grabs and snapping use thresholds in view units at zoom 1,
divided by the current zoom.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Union
from xml.sax.saxutils import quoteattr

from ..geometry.primitives import CircleData, GeometryElement, LineData
from ..geometry.vectors import Point, add, distance
from .constants import ENDPOINT_GRAB_THRESHOLD, SNAP_THRESHOLD
from .coordinate_mapper import ViewTransform
from .measurements import Measurement, MeasurementSet

logger = logging.getLogger(__name__)

MODES = ("measure", "draw")


# =============================================================================
# STATES
# =============================================================================

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class FirstPointCaptured:
    point: Point


@dataclass(frozen=True)
class Dragging:
    measurement_id: str
    start_screen: Point
    start_anchor: Point


@dataclass(frozen=True)
class Panning:
    start_screen: Point
    start_pan: Point


InteractionState = Union[Idle, FirstPointCaptured, Dragging, Panning]


# =============================================================================
# SELECTION AND USER GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class SelectionSet:
    """Immutable set of selected ids, passed to render calls for highlighting."""
    ids: frozenset[str] = frozenset()

    def __contains__(self, item: object) -> bool:
        return item in self.ids

    def __len__(self) -> int:
        return len(self.ids)

    def add(self, item_id: str) -> SelectionSet:
        return SelectionSet(self.ids | {item_id})

    def remove(self, item_id: str) -> SelectionSet:
        return SelectionSet(self.ids - {item_id})

    def toggle(self, item_id: str) -> SelectionSet:
        return self.remove(item_id) if item_id in self.ids else self.add(item_id)

    def clear(self) -> SelectionSet:
        return SelectionSet()


@dataclass(frozen=True)
class CustomLine:
    """A construction line drawn by the user with two clicks."""
    id: str
    start: Point
    end: Point

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    def to_svg(self, stroke_width: float = 0.25, color: str = "#0066cc") -> str:
        return (
            f'<line id={quoteattr(self.id)} x1="{self.start[0]:.2f}" y1="{self.start[1]:.2f}" '
            f'x2="{self.end[0]:.2f}" y2="{self.end[1]:.2f}" '
            f'stroke="{color}" stroke-width="{stroke_width}"/>'
        )


# =============================================================================
# HIT TESTING
# =============================================================================

def find_grabbed_endpoint(
    point: Point,
    elements: Iterable[GeometryElement],
    zoom: float = 1.0,
    threshold: float = ENDPOINT_GRAB_THRESHOLD,
) -> tuple[GeometryElement, str] | None:
    """
    Line endpoint under the pointer.

    Args:
        point: Pointer position in local coordinates
        elements: Candidate elements; only lines are tested
        zoom: Current zoom; the threshold shrinks as the view zooms in
        threshold: Grab radius in view units at zoom 1

    Returns:
        (element, "start" | "end") of the closest endpoint within range, or None
    """
    limit = threshold / zoom if zoom > 0 else threshold
    best: tuple[GeometryElement, str] | None = None
    best_dist = limit
    for el in elements:
        if not isinstance(el.data, LineData):
            continue
        for which, endpoint in (("start", el.data.start), ("end", el.data.end)):
            d = distance(point, endpoint)
            if d <= best_dist:
                best, best_dist = (el, which), d
    return best


def snap_point(
    point: Point,
    elements: Iterable[GeometryElement],
    zoom: float = 1.0,
    threshold: float = SNAP_THRESHOLD,
) -> Point:
    """Snap to the nearest line endpoint or circle centre within range."""
    limit = threshold / zoom if zoom > 0 else threshold
    best = point
    best_dist = limit
    for el in elements:
        if isinstance(el.data, LineData):
            candidates = (el.data.start, el.data.end)
        elif isinstance(el.data, CircleData):
            candidates = (el.data.center,)
        else:
            continue
        for c in candidates:
            d = distance(point, c)
            if d <= best_dist:
                best, best_dist = c, d
    return best


# =============================================================================
# CONTROLLER
# =============================================================================

class InteractionController:
    """
    Routes pointer events for one view to its measurements and transform.

    Pointer positions are in screen coordinates throughout.
    """

    def __init__(
        self,
        measurements: MeasurementSet,
        transform: ViewTransform | None = None,
        mode: str = "measure",
    ):
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        self.measurements = measurements
        self.transform = transform or ViewTransform()
        self.mode = mode
        self.state: InteractionState = Idle()
        self.selection = SelectionSet()
        self.custom_lines: list[CustomLine] = []

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        self.mode = mode
        self.state = Idle()

    # -------------------------------------------------------------------------
    # Drag / pan
    # -------------------------------------------------------------------------

    def press(self, x: float, y: float, measurement_id: str | None = None) -> InteractionState:
        """
        Pointer down. On a measurement label this starts a drag and selects
        the label; anywhere else it starts panning.
        """
        if isinstance(self.state, (Dragging, Panning)):
            return self.state

        m = self.measurements.get(measurement_id) if measurement_id else None
        if m is not None:
            self.state = Dragging(m.id, (x, y), m.anchor.as_tuple())
            self.selection = SelectionSet(frozenset({m.id}))
        elif not isinstance(self.state, FirstPointCaptured):
            self.state = Panning((x, y), (self.transform.pan_x, self.transform.pan_y))
        return self.state

    def move(self, x: float, y: float) -> None:
        state = self.state
        if isinstance(state, Dragging):
            delta = self.transform.screen_delta_to_local(
                x - state.start_screen[0], y - state.start_screen[1]
            )
            nx, ny = add(state.start_anchor, delta)
            self.measurements.move_anchor(state.measurement_id, nx, ny)
        elif isinstance(state, Panning):
            self.transform.pan_x = state.start_pan[0] + (x - state.start_screen[0])
            self.transform.pan_y = state.start_pan[1] + (y - state.start_screen[1])

    def release(self) -> None:
        """Pointer up; a release without a matching press does nothing."""
        if isinstance(self.state, Dragging):
            m = self.measurements.get(self.state.measurement_id)
            if m is not None:
                logger.debug(f"Moved {m.id} label to ({m.anchor.x:.2f}, {m.anchor.y:.2f})")
            self.state = Idle()
        elif isinstance(self.state, Panning):
            self.state = Idle()

    # -------------------------------------------------------------------------
    # Clicks
    # -------------------------------------------------------------------------

    def click_element(self, element: GeometryElement) -> Measurement | None:
        """Measure mode: toggle the measurement of a clicked element."""
        if self.mode != "measure":
            return None
        m = self.measurements.toggle(element)
        if m is None:
            self.selection = self.selection.remove(element.id)
        return m

    def click(self, x: float, y: float) -> CustomLine | None:
        """
        Draw mode: first click captures a (snapped) point, second click
        completes a custom line.
        """
        if self.mode != "draw":
            return None
        local = self.transform.screen_to_local(x, y)
        point = snap_point(local, self.measurements.view.elements, self.transform.zoom)

        if isinstance(self.state, FirstPointCaptured):
            line = CustomLine(f"custom_line_{len(self.custom_lines)}", self.state.point, point)
            self.custom_lines.append(line)
            self.state = Idle()
            return line

        if isinstance(self.state, Idle):
            self.state = FirstPointCaptured(point)
        return None

    def wheel(self, cx: float, cy: float, delta: float) -> float:
        return self.transform.zoom_at(cx, cy, delta)

    def reset(self) -> None:
        """Back to Idle with nothing selected and the transform reset."""
        self.state = Idle()
        self.selection = SelectionSet()
        self.transform.reset()
