"""
Measurement Engine

Derives measurement records from the classified elements of one projection
view, keeps the set of active measurements for that view, and persists them
as JSON.

Measurement kinds (``orientation``):
- "horizontal" / "vertical": overall span of the view's geometry
- "diameter": one circle
- "line": one line element

A measurement references elements by id only. When a view is regenerated
and an element disappears, every measurement that references it is dropped
rather than rendered against stale geometry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..geometry.primitives import (
    BoundingBox,
    CircleData,
    EllipseData,
    GeometryElement,
    LineData,
)
from ..geometry.vectors import Point
from ..views.projection import ProjectionView
from .constants import DEFAULT_UNIT, LINE_LABEL_LIFT, OVERALL_DIMENSION_OFFSET
from .dimensions import (
    DimensionLayout,
    DimensionStyle,
    format_measurement_text,
    layout_circle_dimension,
    layout_line_dimension,
    render_measurements_svg,
)

logger = logging.getLogger(__name__)

AXES = ("horizontal", "vertical")
ORIENTATIONS = ("horizontal", "vertical", "diameter", "line")

# Element types that take part in overall span measurements
SPAN_TYPES = ("line", "circle", "ellipse")


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class Anchor:
    """Mutable label position; drags move it in place."""
    x: float
    y: float

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def as_tuple(self) -> Point:
        return (self.x, self.y)


@dataclass
class Measurement:
    """
    A single measurement annotation.

    Attributes:
        id: Unique within the owning view
        orientation: "horizontal", "vertical", "diameter" or "line"
        from_element_id: Element at the near end (or the measured element)
        to_element_id: Element at the far end (same as from for single-element kinds)
        value: Measured value in drawing units
        unit: Unit label
        anchor: Label position, mutated by drags
        override_text: User-entered label replacing the computed one
    """
    id: str
    orientation: str
    from_element_id: str
    to_element_id: str
    value: float
    unit: str = DEFAULT_UNIT
    anchor: Anchor = field(default_factory=lambda: Anchor(0.0, 0.0))
    override_text: str | None = None

    def __post_init__(self):
        if self.orientation not in ORIENTATIONS:
            raise ValueError(f"orientation must be one of {ORIENTATIONS}, got {self.orientation!r}")
        if not isinstance(self.anchor, Anchor):
            # Tuples and dicts from callers / JSON
            if isinstance(self.anchor, dict):
                self.anchor = Anchor(float(self.anchor["x"]), float(self.anchor["y"]))
            else:
                self.anchor = Anchor(float(self.anchor[0]), float(self.anchor[1]))

    @property
    def element_ids(self) -> tuple[str, str]:
        return (self.from_element_id, self.to_element_id)

    def to_record(self) -> dict:
        """Persistence record (JSON-ready)."""
        record = {
            "id": self.id,
            "orientation": self.orientation,
            "fromElementId": self.from_element_id,
            "toElementId": self.to_element_id,
            "value": self.value,
            "unit": self.unit,
            "anchor": {"x": self.anchor.x, "y": self.anchor.y},
        }
        if self.override_text:
            record["overrideText"] = self.override_text
        return record

    @classmethod
    def from_record(cls, record: dict) -> Measurement:
        """
        Build a measurement from a persistence record.

        Raises:
            ValueError: If a required key is missing or has the wrong type
        """
        try:
            return cls(
                id=str(record["id"]),
                orientation=str(record["orientation"]),
                from_element_id=str(record["fromElementId"]),
                to_element_id=str(record["toElementId"]),
                value=float(record["value"]),
                unit=str(record.get("unit", DEFAULT_UNIT)),
                anchor=Anchor(float(record["anchor"]["x"]), float(record["anchor"]["y"])),
                override_text=record.get("overrideText"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid measurement record: {e}") from e


@dataclass
class MeasurementOptions:
    """Which measurements batch generation creates, and where."""
    horizontal: bool = True
    vertical: bool = True
    diameters: bool = True
    unit: str = DEFAULT_UNIT
    overall_offset: float = OVERALL_DIMENSION_OFFSET
    line_label_lift: float = LINE_LABEL_LIFT


# =============================================================================
# OVERALL SPAN MEASUREMENTS
# =============================================================================

def _axis_index(axis: str) -> int:
    if axis not in AXES:
        raise ValueError(f"axis must be one of {AXES}, got {axis!r}")
    return 0 if axis == "horizontal" else 1


def effective_coordinate(element: GeometryElement, axis: str) -> float:
    """Sort key along an axis: centre for circles/ellipses, lower endpoint for lines."""
    i = _axis_index(axis)
    data = element.data
    if isinstance(data, (CircleData, EllipseData)):
        return data.center[i]
    if isinstance(data, LineData):
        return min(data.start[i], data.end[i])
    raise ValueError(f"Element type {element.type!r} has no span coordinate")


def element_extent(element: GeometryElement, axis: str) -> tuple[float, float]:
    """
    (low, high) extent of an element along an axis.

    Ellipses use radius_x horizontally and radius_y vertically.
    """
    i = _axis_index(axis)
    data = element.data
    if isinstance(data, CircleData):
        return (data.center[i] - data.radius, data.center[i] + data.radius)
    if isinstance(data, EllipseData):
        r = data.radius_x if i == 0 else data.radius_y
        return (data.center[i] - r, data.center[i] + r)
    if isinstance(data, LineData):
        return (min(data.start[i], data.end[i]), max(data.start[i], data.end[i]))
    raise ValueError(f"Element type {element.type!r} has no extent")


def view_key(view: ProjectionView) -> str:
    """Prefix shared by the ids of a view's own measurements."""
    prefix = view.part_name.strip().replace(" ", "_") if view.part_name else ""
    return f"{prefix}_{view.name}" if prefix else view.name


def create_overall_measurement(
    elements: Iterable[GeometryElement],
    bounding_box: BoundingBox,
    axis: str,
    options: MeasurementOptions | None = None,
    id_prefix: str = "view",
) -> Measurement | None:
    """
    Overall span of the view geometry along one axis.

    The eligible elements are sorted by effective coordinate; the first and
    last of them define the span, using their true extents. The label is
    placed ``overall_offset`` units below (horizontal) or right of
    (vertical) the bounding box, centred on the span.

    Returns:
        Measurement, or None with fewer than two eligible elements
    """
    if options is None:
        options = MeasurementOptions()
    _axis_index(axis)

    eligible = [el for el in elements if el.referenceable and el.type in SPAN_TYPES]
    if len(eligible) < 2:
        return None

    ordered = sorted(eligible, key=lambda el: effective_coordinate(el, axis))
    first, last = ordered[0], ordered[-1]
    low = element_extent(first, axis)[0]
    high = element_extent(last, axis)[1]
    span_mid = (low + high) / 2

    if axis == "horizontal":
        anchor = Anchor(span_mid, bounding_box.y + bounding_box.height + options.overall_offset)
    else:
        anchor = Anchor(bounding_box.x + bounding_box.width + options.overall_offset, span_mid)

    return Measurement(
        id=f"{id_prefix}_overall_{axis}",
        orientation=axis,
        from_element_id=first.id,
        to_element_id=last.id,
        value=high - low,
        unit=options.unit,
        anchor=anchor,
    )


def create_diameter_measurement(
    element: GeometryElement,
    unit: str = DEFAULT_UNIT,
    measurement_id: str | None = None,
) -> Measurement | None:
    """Diameter measurement with the label on the circle centre."""
    data = element.data
    if not isinstance(data, CircleData):
        return None
    return Measurement(
        id=measurement_id or f"{element.id}_diameter",
        orientation="diameter",
        from_element_id=element.id,
        to_element_id=element.id,
        value=data.diameter,
        unit=unit,
        anchor=Anchor(*data.center),
    )


def create_line_measurement(
    element: GeometryElement,
    unit: str = DEFAULT_UNIT,
    label_lift: float = LINE_LABEL_LIFT,
    measurement_id: str | None = None,
) -> Measurement | None:
    """Length measurement with the label just above the line midpoint."""
    data = element.data
    if not isinstance(data, LineData):
        return None
    mx, my = data.midpoint
    return Measurement(
        id=measurement_id or element.id,
        orientation="line",
        from_element_id=element.id,
        to_element_id=element.id,
        value=data.length,
        unit=unit,
        anchor=Anchor(mx, my - label_lift),
    )


def create_measurements(
    view: ProjectionView,
    options: MeasurementOptions | None = None,
) -> list[Measurement]:
    """
    Batch-generate the standard measurements of a view.

    Both visibility layers are pooled. Produces the overall horizontal and
    vertical spans and one diameter per circle, as enabled in ``options``.
    """
    if options is None:
        options = MeasurementOptions()

    elements = view.referenceable_elements()
    bbox = view.bounding_box
    prefix = view_key(view)
    measurements: list[Measurement] = []

    for axis, enabled in (("horizontal", options.horizontal), ("vertical", options.vertical)):
        if not enabled:
            continue
        m = create_overall_measurement(elements, bbox, axis, options, id_prefix=prefix)
        if m is not None:
            measurements.append(m)

    if options.diameters:
        for el in elements:
            m = create_diameter_measurement(el, options.unit)
            if m is not None:
                measurements.append(m)

    logger.debug(f"Created {len(measurements)} measurements for view {prefix}")
    return measurements


# =============================================================================
# LAYOUT
# =============================================================================

def layout_measurement(
    measurement: Measurement,
    view: ProjectionView,
    style: DimensionStyle | None = None,
) -> DimensionLayout | None:
    """
    Compute render geometry for a measurement against the current view.

    Overall spans are measured from the edge of the view's bounding box
    (bottom edge for horizontal, right edge for vertical) at the span
    extents. Returns None when a referenced element no longer exists or no
    longer has a matching type.
    """
    if style is None:
        style = DimensionStyle()

    first = view.element_by_id(measurement.from_element_id)
    last = view.element_by_id(measurement.to_element_id)
    if first is None or last is None:
        logger.debug(f"Measurement {measurement.id} references a missing element")
        return None

    unit = measurement.unit if style.show_units else None
    anchor = measurement.anchor.as_tuple()
    kind = measurement.orientation

    if kind == "diameter":
        if not isinstance(first.data, CircleData):
            return None
        text = format_measurement_text(kind, first.data.diameter, measurement.override_text,
                                       style.precision, unit)
        return layout_circle_dimension(first.data.center, first.data.radius, anchor, text, style)

    if kind == "line":
        if not isinstance(first.data, LineData):
            return None
        text = format_measurement_text(kind, first.data.length, measurement.override_text,
                                       style.precision, unit)
        return layout_line_dimension(first.data.start, first.data.end, anchor, text, style)

    try:
        low = element_extent(first, kind)[0]
        high = element_extent(last, kind)[1]
    except ValueError:
        return None

    bbox = view.bounding_box
    text = format_measurement_text(kind, high - low, measurement.override_text,
                                   style.precision, unit)
    if kind == "horizontal":
        start, end = (low, bbox.bottom), (high, bbox.bottom)
    else:
        start, end = (bbox.right, low), (bbox.right, high)
    return layout_line_dimension(start, end, anchor, text, style)


# =============================================================================
# MEASUREMENT SET
# =============================================================================

class MeasurementSet:
    """
    The active measurements of one projection view.

    Owned by a single view; measurements are not shared across views.
    Insertion order is kept for rendering and export.
    """

    def __init__(self, view: ProjectionView, options: MeasurementOptions | None = None):
        self.view = view
        self.options = options or MeasurementOptions()
        self._items: dict[str, Measurement] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Measurement]:
        return iter(list(self._items.values()))

    def __contains__(self, measurement_id: object) -> bool:
        return measurement_id in self._items

    def get(self, measurement_id: str) -> Measurement | None:
        return self._items.get(measurement_id)

    def add(self, measurement: Measurement) -> bool:
        """
        Add a measurement if its elements exist in the view.

        Returns:
            True if added, False if it referenced a missing element
        """
        if not all(eid in self.view for eid in measurement.element_ids):
            logger.debug(f"Dropping measurement {measurement.id}: element missing from view")
            return False
        self._items[measurement.id] = measurement
        return True

    def remove(self, measurement_id: str) -> Measurement | None:
        return self._items.pop(measurement_id, None)

    def clear(self) -> None:
        self._items.clear()

    def generate(self) -> list[Measurement]:
        """Add the batch measurements of the view (see create_measurements)."""
        added = [m for m in create_measurements(self.view, self.options) if self.add(m)]
        return added

    def toggle(self, element: GeometryElement) -> Measurement | None:
        """
        Click-to-toggle: measure a line or circle, or remove its measurement.

        Returns:
            The new measurement, or None when one was removed or the
            element type is not measurable this way
        """
        # A circle may already carry the diameter added by generate()
        for existing_id in (element.id, f"{element.id}_diameter"):
            if existing_id in self._items:
                self.remove(existing_id)
                logger.debug(f"Removed measurement {existing_id}")
                return None

        if isinstance(element.data, LineData):
            m = create_line_measurement(element, self.options.unit, self.options.line_label_lift,
                                        measurement_id=element.id)
        elif isinstance(element.data, CircleData):
            m = create_diameter_measurement(element, self.options.unit, measurement_id=element.id)
        else:
            logger.debug(f"Element {element.id} of type {element.type} is not measurable")
            return None

        if m is not None and self.add(m):
            logger.debug(f"Added measurement {m.id} at {m.anchor.as_tuple()}")
            return m
        return None

    def move_anchor(self, measurement_id: str, x: float, y: float) -> bool:
        """Move a label; layout is recomputed on the next render."""
        m = self._items.get(measurement_id)
        if m is None:
            return False
        m.anchor.move_to(x, y)
        return True

    def rebind(self, view: ProjectionView) -> list[str]:
        """
        Switch to a regenerated view, dropping orphaned measurements.

        Returns:
            Ids of the dropped measurements
        """
        self.view = view
        dropped = [
            m.id for m in self._items.values()
            if not all(eid in view for eid in m.element_ids)
        ]
        for mid in dropped:
            del self._items[mid]
        if dropped:
            logger.debug(f"Dropped {len(dropped)} measurements after view regeneration")
        return dropped

    def layouts(self, style: DimensionStyle | None = None) -> list[tuple[str, DimensionLayout]]:
        """(id, layout) for every measurement that still resolves against the view."""
        result: list[tuple[str, DimensionLayout]] = []
        for m in self._items.values():
            layout = layout_measurement(m, self.view, style)
            if layout is not None:
                result.append((m.id, layout))
        return result

    def render_svg(
        self,
        style: DimensionStyle | None = None,
        selected: frozenset[str] = frozenset(),
        highlight_color: str | None = None,
    ) -> str:
        return render_measurements_svg(
            self.layouts(style),
            style,
            group_id=f"{view_key(self.view)}_measurements",
            selected=selected,
            highlight_color=highlight_color,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_records(self) -> list[dict]:
        return [m.to_record() for m in self._items.values()]

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_records(), indent=indent, ensure_ascii=False)

    def load_records(self, records: Iterable[dict]) -> int:
        """
        Add measurements from persistence records.

        Malformed records are skipped with a warning; records referencing
        elements missing from the view are dropped silently.

        Returns:
            Number of measurements added
        """
        added = 0
        for record in records:
            try:
                m = Measurement.from_record(record)
            except ValueError as e:
                logger.warning(f"Skipping measurement record: {e}")
                continue
            if self.add(m):
                added += 1
        return added

    @classmethod
    def from_json(
        cls,
        text: str,
        view: ProjectionView,
        options: MeasurementOptions | None = None,
    ) -> MeasurementSet:
        """
        Restore measurements exported with ``to_json`` against a view.

        Raises:
            ValueError: If the text is not a JSON list
        """
        records = json.loads(text)
        if not isinstance(records, list):
            raise ValueError("Measurement JSON must be a list of records")
        mset = cls(view, options)
        mset.load_records(records)
        return mset
