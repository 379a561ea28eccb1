"""
Annotations Module

Measurements, dimension layout and pointer interaction for projection views.

Features:
- Overall span and diameter measurements derived from classified elements
- Click-to-toggle measurements on lines and circles
- Dimension lines broken around their labels, with arrowheads and
  extension lines; leader dimensions for small circles
- JSON persistence of measurements, dropping orphans on reload
- Pan/zoom view transform with screen to local mapping for label drags

Usage:
    from techdraw.annotations import MeasurementSet, InteractionController

    measurements = MeasurementSet(view)
    measurements.generate()
    svg = measurements.render_svg()
"""

from .coordinate_mapper import (
    ViewTransform,
    parse_svg_transform,
    rotation_matrix,
    scale_matrix,
    translation_matrix,
)
from .dimensions import (
    ArrowHead,
    CircleDimensionLayout,
    DimensionBreak,
    DimensionStyle,
    LineDimensionLayout,
    break_dimension_line,
    format_measurement_text,
    format_value,
    layout_circle_dimension,
    layout_line_dimension,
    render_dimension_svg,
    render_measurements_svg,
)
from .interaction import (
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
from .measurements import (
    Anchor,
    Measurement,
    MeasurementOptions,
    MeasurementSet,
    create_diameter_measurement,
    create_line_measurement,
    create_measurements,
    create_overall_measurement,
    element_extent,
    effective_coordinate,
    layout_measurement,
)

__all__ = [
    # Coordinate mapping
    'ViewTransform',
    'parse_svg_transform',
    'translation_matrix',
    'scale_matrix',
    'rotation_matrix',
    # Dimensions
    'DimensionStyle',
    'ArrowHead',
    'DimensionBreak',
    'LineDimensionLayout',
    'CircleDimensionLayout',
    'break_dimension_line',
    'format_value',
    'format_measurement_text',
    'layout_line_dimension',
    'layout_circle_dimension',
    'render_dimension_svg',
    'render_measurements_svg',
    # Measurements
    'Anchor',
    'Measurement',
    'MeasurementOptions',
    'MeasurementSet',
    'create_overall_measurement',
    'create_measurements',
    'create_diameter_measurement',
    'create_line_measurement',
    'element_extent',
    'effective_coordinate',
    'layout_measurement',
    # Interaction
    'InteractionController',
    'Idle',
    'FirstPointCaptured',
    'Dragging',
    'Panning',
    'SelectionSet',
    'CustomLine',
    'find_grabbed_endpoint',
    'snap_point',
]
