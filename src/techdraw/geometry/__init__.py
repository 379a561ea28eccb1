"""
Geometry Module

Parses and classifies the vector outline data produced by a CAD projection
kernel.

Features:
- Path-data parsing with per-command error tolerance
- In-place translate / scale that respect command coordinate layouts
- Canonical serialization with bounded precision
- Classification into line, polyline, circle, ellipse and other
- Segment decomposition with collinear merging
- View-frame parsing, combination and normalization

Usage:
    from techdraw.geometry import classify_paths, combine_view_frames

    elements = classify_paths(paths, visibility="visible", view_name="front")
    frame = combine_view_frames(visible_frame, hidden_frame)
"""

from .path_data import (
    PathCommand,
    clone_path_data,
    format_path_number,
    parse_path_data,
    scale_path_data,
    serialize_path_data,
    transform_path_string,
    translate_path_data,
)
from .primitives import (
    BoundingBox,
    CircleData,
    ClassifierConfig,
    EllipseData,
    GeometryElement,
    LineData,
    OtherData,
    PolylineData,
    arc_center,
    classify_path,
    classify_paths,
    count_by_type,
    make_element_id,
)
from .segments import (
    PathSegment,
    decompose_path_to_segments,
    merge_collinear_segments,
    merge_line_segments,
)
from .view_frame import (
    ViewFrame,
    combine_view_frames,
    normalized_view_frame,
    parse_view_frame,
)

__all__ = [
    # Path data
    'PathCommand',
    'parse_path_data',
    'translate_path_data',
    'scale_path_data',
    'serialize_path_data',
    'clone_path_data',
    'format_path_number',
    'transform_path_string',
    # Classification
    'GeometryElement',
    'BoundingBox',
    'LineData',
    'PolylineData',
    'CircleData',
    'EllipseData',
    'OtherData',
    'ClassifierConfig',
    'classify_path',
    'classify_paths',
    'count_by_type',
    'make_element_id',
    'arc_center',
    # Segments
    'PathSegment',
    'decompose_path_to_segments',
    'merge_collinear_segments',
    'merge_line_segments',
    # Frames
    'ViewFrame',
    'parse_view_frame',
    'combine_view_frames',
    'normalized_view_frame',
]
