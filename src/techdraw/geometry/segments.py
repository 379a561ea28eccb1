"""
Path segment decomposition.

Breaks a path into individual drawable segments (straight lines, curves and
arcs) with absolute endpoints, then merges runs of collinear line segments.
The kernel often emits one straight edge as several touching pieces; merging
them gives one measurable line per edge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .constants import COMMAND_ARITY, POINT_TOLERANCE
from .path_data import format_path_number, parse_path_data
from .vectors import Point, are_collinear, distance, points_close

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathSegment:
    """
    One segment of a decomposed path.

    Attributes:
        kind: "line", "curve" or "arc"
        start: Absolute start point
        end: Absolute end point
        length: Segment length (chord length for curves and arcs)
        path: Stand-alone path string for this segment
    """
    kind: str
    start: Point
    end: Point
    length: float
    path: str

    @property
    def endpoints(self) -> tuple[Point, Point]:
        return (self.start, self.end)


def _fmt(*values: float) -> str:
    return " ".join(format_path_number(v) for v in values)


def _line_segment(start: Point, end: Point) -> PathSegment | None:
    """Straight segment, or None when both ends coincide."""
    if abs(start[0] - end[0]) < POINT_TOLERANCE and abs(start[1] - end[1]) < POINT_TOLERANCE:
        return None
    return PathSegment(
        kind="line",
        start=start,
        end=end,
        length=distance(start, end),
        path=f"M{_fmt(*start)}L{_fmt(*end)}",
    )


def decompose_path_to_segments(d: str) -> list[PathSegment]:
    """
    Split a path string into segments with absolute coordinates.

    Handles absolute and relative forms of every command. Extra coordinate
    pairs after M are implicit line-tos. Z closes back to the start of the
    current subpath when the pen is not already there. Zero-length lines
    are skipped.
    """
    segments: list[PathSegment] = []
    cur_x = cur_y = 0.0
    start_x = start_y = 0.0

    def add_line(x: float, y: float) -> None:
        seg = _line_segment((cur_x, cur_y), (x, y))
        if seg is not None:
            segments.append(seg)

    for cmd in parse_path_data(d):
        letter = cmd.command
        upper = letter.upper()
        relative = not cmd.is_absolute
        values = cmd.values

        if upper == "M":
            x, y = values[0], values[1]
            if relative:
                x, y = cur_x + x, cur_y + y
            cur_x, cur_y = x, y
            start_x, start_y = x, y
            for i in range(2, len(values) - 1, 2):
                x, y = values[i], values[i + 1]
                if relative:
                    x, y = cur_x + x, cur_y + y
                add_line(x, y)
                cur_x, cur_y = x, y

        elif upper == "L":
            for i in range(0, len(values) - 1, 2):
                x, y = values[i], values[i + 1]
                if relative:
                    x, y = cur_x + x, cur_y + y
                add_line(x, y)
                cur_x, cur_y = x, y

        elif upper == "H":
            for v in values:
                x = cur_x + v if relative else v
                add_line(x, cur_y)
                cur_x = x

        elif upper == "V":
            for v in values:
                y = cur_y + v if relative else v
                add_line(cur_x, y)
                cur_y = y

        elif upper == "Z":
            if abs(cur_x - start_x) > POINT_TOLERANCE or abs(cur_y - start_y) > POINT_TOLERANCE:
                add_line(start_x, start_y)
            cur_x, cur_y = start_x, start_y

        else:
            # Curves and arcs stay whole; length is estimated by the chord
            arity = COMMAND_ARITY[upper]
            kind = "arc" if upper == "A" else "curve"
            for i in range(0, len(values) - arity + 1, arity):
                params = values[i:i + arity]
                x, y = params[-2], params[-1]
                if relative:
                    x, y = cur_x + x, cur_y + y
                segments.append(
                    PathSegment(
                        kind=kind,
                        start=(cur_x, cur_y),
                        end=(x, y),
                        length=distance((cur_x, cur_y), (x, y)),
                        path=f"M{_fmt(cur_x, cur_y)}{letter}{_fmt(*params)}",
                    )
                )
                cur_x, cur_y = x, y

    return segments


def _shares_endpoint(a: PathSegment, b: PathSegment) -> bool:
    return any(points_close(p, q) for p in a.endpoints for q in b.endpoints)


def _can_merge(a: PathSegment, b: PathSegment) -> bool:
    return (
        a.kind == "line"
        and b.kind == "line"
        and _shares_endpoint(a, b)
        and are_collinear(a.start, a.end, b.start)
        and are_collinear(a.start, a.end, b.end)
    )


def merge_line_segments(a: PathSegment, b: PathSegment) -> PathSegment:
    """
    Join two touching collinear line segments into one.

    The shared endpoint is dropped; the merged length is the sum of both.
    """
    if points_close(a.end, b.start):
        start, end = a.start, b.end
    elif points_close(a.start, b.end):
        start, end = b.start, a.end
    elif points_close(a.start, b.start):
        start, end = a.end, b.end
    elif points_close(a.end, b.end):
        start, end = a.start, b.start
    else:
        logger.warning("Cannot determine merge order for segments; keeping the first")
        return a

    return PathSegment(
        kind="line",
        start=start,
        end=end,
        length=a.length + b.length,
        path=f"M{_fmt(*start)}L{_fmt(*end)}",
    )


def merge_collinear_segments(segments: list[PathSegment]) -> list[PathSegment]:
    """Merge runs of adjacent collinear line segments, keeping order."""
    if not segments:
        return []

    merged: list[PathSegment] = []
    current = segments[0]
    for nxt in segments[1:]:
        if _can_merge(current, nxt):
            current = merge_line_segments(current, nxt)
        else:
            merged.append(current)
            current = nxt
    merged.append(current)
    return merged
