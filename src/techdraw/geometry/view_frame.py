"""
ViewFrame class and frame-string helpers.

A frame is the axis-aligned coordinate window ("x y width height") one
projected view is drawn within.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from .constants import DEFAULT_FRAME, DEFAULT_FRAME_SIZE, FRAME_MARGIN_FACTOR

logger = logging.getLogger(__name__)

_FRAME_SPLIT_RE = re.compile(r"[\s,]+")


def _format_frame_number(value: float) -> str:
    """Render integral values without a trailing '.0'."""
    if value == int(value):
        return str(int(value))
    return repr(float(value))


@dataclass
class ViewFrame:
    """
    Represents the local coordinate window of one rendered view.

    Width and height are never negative; the parsing helpers clamp them.

    Attributes:
        x: Left edge in view units
        y: Top edge in view units
        width: Width of the window
        height: Height of the window
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        self.width = max(0.0, self.width)
        self.height = max(0.0, self.height)

    @property
    def left(self) -> float:
        """Left edge x-coordinate."""
        return self.x

    @property
    def right(self) -> float:
        """Right edge x-coordinate."""
        return self.x + self.width

    @property
    def top(self) -> float:
        """Top edge y-coordinate."""
        return self.y

    @property
    def bottom(self) -> float:
        """Bottom edge y-coordinate."""
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        """Center point as (x, y) tuple."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Bounds as (left, top, right, bottom) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    def union(self, other: ViewFrame) -> ViewFrame:
        """Smallest frame enclosing both frames."""
        min_x = min(self.x, other.x)
        min_y = min(self.y, other.y)
        max_x = max(self.right, other.right)
        max_y = max(self.bottom, other.bottom)
        return ViewFrame(min_x, min_y, max_x - min_x, max_y - min_y)

    def translated(self, dx: float, dy: float) -> ViewFrame:
        return ViewFrame(self.x + dx, self.y + dy, self.width, self.height)

    def to_string(self) -> str:
        """Frame string in "x y width height" form."""
        return " ".join(
            _format_frame_number(v) for v in (self.x, self.y, self.width, self.height)
        )

    def __str__(self) -> str:
        return self.to_string()


def parse_view_frame(frame: str | None) -> ViewFrame | None:
    """
    Parse a frame string.

    Accepts space and/or comma separation. Anything that is not exactly four
    finite numbers yields None rather than an error.
    """
    if not frame or not isinstance(frame, str):
        return None

    parts = [p for p in _FRAME_SPLIT_RE.split(frame.strip()) if p]
    if len(parts) != 4:
        logger.warning(f"Could not parse frame string: {frame!r}")
        return None

    try:
        x, y, width, height = (float(p) for p in parts)
    except ValueError:
        logger.warning(f"Could not parse frame string: {frame!r}")
        return None

    if not all(math.isfinite(v) for v in (x, y, width, height)):
        logger.warning(f"Non-finite value in frame string: {frame!r}")
        return None

    return ViewFrame(x, y, width, height)


def combine_view_frames(frame1: str | None, frame2: str | None) -> str:
    """
    Merge two frame strings into their minimal enclosing frame.

    An absent or malformed frame counts as missing, not as a zero-size
    frame at the origin. With one frame missing, the other string is
    returned verbatim; with both missing, the default frame.
    """
    box1 = parse_view_frame(frame1)
    box2 = parse_view_frame(frame2)

    if box1 is None and box2 is None:
        return DEFAULT_FRAME
    if box1 is None:
        return frame2
    if box2 is None:
        return frame1

    return box1.union(box2).to_string()


def normalized_view_frame(
    frame: ViewFrame | None,
    max_width: float,
    max_height: float,
    margin_factor: float = FRAME_MARGIN_FACTOR,
) -> ViewFrame:
    """
    Resize a frame to a common size while keeping its content centred.

    Used so that several views of one part share a scale. The size is the
    largest view size times ``margin_factor``; non-positive sizes fall back
    to 100 units.
    """
    if frame is None:
        logger.warning("No frame provided for normalization, using default")
        return parse_view_frame(DEFAULT_FRAME)

    cx, cy = frame.center
    base_width = max_width if max_width > 0 else DEFAULT_FRAME_SIZE
    base_height = max_height if max_height > 0 else DEFAULT_FRAME_SIZE
    padded_width = base_width * margin_factor
    padded_height = base_height * margin_factor

    return ViewFrame(
        x=cx - padded_width / 2,
        y=cy - padded_height / 2,
        width=padded_width,
        height=padded_height,
    )
