"""
Coordinate Mapper

Maps pointer positions between screen space and a view's local coordinate
space. The view is shown through a pan/zoom transform, optionally composed
with a local element transform (for example the translate/scale on the
geometry group of a rendered view).

The transformation chain (local -> screen) is:
1. Local element transform (3x3 affine, identity by default)
2. Zoom (uniform scale)
3. Pan (translation in screen units)

Usage:
    vt = ViewTransform()
    vt.zoom_at(400, 300, wheel_delta=-120)
    x, y = vt.screen_to_local(pointer_x, pointer_y)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field

import numpy as np

from ..geometry.constants import DENOMINATOR_EPSILON
from ..geometry.vectors import Point
from .constants import ZOOM_MAX, ZOOM_MIN, ZOOM_STEP

logger = logging.getLogger(__name__)

_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


# =============================================================================
# MATRIX HELPERS
# =============================================================================

def translation_matrix(tx: float, ty: float) -> np.ndarray:
    return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])


def scale_matrix(sx: float, sy: float | None = None) -> np.ndarray:
    if sy is None:
        sy = sx
    return np.array([[sx, 0.0, 0.0], [0.0, sy, 0.0], [0.0, 0.0, 1.0]])


def rotation_matrix(angle_deg: float, cx: float = 0.0, cy: float = 0.0) -> np.ndarray:
    """Rotation about (cx, cy), SVG convention (clockwise on screen for positive angles)."""
    a = math.radians(angle_deg)
    c, s = math.cos(a), math.sin(a)
    rot = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    if cx == 0.0 and cy == 0.0:
        return rot
    return translation_matrix(cx, cy) @ rot @ translation_matrix(-cx, -cy)


def parse_svg_transform(transform: str) -> np.ndarray:
    """
    Parse an SVG ``transform`` attribute into a 3x3 matrix.

    Supports matrix, translate, scale and rotate, composed left to right as
    SVG does. Unknown or malformed parts are ignored.

    Args:
        transform: Attribute value, e.g. "translate(10,20) scale(2)"

    Returns:
        3x3 affine matrix (identity for an empty string)
    """
    result = np.identity(3)
    for name, args in _TRANSFORM_RE.findall(transform or ""):
        values = [float(v) for v in _NUMBER_RE.findall(args)]
        if name == "matrix" and len(values) == 6:
            a, b, c, d, e, f = values
            m = np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])
        elif name == "translate" and values:
            m = translation_matrix(values[0], values[1] if len(values) > 1 else 0.0)
        elif name == "scale" and values:
            m = scale_matrix(values[0], values[1] if len(values) > 1 else None)
        elif name == "rotate" and len(values) in (1, 3):
            m = rotation_matrix(*values)
        else:
            logger.debug(f"Ignoring transform part: {name}({args})")
            continue
        result = result @ m
    return result


# =============================================================================
# VIEW TRANSFORM
# =============================================================================

@dataclass
class ViewTransform:
    """
    Pan/zoom state of one view plus its local element transform.

    Attributes:
        pan_x, pan_y: Screen-space translation
        zoom: Uniform scale, kept within [ZOOM_MIN, ZOOM_MAX] by zoom_at
        local: Local element transform (3x3), identity when None
    """
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0
    local: np.ndarray | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.local is not None:
            self.local = np.asarray(self.local, dtype=float)
            if self.local.shape != (3, 3):
                raise ValueError(f"local transform must be 3x3, got shape {self.local.shape}")

    def matrix(self) -> np.ndarray:
        """Composed local -> screen matrix (pan . zoom . local)."""
        m = translation_matrix(self.pan_x, self.pan_y) @ scale_matrix(self.zoom)
        if self.local is not None:
            m = m @ self.local
        return m

    def _inverse(self) -> np.ndarray | None:
        m = self.matrix()
        if not np.all(np.isfinite(m)):
            logger.debug("View transform is not finite")
            return None
        if abs(np.linalg.det(m)) < DENOMINATOR_EPSILON:
            logger.debug("View transform is singular")
            return None
        return np.linalg.inv(m)

    def screen_to_local(self, x: float, y: float) -> Point:
        """
        Screen point to local coordinates.

        A singular or non-finite transform maps everything to the origin.
        """
        inv = self._inverse()
        if inv is None:
            return (0.0, 0.0)
        lx, ly, _ = inv @ np.array([x, y, 1.0])
        return (float(lx), float(ly))

    def local_to_screen(self, x: float, y: float) -> Point:
        sx, sy, _ = self.matrix() @ np.array([x, y, 1.0])
        return (float(sx), float(sy))

    def screen_delta_to_local(self, dx: float, dy: float) -> Point:
        """Screen displacement to local displacement (linear part only, no pan)."""
        inv = self._inverse()
        if inv is None:
            return (0.0, 0.0)
        lx, ly = inv[:2, :2] @ np.array([dx, dy])
        return (float(lx), float(ly))

    def zoom_at(self, cx: float, cy: float, wheel_delta: float) -> float:
        """
        Zoom one wheel step about a screen point.

        Scrolling up (negative delta) zooms in by ZOOM_STEP of the current
        zoom, scrolling down zooms out. The local point under (cx, cy) stays
        under the cursor.

        Returns:
            The new zoom
        """
        if wheel_delta == 0:
            return self.zoom
        content_x = (cx - self.pan_x) / self.zoom
        content_y = (cy - self.pan_y) / self.zoom
        step = -math.copysign(ZOOM_STEP, wheel_delta)
        new_zoom = min(max(self.zoom + step * self.zoom, ZOOM_MIN), ZOOM_MAX)
        self.pan_x = cx - content_x * new_zoom
        self.pan_y = cy - content_y * new_zoom
        self.zoom = new_zoom
        return new_zoom

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def reset(self) -> None:
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.zoom = 1.0

    def svg_transform(self) -> str:
        """Pan/zoom as an SVG transform attribute value."""
        return f"translate({self.pan_x:.2f},{self.pan_y:.2f}) scale({self.zoom:.4f})"
