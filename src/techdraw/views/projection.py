"""
ProjectionView assembly and standard three-view layout.

This module turns the raw output of the projection kernel for one view
(visible and hidden path strings plus their frame strings) into a
ProjectionView: classified elements for both visibility layers and the
combined frame the view is drawn in.

For assemblies, ``build_standard_layout`` places the front, bottom and side
views on one sheet: bottom centred below front, side to the right of front
and vertically centred. Paths of the placed views are translated so that
all three share one coordinate space.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..geometry.constants import FRAME_MARGIN_FACTOR, STANDARD_LAYOUT_GAP
from ..geometry.path_data import transform_path_string
from ..geometry.primitives import (
    BoundingBox,
    ClassifierConfig,
    GeometryElement,
    classify_paths,
)
from ..geometry.view_frame import (
    ViewFrame,
    combine_view_frames,
    normalized_view_frame,
    parse_view_frame,
)

logger = logging.getLogger(__name__)


@dataclass
class RawView:
    """
    Kernel output for one projected view.

    Attributes:
        name: View name ("front", "top", "left", ...)
        visible_paths: Path strings of visible edges
        hidden_paths: Path strings of hidden edges
        visible_frame: Frame string of the visible layer
        hidden_frame: Frame string of the hidden layer
    """
    name: str
    visible_paths: list[str] = field(default_factory=list)
    hidden_paths: list[str] = field(default_factory=list)
    visible_frame: str | None = None
    hidden_frame: str | None = None

    @property
    def combined_frame_string(self) -> str:
        return combine_view_frames(self.visible_frame, self.hidden_frame)

    def frame(self) -> ViewFrame | None:
        """Combined frame, or None when neither layer has a valid frame."""
        if parse_view_frame(self.visible_frame) is None and parse_view_frame(self.hidden_frame) is None:
            return None
        return parse_view_frame(self.combined_frame_string)


@dataclass
class ViewLayer:
    """Paths of one visibility layer and their classified elements."""
    paths: list[str] = field(default_factory=list)
    elements: list[GeometryElement] = field(default_factory=list)


@dataclass
class ProjectionView:
    """
    A projected view ready for annotation.

    Elements are produced once when the view is built and are never
    mutated afterwards. Measurements refer to them by id.

    Attributes:
        name: View name
        part_name: Owning part, empty for assembly layouts
        visible: Visible layer
        hidden: Hidden layer
        combined_frame: Frame enclosing both layers
    """
    name: str
    part_name: str
    visible: ViewLayer
    hidden: ViewLayer
    combined_frame: ViewFrame
    _index: dict[str, GeometryElement] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._index = {el.id: el for el in self.elements}

    @property
    def elements(self) -> list[GeometryElement]:
        """All elements, visible layer first."""
        return [*self.visible.elements, *self.hidden.elements]

    def referenceable_elements(self) -> list[GeometryElement]:
        return [el for el in self.elements if el.referenceable]

    def element_by_id(self, element_id: str) -> GeometryElement | None:
        return self._index.get(element_id)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index

    @property
    def bounding_box(self) -> BoundingBox:
        """
        Extent of all referenceable geometry.

        Falls back to the combined frame when the view has nothing
        measurable.
        """
        box: BoundingBox | None = None
        for el in self.referenceable_elements():
            el_box = el.bounding_box()
            if el_box is None:
                continue
            box = el_box if box is None else box.union(el_box)
        if box is None:
            f = self.combined_frame
            return BoundingBox(f.x, f.y, f.width, f.height)
        return box


def build_projection_view(
    raw: RawView,
    part_name: str = "",
    config: ClassifierConfig | None = None,
    tx: float = 0.0,
    ty: float = 0.0,
) -> ProjectionView:
    """
    Classify both layers of a raw view.

    Args:
        raw: Kernel output for the view
        part_name: Part name used in element ids
        config: Classifier tolerances
        tx, ty: Translation applied to every path before classification

    Returns:
        ProjectionView with classified elements and combined frame
    """
    layers: dict[str, ViewLayer] = {}
    for visibility, paths in (("visible", raw.visible_paths), ("hidden", raw.hidden_paths)):
        kept = [p for p in paths if isinstance(p, str) and p.strip()]
        moved = [transform_path_string(p, tx, ty) for p in kept]
        elements = classify_paths(
            moved,
            visibility=visibility,
            view_name=raw.name,
            part_name=part_name,
            config=config,
        )
        layers[visibility] = ViewLayer(paths=moved, elements=elements)

    frame = parse_view_frame(raw.combined_frame_string)
    if frame is None:
        frame = parse_view_frame(combine_view_frames(None, None))
    frame = frame.translated(tx, ty)

    view = ProjectionView(
        name=raw.name,
        part_name=part_name,
        visible=layers["visible"],
        hidden=layers["hidden"],
        combined_frame=frame,
    )
    logger.debug(
        f"Built view {part_name or '-'}:{raw.name} with {len(view.elements)} elements, "
        f"frame {frame.to_string()}"
    )
    return view


# =============================================================================
# STANDARD THREE-VIEW LAYOUT
# =============================================================================

@dataclass
class StandardLayout:
    """Front, bottom and side views placed in one coordinate space."""
    views: dict[str, ProjectionView]
    combined_frame: ViewFrame
    offsets: dict[str, tuple[float, float]] = field(default_factory=dict)

    @property
    def elements(self) -> list[GeometryElement]:
        return [el for view in self.views.values() for el in view.elements]


def build_standard_layout(
    front: RawView,
    bottom: RawView | None = None,
    side: RawView | None = None,
    gap: float = STANDARD_LAYOUT_GAP,
    config: ClassifierConfig | None = None,
) -> StandardLayout | None:
    """
    Arrange front, bottom and side views on one sheet.

    The bottom view is centred horizontally under the front view, ``gap``
    units below it. The side view sits ``gap`` units to the right of the
    front view, centred vertically. Paths of the moved views are translated
    by (placed origin - original origin).

    Returns:
        StandardLayout, or None when the front view has no usable frame
    """
    front_frame = front.frame()
    if front_frame is None:
        logger.error("Front view frame is missing or invalid; cannot build standard layout")
        return None

    placements: list[tuple[RawView, float, float]] = [(front, 0.0, 0.0)]
    combined = front_frame

    if bottom is not None:
        bottom_frame = bottom.frame()
        if bottom_frame is not None:
            placed_x = front_frame.x + (front_frame.width - bottom_frame.width) / 2
            placed_y = front_frame.bottom + gap
            placements.append((bottom, placed_x - bottom_frame.x, placed_y - bottom_frame.y))
            combined = combined.union(ViewFrame(placed_x, placed_y, bottom_frame.width, bottom_frame.height))
        else:
            logger.info("No valid bottom view frame for layout")

    if side is not None:
        side_frame = side.frame()
        if side_frame is not None:
            placed_x = front_frame.right + gap
            placed_y = front_frame.y + (front_frame.height - side_frame.height) / 2
            placements.append((side, placed_x - side_frame.x, placed_y - side_frame.y))
            combined = combined.union(ViewFrame(placed_x, placed_y, side_frame.width, side_frame.height))
        else:
            logger.info("No valid side view frame for layout")

    views: dict[str, ProjectionView] = {}
    offsets: dict[str, tuple[float, float]] = {}
    for raw, tx, ty in placements:
        views[raw.name] = build_projection_view(raw, part_name="standard", config=config, tx=tx, ty=ty)
        offsets[raw.name] = (tx, ty)

    logger.info(f"Standard layout frame {combined.to_string()} with {len(views)} views")
    return StandardLayout(views=views, combined_frame=combined, offsets=offsets)


def normalize_part_views(
    views: dict[str, ProjectionView],
    margin_factor: float = FRAME_MARGIN_FACTOR,
) -> dict[str, ViewFrame]:
    """
    Common-size frames for all views of one part.

    Every view gets a frame of the largest view size (plus margin) centred
    on its own content, so the views display at the same scale.
    """
    max_w = max((v.combined_frame.width for v in views.values()), default=0.0)
    max_h = max((v.combined_frame.height for v in views.values()), default=0.0)
    return {
        name: normalized_view_frame(view.combined_frame, max_w, max_h, margin_factor)
        for name, view in views.items()
    }
