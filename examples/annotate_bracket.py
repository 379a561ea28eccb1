#!/usr/bin/env python3
"""
Bracket Annotation Example

Annotates a three-view layout of a simple bracket with:
- Overall horizontal and vertical dimensions per view
- Diameter dimensions for the bolt holes
- A click-toggled edge length and a dragged label

The path strings stand in for the output of a projection kernel.

Outputs:
- One annotated SVG per view
- Measurements exported as JSON
"""

import logging
from pathlib import Path

from techdraw.annotations import InteractionController, MeasurementSet
from techdraw.config import AnnotationConfig
from techdraw.logging_config import setup_logging
from techdraw.views import RawView, build_standard_layout, normalize_part_views, render_view_svg

FRONT = RawView(
    name="front",
    visible_paths=[
        "M0 0L120 0",
        "M0 60L120 60",
        "M0 0L0 60",
        "M120 0L120 60",
        "M30 30A6 6 0 0 1 18 30A6 6 0 0 1 30 30",
        "M102 30A6 6 0 0 1 90 30A6 6 0 0 1 102 30",
    ],
    hidden_paths=["M60 0L60 60"],
    visible_frame="0 0 120 60",
    hidden_frame="0 0 120 60",
)

BOTTOM = RawView(
    name="bottom",
    visible_paths=["M0 0L120 0", "M0 10L120 10", "M0 0L0 10", "M120 0L120 10"],
    visible_frame="0 0 120 10",
)

SIDE = RawView(
    name="side",
    visible_paths=["M0 0L10 0", "M0 60L10 60", "M0 0L0 60", "M10 0L10 60"],
    hidden_paths=["M0 24L10 24", "M0 36L10 36"],
    visible_frame="0 0 10 60",
    hidden_frame="0 24 10 12",
)


def main():
    setup_logging(logging.INFO)

    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    config_path = Path(__file__).parent / "annotations.yaml"
    config = AnnotationConfig.from_yaml(config_path) if config_path.exists() else AnnotationConfig()

    print("Bracket Annotation Example")
    print("=" * 50)

    layout = build_standard_layout(
        FRONT, BOTTOM, SIDE, gap=config.layout.gap, config=config.classifier
    )
    if layout is None:
        print("Error: front view has no frame")
        return

    print(f"Sheet frame: {layout.combined_frame}")
    frames = normalize_part_views(layout.views, config.layout.margin_factor)
    for name, frame in frames.items():
        print(f"  {name}: normalized frame {frame}")

    for name, view in layout.views.items():
        measurements = MeasurementSet(view, config.measurements)
        measurements.generate()

        if name == "front":
            # Toggle a length on the top edge, then drag its label up
            controller = InteractionController(measurements)
            top_edge = view.element_by_id("standard_front_visible_0")
            controller.click_element(top_edge)
            controller.press(0, 0, top_edge.id)
            controller.move(0, -8)
            controller.release()

        overlay = measurements.render_svg(config.dimension_style)
        svg = render_view_svg(view, overlay=overlay)
        svg_path = output_dir / f"bracket_{name}.svg"
        svg_path.write_text(svg, encoding="utf-8")
        print(f"Exported SVG: {svg_path} ({len(measurements)} measurements)")

        json_path = output_dir / f"bracket_{name}_measurements.json"
        json_path.write_text(measurements.to_json(), encoding="utf-8")
        print(f"Exported JSON: {json_path}")

    print("\n" + "=" * 50)
    print("Done!")


if __name__ == "__main__":
    main()
