"""
Annotation configuration.

Groups every tunable of the annotation pipeline into one dataclass that can
be loaded from and saved to YAML:

    classifier:
      radius_tolerance: 0.001
    dimension_style:
      font_size: 2.2
      min_offset: 1.2
    measurements:
      horizontal: true
      unit: mm
    layout:
      gap: 20.0

Sections and keys that are omitted keep their defaults.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .annotations.dimensions import DimensionStyle
from .annotations.measurements import MeasurementOptions
from .geometry.constants import FRAME_MARGIN_FACTOR, STANDARD_LAYOUT_GAP
from .geometry.primitives import ClassifierConfig


@dataclass
class LayoutOptions:
    """
    Sheet layout settings.

    Attributes:
        gap: Distance between views of the standard layout
        margin_factor: Growth applied to normalized view frames
    """
    gap: float = STANDARD_LAYOUT_GAP
    margin_factor: float = FRAME_MARGIN_FACTOR

    def __post_init__(self):
        if self.gap < 0:
            raise ValueError(f"gap must be >= 0, got {self.gap}")
        if self.margin_factor <= 0:
            raise ValueError(f"margin_factor must be positive, got {self.margin_factor}")


@dataclass
class AnnotationConfig:
    """
    Root configuration of the annotation pipeline.

    Attributes:
        classifier: Classifier tolerances
        dimension_style: Dimension styling and placement
        measurements: Batch measurement options
        layout: Sheet layout settings
    """
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    dimension_style: DimensionStyle = field(default_factory=DimensionStyle)
    measurements: MeasurementOptions = field(default_factory=MeasurementOptions)
    layout: LayoutOptions = field(default_factory=LayoutOptions)

    def __post_init__(self):
        # Handle sections as dicts from YAML
        if isinstance(self.classifier, dict):
            self.classifier = ClassifierConfig(**self.classifier)
        if isinstance(self.dimension_style, dict):
            self.dimension_style = DimensionStyle(**self.dimension_style)
        if isinstance(self.measurements, dict):
            self.measurements = MeasurementOptions(**self.measurements)
        if isinstance(self.layout, dict):
            self.layout = LayoutOptions(**self.layout)

        if self.measurements.overall_offset < 0:
            raise ValueError(
                f"measurements.overall_offset must be >= 0, got {self.measurements.overall_offset}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AnnotationConfig":
        """
        Build a configuration from a plain dictionary.

        Raises:
            ValueError: On unknown sections or keys, or invalid values
        """
        data = data or {}
        unknown = set(data) - {"classifier", "dimension_style", "measurements", "layout"}
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "AnnotationConfig":
        """Load an annotation configuration from a YAML file."""
        with open(yaml_path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def to_yaml(self, yaml_path: str | Path) -> None:
        """Save the annotation configuration to a YAML file."""
        data = self._to_dict()
        with open(yaml_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def _to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for YAML serialization."""
        return {
            "classifier": asdict(self.classifier),
            "dimension_style": asdict(self.dimension_style),
            "measurements": asdict(self.measurements),
            "layout": asdict(self.layout),
        }
