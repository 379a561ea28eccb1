"""
Annotation constants.

Dimension styling, measurement placement and interaction defaults. All of
these are defaults for configurable fields; nothing reads them directly
during layout.
"""

# =============================================================================
# DIMENSION STYLING
# =============================================================================

DIMENSION_LINE_WIDTH = 0.15        # view units - dimension and extension line stroke
DIMENSION_COLOR = "#222222"
DIMENSION_FONT_SIZE = 2.2          # view units - label text size
DIMENSION_FONT_FAMILY = "Arial, sans-serif"
ARROW_SIZE = 1.2                   # view units - arrowhead length along the line
ARROW_HALF_WIDTH_FACTOR = 0.35     # arrowhead half width as a fraction of its length
EXTENSION_LINE_GAP = 0.8           # view units - gap between geometry and extension line
EXTENSION_LINE_OVERHANG = 1.2      # view units - extension past the dimension line
MIN_DIMENSION_OFFSET = 1.2         # view units - minimum dimension line offset, also label padding
TEXT_WIDTH_FACTOR = 0.65           # label width per character, as a fraction of font size

# Circles narrower than this multiple of the label width get a leader instead of a chord
SMALL_CIRCLE_FACTOR = 1.5
LEADER_TEXT_CLEARANCE = 3.0        # label sits at least radius + this many offsets from centre
LEADER_LENGTH_FACTOR = 0.9         # leader stops short of the label
CROSSHAIR_MAX_SIZE = 1.0           # view units

# Labels on lines steeper than this (and shallower than 180 minus it) are turned vertical
VERTICAL_TEXT_ANGLE = 45.0         # degrees

DIAMETER_SYMBOL = "⌀"
RADIUS_PREFIX = "R"
VALUE_PRECISION = 2


# =============================================================================
# MEASUREMENTS
# =============================================================================

OVERALL_DIMENSION_OFFSET = 20.0    # view units - overall dimensions sit this far outside the bounds
LINE_LABEL_LIFT = 5.0              # view units - initial label lift above a toggled line
DEFAULT_UNIT = "mm"


# =============================================================================
# INTERACTION
# =============================================================================

ENDPOINT_GRAB_THRESHOLD = 5.0      # view units at zoom 1
SNAP_THRESHOLD = 5.0               # view units at zoom 1
ZOOM_MIN = 0.1
ZOOM_MAX = 10.0
ZOOM_STEP = 0.1                    # fraction of the current zoom per wheel notch


# =============================================================================
# ELEMENT RENDERING
# =============================================================================

VISIBLE_STROKE_WIDTH = 0.5
HIDDEN_STROKE_WIDTH = 0.25
VISIBLE_COLOR = "#000000"
HIDDEN_COLOR = "#888888"
HIDDEN_DASH = "2,1"
HIGHLIGHT_COLOR = "#0066cc"
