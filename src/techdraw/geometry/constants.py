"""
Geometry constants.

Tolerances, path-language arities, and default frames shared by the path
parser, primitive classifier and view-frame combiner.
"""

# =============================================================================
# NUMERIC TOLERANCES
# =============================================================================

POINT_TOLERANCE = 1e-6        # drawing units - coincident points / collinearity
MIN_SEGMENT_LENGTH = 1e-6     # drawing units - below this a segment has no direction
NORMALIZE_EPSILON = 1e-9      # vector length below which normalize() gives (0, 0)
DENOMINATOR_EPSILON = 1e-12   # guard for divisions in the arc-center conversion

# Radius difference below which an arc is treated as a circle
RADIUS_TOLERANCE = 0.001


# =============================================================================
# PATH LANGUAGE
# =============================================================================

PATH_COMMANDS = "MLHVCSQTAZ"

# Parameters consumed by one repetition of each command
COMMAND_ARITY = {
    "M": 2,
    "L": 2,
    "T": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "A": 7,
    "Z": 0,
}

# Serializer switches to exponential form outside this magnitude window
SERIALIZE_LARGE = 1e6
SERIALIZE_SMALL = 1e-4
SERIALIZE_DECIMALS = 4


# =============================================================================
# VIEW FRAMES
# =============================================================================

DEFAULT_FRAME = "0 0 100 100"
DEFAULT_FRAME_SIZE = 100.0
FRAME_MARGIN_FACTOR = 1.3     # 15% margin on each side of a normalized frame
STANDARD_LAYOUT_GAP = 20.0    # drawing units - gap between views in the 3-view layout
