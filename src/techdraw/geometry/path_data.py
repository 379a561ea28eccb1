"""
Path data parsing, transformation and serialization.

Handles the path-data mini-language emitted by the projection kernel
("M0 0L10 0A5 5 0 0 1 -5 0 ..."):

- ``parse_path_data``: string -> list of PathCommand
- ``translate_path_data`` / ``scale_path_data``: in-place transforms that
  respect each command's coordinate layout
- ``serialize_path_data``: list of PathCommand -> canonical string

Malformed commands are dropped with a warning; the rest of the path is kept.
Nothing in this module raises on bad input data.
"""

from __future__ import annotations

import copy
import logging
import math
import re
from dataclasses import dataclass, field

from .constants import (
    COMMAND_ARITY,
    PATH_COMMANDS,
    SERIALIZE_DECIMALS,
    SERIALIZE_LARGE,
    SERIALIZE_SMALL,
)

logger = logging.getLogger(__name__)

# One command letter followed by everything up to the next command letter
_COMMAND_RE = re.compile(rf"([{PATH_COMMANDS}])([^{PATH_COMMANDS}]*)", re.IGNORECASE)

# Signed decimal with optional exponent; handles compact forms like "10-5" and ".5.5"
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

_SEPARATORS = " \t\r\n,"


@dataclass
class PathCommand:
    """
    A single path command with its parameters.

    Attributes:
        command: Command letter; uppercase is absolute, lowercase relative
        values: Numeric parameters in source order
    """
    command: str
    values: list[float] = field(default_factory=list)

    @property
    def is_absolute(self) -> bool:
        return self.command.isupper()

    @property
    def arity(self) -> int:
        """Parameters consumed by one repetition of this command."""
        return COMMAND_ARITY[self.command.upper()]


PathData = list[PathCommand]


# =============================================================================
# PARSING
# =============================================================================

def _parse_parameters(run: str) -> list[float] | None:
    """
    Extract the numbers from the text following a command letter.

    Returns None if anything other than numbers and separators is present
    or if a token does not convert to a finite float.
    """
    values: list[float] = []
    leftover = _NUMBER_RE.sub(" ", run)
    if leftover.strip(_SEPARATORS):
        return None

    for token in _NUMBER_RE.findall(run):
        try:
            value = float(token)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return values


def _has_valid_arity(command: str, values: list[float]) -> bool:
    arity = COMMAND_ARITY[command.upper()]
    if arity == 0:
        return not values
    return len(values) > 0 and len(values) % arity == 0


def parse_path_data(d: str | None) -> PathData:
    """
    Parse a path-data string into a list of commands.

    Each command letter is grouped with the run of characters up to the
    next command letter. A command whose parameters cannot be parsed, or
    whose parameter count does not fit its arity, is skipped entirely.

    Args:
        d: Path data string (may be None or empty)

    Returns:
        List of PathCommand; empty for empty or invalid input
    """
    if not d or not isinstance(d, str):
        return []

    commands: PathData = []
    for match in _COMMAND_RE.finditer(d):
        letter, run = match.group(1), match.group(2)
        values = _parse_parameters(run)
        if values is None or not _has_valid_arity(letter, values):
            logger.warning(f"Could not parse parameters for command: {match.group(0).strip()!r}")
            continue
        commands.append(PathCommand(letter, values))

    return commands


def clone_path_data(path: PathData) -> PathData:
    """Deep copy, for callers that need the original after an in-place transform."""
    return copy.deepcopy(path)


# =============================================================================
# TRANSFORMS
# =============================================================================

def translate_path_data(path: PathData, tx: float, ty: float) -> PathData:
    """
    Shift absolute coordinates by (tx, ty), in place.

    Relative (lowercase) commands are deltas and stay untouched. For arcs
    only the endpoint moves; radii, rotation and flags are not positions.

    Returns:
        The same list, for chaining
    """
    if tx == 0 and ty == 0:
        return path

    for cmd in path:
        if not cmd.is_absolute:
            continue
        letter = cmd.command
        values = cmd.values

        if letter in "MLTCSQ":
            for i in range(len(values)):
                values[i] += tx if i % 2 == 0 else ty
        elif letter == "H":
            for i in range(len(values)):
                values[i] += tx
        elif letter == "V":
            for i in range(len(values)):
                values[i] += ty
        elif letter == "A":
            for i in range(len(values)):
                slot = i % 7
                if slot == 5:
                    values[i] += tx
                elif slot == 6:
                    values[i] += ty
        # Z: no values

    return path


def scale_path_data(path: PathData, factor: float) -> PathData:
    """
    Multiply coordinates by ``factor``, in place.

    Arcs scale their radii and endpoint; the rotation angle and the two
    flags keep their values.

    Returns:
        The same list, for chaining
    """
    if factor == 1:
        return path

    for cmd in path:
        letter = cmd.command.upper()
        values = cmd.values

        if letter in "MLTCSQHV":
            for i in range(len(values)):
                values[i] *= factor
        elif letter == "A":
            for i in range(len(values)):
                if i % 7 in (0, 1, 5, 6):
                    values[i] *= factor

    return path


# =============================================================================
# SERIALIZATION
# =============================================================================

def format_path_number(value: float) -> str:
    """
    Format one parameter with bounded precision.

    Very large or very small non-zero magnitudes use exponential notation
    with 4 fractional digits; everything else is fixed to 4 decimals with
    trailing zeros removed.
    """
    magnitude = abs(value)
    if magnitude > SERIALIZE_LARGE or 0 < magnitude < SERIALIZE_SMALL:
        return f"{value:.{SERIALIZE_DECIMALS}e}"

    text = f"{value:.{SERIALIZE_DECIMALS}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def serialize_path_data(path: PathData) -> str:
    """
    Render commands back to a path-data string.

    Command letters are concatenated with no separator between commands;
    parameters are space separated.
    """
    parts: list[str] = []
    for cmd in path:
        params = " ".join(format_path_number(v) for v in cmd.values)
        parts.append(f"{cmd.command}{params}")
    return "".join(parts)


def transform_path_string(d: str, tx: float = 0.0, ty: float = 0.0, factor: float = 1.0) -> str:
    """
    Parse, scale, translate and re-serialize a path string.

    Returns the input unchanged when no transform applies or when nothing
    in it could be parsed.
    """
    if tx == 0 and ty == 0 and factor == 1:
        return d

    parsed = parse_path_data(d)
    if not parsed:
        logger.warning(f"Could not parse path data for transformation: {d[:50]!r}")
        return d

    scale_path_data(parsed, factor)
    translate_path_data(parsed, tx, ty)
    return serialize_path_data(parsed)
