"""
Logging Configuration
Sets up the package logger for applications embedding techdraw.

Records are labelled by subsystem ("geometry.primitives", "views.projection")
rather than by full module path. The classifier logs every fallthrough at
DEBUG, so a host debugging interaction can keep geometry at WARNING through
``subsystem_levels``.
"""
import logging
import sys
from typing import Mapping, Optional, Union

PACKAGE = "techdraw"

LOG_FORMAT = '%(asctime)s - %(subsystem)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

Level = Union[int, str]


class SubsystemFormatter(logging.Formatter):
    """Formatter exposing the logger name without the package prefix as ``subsystem``."""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(PACKAGE + "."):
            name = name[len(PACKAGE) + 1:]
        record.subsystem = name
        return super().format(record)


def _resolve_level(level: Level) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def setup_logging(
    level: Level = logging.INFO,
    log_file: Optional[str] = None,
    subsystem_levels: Optional[Mapping[str, Level]] = None,
) -> logging.Logger:
    """
    Configures the logger for the 'techdraw' namespace.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
        log_file: Optional path to save logs to a file.
        subsystem_levels: Levels for parts of the package, keyed relative to
            it (e.g. {"geometry": "WARNING"})

    Returns:
        The configured package logger
    """
    level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE)
    logger.setLevel(level)

    # Reconfiguring replaces earlier handlers instead of duplicating output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = SubsystemFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Handlers pass everything through so a subsystem can be more verbose than the package
    for subsystem, sub_level in (subsystem_levels or {}).items():
        logging.getLogger(f"{PACKAGE}.{subsystem}").setLevel(_resolve_level(sub_level))

    logger.info("Logging initialized.")
    return logger
