"""Game constants, board layout and level-data location."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from watersort.core.bottle import Position

CAPACITY = 4
MIN_PATTERN = 1
MAX_PATTERNS = 7

LEVELS_DIR_ENV = "WATERSORT_LEVELS_DIR"
POUR_DELAY_ENV = "WATERSORT_POUR_DELAY_MS"
DEFAULT_POUR_DELAY_MS = 450
LOG_LEVEL_ENV = "WATERSORT_LOG_LEVEL"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardLayout:
    """Grid of bottle slots. Row 0 is the top row."""

    rows: int = 2
    columns: int = 6

    def contains(self, position: "Position") -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.columns


DEFAULT_LAYOUT = BoardLayout()


def levels_dir() -> Path:
    """Directory holding LevelSet YAML files; ``WATERSORT_LEVELS_DIR`` overrides the bundled data."""
    override = os.environ.get(LEVELS_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent.parent / "data" / "levels"


def pour_delay_ms() -> int:
    """Milliseconds the board stays busy per pour, from ``WATERSORT_POUR_DELAY_MS``."""
    raw = os.environ.get(POUR_DELAY_ENV)
    if raw is None:
        return DEFAULT_POUR_DELAY_MS
    try:
        value = int(raw)
    except ValueError:
        value = -1
    if value < 0:
        logger.warning("Ignoring invalid %s=%r, using %d", POUR_DELAY_ENV, raw, DEFAULT_POUR_DELAY_MS)
        return DEFAULT_POUR_DELAY_MS
    return value


def log_level() -> int:
    """Root log level from ``WATERSORT_LOG_LEVEL`` (a name such as DEBUG); INFO otherwise."""
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        logger.warning("Ignoring unknown %s=%r, using INFO", LOG_LEVEL_ENV, name)
        return logging.INFO
    return level
