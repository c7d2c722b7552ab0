"""Theme colors and color utilities for the UI."""

from watersort.core.config import MAX_PATTERNS, MIN_PATTERN


class BoardColors:
    """Light theme palette."""

    BG_TOP = "#e0f7fa"
    BG_BOTTOM = "#80deea"

    PRIMARY = "#00838f"
    PRIMARY_DARK = "#005662"

    GLASS = "#f8fcfd"
    GLASS_BORDER = "#4a6572"
    SELECTED_BORDER = "#ffb74d"
    LOCKED_TINT = "#b39ddb"

    TEXT_PRIMARY = "#1a3a3a"
    TEXT_MUTED = "#78909c"


# Block pattern id -> fill color.
PATTERN_COLORS = {
    1: "#f44336",
    2: "#1976d2",
    3: "#4caf50",
    4: "#ffeb3b",
    5: "#9c27b0",
    6: "#ff9800",
    7: "#00bcd4",
}


def pattern_color(pattern: int) -> str:
    """Fill color for a block pattern id. Raises KeyError outside the pattern range."""
    if not MIN_PATTERN <= pattern <= MAX_PATTERNS:
        raise KeyError(pattern)
    return PATTERN_COLORS[pattern]


def lighten(color: str, amount: float) -> str:
    """Mix a #RRGGBB color toward white; amount 0 keeps it, 1 gives white.

    Anything that is not #RRGGBB comes back unchanged.
    """
    color = color.strip()
    if len(color) != 7 or not color.startswith("#"):
        return color
    try:
        channels = [int(color[i:i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return color
    amount = max(0.0, min(1.0, float(amount)))
    return "#" + "".join(f"{int(c + (255 - c) * amount):02X}" for c in channels)
