"""Exceptions raised by the puzzle engine."""


class WaterSortError(Exception):
    """Base class for engine errors."""


class InvalidLevelData(WaterSortError, ValueError):
    """A level record cannot be turned into a playable board."""


class UnknownBottleError(WaterSortError, KeyError):
    """A bottle id does not exist in the current level."""


class NoLevelLoadedError(WaterSortError, RuntimeError):
    """The engine was used before a level was loaded."""


class PourInvariantError(WaterSortError, AssertionError):
    """A pour was applied without a matching validated amount."""
