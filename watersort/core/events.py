"""Events the engine hands to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from watersort.core.bottle import LockStatus


@dataclass(frozen=True)
class LevelLoaded:
    level_number: int


@dataclass(frozen=True)
class BottleSelected:
    bottle_id: int
    lifted_run_length: int


@dataclass(frozen=True)
class BottleDeselected:
    bottle_id: int


@dataclass(frozen=True)
class PourRejected:
    """Illegal target; the lifted run goes back to rest."""

    from_id: int
    to_id: int


@dataclass(frozen=True)
class PourStarted:
    from_id: int
    to_id: int
    amount: int


@dataclass(frozen=True)
class BottleChange:
    bottle_id: int
    blocks: Tuple[int, ...]


@dataclass(frozen=True)
class BottlesChanged:
    """Authoritative contents of every bottle a pour touched."""

    changes: Tuple[BottleChange, ...]


@dataclass(frozen=True)
class LevelSolved:
    level_number: int


@dataclass(frozen=True)
class UnlockRequired:
    bottle_id: int
    lock_status: LockStatus = LockStatus.AD_UNLOCK


@dataclass(frozen=True)
class BottleUnlocked:
    bottle_id: int


EngineEvent = Union[
    LevelLoaded,
    BottleSelected,
    BottleDeselected,
    PourRejected,
    PourStarted,
    BottlesChanged,
    LevelSolved,
    UnlockRequired,
    BottleUnlocked,
]
