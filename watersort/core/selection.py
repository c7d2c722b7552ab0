from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from watersort.core.bottle import LockStatus
from watersort.core.events import (
    BottleChange,
    BottleDeselected,
    BottleSelected,
    BottlesChanged,
    BottleUnlocked,
    EngineEvent,
    LevelSolved,
    PourRejected,
    PourStarted,
    UnlockRequired,
)
from watersort.core.levels import Level
from watersort.core.pour import apply_pour
from watersort.core.rules import can_pour, is_solved, pour_amount, run_length

logger = logging.getLogger(__name__)


class SelectionState(Enum):
    IDLE = "idle"
    SELECTED = "selected"
    BUSY = "busy"


@dataclass(frozen=True)
class PendingPour:
    from_id: int
    to_id: int
    amount: int


class SelectionStateMachine:
    """Turns bottle taps on one level into validated pours.

    A legal pour moves the machine to BUSY and is only applied by
    :meth:`complete_pour`; taps in between are dropped. One machine serves one
    loaded level, so a new level gets a new machine.
    """

    def __init__(self, level: Level) -> None:
        self._level = level
        self._selected: Optional[int] = None
        self._lifted = 0
        self._pending: Optional[PendingPour] = None
        self._solved_reported = False

    @property
    def level(self) -> Level:
        return self._level

    @property
    def state(self) -> SelectionState:
        if self._pending is not None:
            return SelectionState.BUSY
        if self._selected is not None:
            return SelectionState.SELECTED
        return SelectionState.IDLE

    @property
    def selected_bottle_id(self) -> Optional[int]:
        """Picked-up bottle; during BUSY this is the pour source."""
        return self._selected

    @property
    def lifted_run_length(self) -> int:
        return self._lifted

    @property
    def pending(self) -> Optional[PendingPour]:
        return self._pending

    def on_bottle_tapped(self, bottle_id: int) -> List[EngineEvent]:
        if self._pending is not None:
            logger.debug("Tap on bottle %d dropped while pour is in progress", bottle_id)
            return []

        bottle = self._level.bottle(bottle_id)
        if bottle.lock_status == LockStatus.FREE_UNLOCK:
            bottle.unlock()
            logger.info("Bottle %d unlocked for free", bottle_id)
            return [BottleUnlocked(bottle_id)]
        if bottle.lock_status == LockStatus.AD_UNLOCK:
            return [UnlockRequired(bottle_id, bottle.lock_status)]

        if self._selected is None:
            self._selected = bottle_id
            self._lifted = run_length(bottle)
            logger.debug("Selected bottle %d (lifted %d)", bottle_id, self._lifted)
            return [BottleSelected(bottle_id, self._lifted)]

        if self._selected == bottle_id:
            self._clear()
            return [BottleDeselected(bottle_id)]

        source = self._level.bottle(self._selected)
        if not can_pour(source, bottle):
            self._clear()
            logger.debug("Rejected pour from bottle %d to bottle %d", source.id, bottle_id)
            return [PourRejected(source.id, bottle_id)]

        self._pending = PendingPour(source.id, bottle_id, pour_amount(source, bottle))
        return [PourStarted(source.id, bottle_id, self._pending.amount)]

    def complete_pour(self) -> List[EngineEvent]:
        """Apply the pending pour, then check for a solved board."""
        pending = self._pending
        if pending is None:
            raise RuntimeError("complete_pour called with no pour in progress")
        source = self._level.bottle(pending.from_id)
        target = self._level.bottle(pending.to_id)
        try:
            apply_pour(source, target, pending.amount)
        finally:
            self._pending = None
            self._clear()

        events: List[EngineEvent] = [
            BottlesChanged(
                (
                    BottleChange(source.id, tuple(source.blocks)),
                    BottleChange(target.id, tuple(target.blocks)),
                )
            )
        ]
        if is_solved(self._level) and not self._solved_reported:
            self._solved_reported = True
            logger.info("Level %d solved", self._level.level_number)
            events.append(LevelSolved(self._level.level_number))
        return events

    def _clear(self) -> None:
        self._selected = None
        self._lifted = 0
