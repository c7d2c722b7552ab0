from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Union

from watersort.core.config import DEFAULT_LAYOUT, BoardLayout
from watersort.core.errors import NoLevelLoadedError
from watersort.core.events import EngineEvent, LevelLoaded
from watersort.core.levels import BottleData, Level, LevelData, parse_level
from watersort.core.rules import is_solved
from watersort.core.selection import SelectionState, SelectionStateMachine

logger = logging.getLogger(__name__)


class UnlockOutcome(Enum):
    UNLOCKED = "unlocked"
    ALREADY_UNLOCKED = "already_unlocked"
    IGNORED_BUSY = "ignored_busy"


class PourCompletionSignal:
    """Handed out with a PourStarted event; call it once the pour animation ends.

    Calling it applies the pour and returns the resulting events. A signal
    whose level has since been replaced does nothing.
    """

    def __init__(self, engine: "LevelEngine", machine: SelectionStateMachine) -> None:
        self._engine = engine
        self._machine = machine
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> List[EngineEvent]:
        return self._engine._complete(self)


@dataclass
class TapOutcome:
    """What one tap produced. ``events`` is empty when the tap was dropped."""

    events: List[EngineEvent] = field(default_factory=list)
    completion: Optional[PourCompletionSignal] = None

    @property
    def ignored(self) -> bool:
        return not self.events


class LevelEngine:
    """Single entry point for the presentation layer.

    Owns the current level and its selection state. Every public method runs
    under one lock, and the BUSY state keeps pours serialized across the gap
    between PourStarted and the completion signal.

    With ``auto_complete`` the completion signal fires before
    :meth:`handle_bottle_tap` returns, for callers that do not animate.
    """

    def __init__(self, layout: BoardLayout = DEFAULT_LAYOUT, auto_complete: bool = False) -> None:
        self._layout = layout
        self._auto_complete = auto_complete
        self._lock = threading.RLock()
        self._machine: Optional[SelectionStateMachine] = None

    # -- level lifecycle ---------------------------------------------------

    def load_level(self, level_data: Union[LevelData, Mapping[str, Any]]) -> LevelLoaded:
        """Replace the current level. On InvalidLevelData the previous level stays active."""
        data = level_data if isinstance(level_data, LevelData) else parse_level(level_data, self._layout)
        level = Level(data, self._layout)
        with self._lock:
            if self._machine is not None and self._machine.state is SelectionState.BUSY:
                logger.warning(
                    "Level %d replaced with a pour in progress", self._machine.level.level_number
                )
            self._machine = SelectionStateMachine(level)
            logger.info("Loaded level %d (%d bottles)", data.level, len(data.bottles))
            return LevelLoaded(data.level)

    def restart_level(self) -> LevelLoaded:
        with self._lock:
            return self.load_level(self._require_machine().level.data)

    # -- input -------------------------------------------------------------

    def handle_bottle_tap(self, bottle_id: int) -> TapOutcome:
        with self._lock:
            machine = self._require_machine()
            events = machine.on_bottle_tapped(bottle_id)
            if machine.state is not SelectionState.BUSY or not events:
                return TapOutcome(events)
            signal = PourCompletionSignal(self, machine)
            if self._auto_complete:
                events.extend(signal())
                return TapOutcome(events)
            return TapOutcome(events, completion=signal)

    def unlock_bottle(self, bottle_id: int) -> UnlockOutcome:
        """Unlock a FreeUnlock or AdUnlock bottle, e.g. after an ad was watched."""
        with self._lock:
            machine = self._require_machine()
            bottle = machine.level.bottle(bottle_id)
            if machine.state is SelectionState.BUSY:
                return UnlockOutcome.IGNORED_BUSY
            if not bottle.is_locked:
                return UnlockOutcome.ALREADY_UNLOCKED
            bottle.unlock()
            logger.info("Bottle %d unlocked", bottle_id)
            return UnlockOutcome.UNLOCKED

    def _complete(self, signal: PourCompletionSignal) -> List[EngineEvent]:
        with self._lock:
            if signal._fired:
                raise RuntimeError("pour completion signal fired twice")
            signal._fired = True
            if signal._machine is not self._machine:
                logger.warning("Discarding completion signal from a replaced level")
                return []
            return signal._machine.complete_pour()

    # -- queries -----------------------------------------------------------
    # Bottle queries return frozen BottleData copies; only pours and unlocks
    # change the live bottles.

    @property
    def has_level(self) -> bool:
        return self._machine is not None

    @property
    def level_number(self) -> int:
        with self._lock:
            return self._require_machine().level.level_number

    @property
    def level_data(self) -> LevelData:
        with self._lock:
            return self._require_machine().level.data

    @property
    def layout(self) -> BoardLayout:
        return self._layout

    @property
    def state(self) -> SelectionState:
        with self._lock:
            return self._require_machine().state

    @property
    def is_busy(self) -> bool:
        return self.state is SelectionState.BUSY

    @property
    def selected_bottle_id(self) -> Optional[int]:
        with self._lock:
            return self._require_machine().selected_bottle_id

    @property
    def lifted_run_length(self) -> int:
        with self._lock:
            return self._require_machine().lifted_run_length

    def bottle(self, bottle_id: int) -> BottleData:
        with self._lock:
            return BottleData.of(self._require_machine().level.bottle(bottle_id))

    def bottles(self) -> List[BottleData]:
        with self._lock:
            return [BottleData.of(b) for b in self._require_machine().level.bottles()]

    def is_level_solved(self) -> bool:
        with self._lock:
            return is_solved(self._require_machine().level)

    def _require_machine(self) -> SelectionStateMachine:
        if self._machine is None:
            raise NoLevelLoadedError("no level loaded")
        return self._machine
