"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from watersort.core.bottle import LockStatus, Position
from watersort.core.engine import LevelEngine
from watersort.core.levels import BottleData, LevelRepository


@dataclass
class BottleView:
    """Render state for one bottle: contents, lock, selection and lifted run."""

    bottle_id: int
    position: Position
    blocks: Tuple[int, ...]
    lock_status: LockStatus
    selected: bool = False
    lifted: int = 0

    @property
    def locked(self) -> bool:
        return self.lock_status != LockStatus.UNLOCKED

    @classmethod
    def from_bottle(cls, bottle: BottleData, selected_id: Optional[int] = None, lifted: int = 0) -> "BottleView":
        selected = bottle.id == selected_id
        return cls(
            bottle_id=bottle.id,
            position=bottle.position,
            blocks=bottle.blocks,
            lock_status=bottle.lock_status,
            selected=selected,
            lifted=lifted if selected else 0,
        )


def next_level_available(engine: LevelEngine, levels: LevelRepository) -> bool:
    """True when the current board is solved and a later level exists, however it became solved."""
    if not engine.has_level or not engine.is_level_solved():
        return False
    return levels.next_after(engine.level_number) is not None
