from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, NamedTuple, Optional

from watersort.core.config import CAPACITY, MAX_PATTERNS, MIN_PATTERN


class LockStatus(IntEnum):
    UNLOCKED = 0
    FREE_UNLOCK = 1
    AD_UNLOCK = 2


class Position(NamedTuple):
    row: int
    col: int


@dataclass
class Bottle:
    """A stack of block colors, bottom first.

    Only ``watersort.core.pour.apply_pour`` and unlocking mutate a bottle once
    its level is loaded.
    """

    id: int
    position: Position
    blocks: List[int] = field(default_factory=list)
    lock_status: LockStatus = LockStatus.UNLOCKED

    def __post_init__(self) -> None:
        self.blocks = list(self.blocks)
        self.lock_status = LockStatus(self.lock_status)
        if len(self.blocks) > CAPACITY:
            raise ValueError(f"bottle {self.id}: {len(self.blocks)} blocks exceed capacity {CAPACITY}")
        for color in self.blocks:
            if not MIN_PATTERN <= color <= MAX_PATTERNS:
                raise ValueError(
                    f"bottle {self.id}: color {color} outside [{MIN_PATTERN}, {MAX_PATTERNS}]"
                )

    @property
    def is_locked(self) -> bool:
        return self.lock_status != LockStatus.UNLOCKED

    def is_empty(self) -> bool:
        return not self.blocks

    def is_full(self) -> bool:
        return len(self.blocks) >= CAPACITY

    def free_space(self) -> int:
        return CAPACITY - len(self.blocks)

    def top_color(self) -> Optional[int]:
        return self.blocks[-1] if self.blocks else None

    def is_monochrome(self) -> bool:
        """True when empty or every block shares one color."""
        return len(set(self.blocks)) <= 1

    def unlock(self) -> None:
        self.lock_status = LockStatus.UNLOCKED
