"""Pour legality and the solved-board predicate.

Everything here is a pure function of bottle contents; nothing mutates.
"""

from __future__ import annotations

from watersort.core.bottle import Bottle, LockStatus
from watersort.core.config import CAPACITY
from watersort.core.levels import Level


def run_length(bottle: Bottle) -> int:
    """Number of equal-colored blocks at the top of ``bottle`` (0 when empty)."""
    blocks = bottle.blocks
    if not blocks:
        return 0
    top = blocks[-1]
    count = 0
    for color in reversed(blocks):
        if color != top:
            break
        count += 1
    return count


def can_pour(source: Bottle, target: Bottle) -> bool:
    """Whether the top run of ``source`` may go onto ``target``.

    An empty target accepts any color.
    """
    if target.lock_status != LockStatus.UNLOCKED:
        return False
    if not source.blocks:
        return False
    if len(target.blocks) >= CAPACITY:
        return False
    source_top = source.blocks[-1]
    target_top = target.blocks[-1] if target.blocks else source_top
    return source_top == target_top


def pour_amount(source: Bottle, target: Bottle) -> int:
    """Blocks that move in a legal pour; may be less than the run when ``target`` is nearly full."""
    return min(run_length(source), CAPACITY - len(target.blocks))


def is_solved(level: Level) -> bool:
    return all(bottle.is_monochrome() for bottle in level.bottles())
