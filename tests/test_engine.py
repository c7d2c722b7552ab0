"""Tests for watersort.core.engine – the LevelEngine facade."""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter

import pytest

from watersort.core.bottle import LockStatus, Position
from watersort.core.engine import LevelEngine, PourCompletionSignal, TapOutcome, UnlockOutcome
from watersort.core.errors import InvalidLevelData, NoLevelLoadedError, UnknownBottleError
from watersort.core.events import (
    BottleChange,
    BottleSelected,
    BottlesChanged,
    LevelLoaded,
    LevelSolved,
    PourRejected,
    PourStarted,
    UnlockRequired,
)
from watersort.core.levels import BottleData, LevelData, parse_level
from watersort.core.selection import SelectionState


def _record(number: int, *bottles: tuple) -> dict:
    """Each bottle is ``(blocks,)`` or ``(blocks, lockStatus)``; ids start at 1."""
    return {
        "level": number,
        "bottles": [
            {
                "id": i + 1,
                "position": {"row": i // 6, "col": i % 6},
                "blocks": entry[0],
                "lockStatus": entry[1] if len(entry) > 1 else 0,
            }
            for i, entry in enumerate(bottles)
        ],
    }


def _engine(*bottles: tuple, auto_complete: bool = False, number: int = 1) -> LevelEngine:
    engine = LevelEngine(auto_complete=auto_complete)
    engine.load_level(_record(number, *bottles))
    return engine


def _contents(engine: LevelEngine) -> dict:
    return {b.id: list(b.blocks) for b in engine.bottles()}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoadLevel:
    def test_requires_level(self):
        engine = LevelEngine()
        assert not engine.has_level
        with pytest.raises(NoLevelLoadedError):
            engine.handle_bottle_tap(1)
        with pytest.raises(NoLevelLoadedError):
            engine.is_level_solved()

    def test_load_from_record(self):
        engine = LevelEngine()
        assert engine.load_level(_record(3, ([1, 2],), ([],))) == LevelLoaded(3)
        assert engine.level_number == 3
        assert engine.state is SelectionState.IDLE
        assert _contents(engine) == {1: [1, 2], 2: []}

    def test_load_from_level_data(self):
        engine = LevelEngine()
        engine.load_level(parse_level(_record(4, ([5],))))
        assert engine.level_number == 4

    def test_invalid_data_keeps_previous_level(self):
        engine = _engine(([1, 2],), ([],), number=2)
        engine.handle_bottle_tap(1)
        with pytest.raises(InvalidLevelData):
            engine.load_level(_record(9, ([1, 9],)))
        assert engine.level_number == 2
        assert engine.selected_bottle_id == 1

    def test_level_data_outside_board_rejected(self):
        engine = _engine(([1],), number=2)
        data = LevelData(1, (BottleData(1, Position(5, 50), (1,), LockStatus.UNLOCKED),))
        with pytest.raises(InvalidLevelData, match="no board slot"):
            engine.load_level(data)
        assert engine.level_number == 2

    def test_level_data_bad_color_rejected(self):
        engine = LevelEngine()
        data = LevelData(1, (BottleData(1, Position(0, 0), (1, 9), LockStatus.UNLOCKED),))
        with pytest.raises(InvalidLevelData, match="color 9"):
            engine.load_level(data)
        assert not engine.has_level

    def test_invalid_first_load_leaves_engine_empty(self):
        engine = LevelEngine()
        with pytest.raises(InvalidLevelData):
            engine.load_level(_record(1, ([1, 1, 1, 1, 1],)))
        assert not engine.has_level

    def test_load_resets_selection(self):
        engine = _engine(([1],), ([],))
        engine.handle_bottle_tap(1)
        engine.load_level(_record(2, ([1],), ([],)))
        assert engine.state is SelectionState.IDLE
        assert engine.selected_bottle_id is None

    def test_reload_starts_fresh(self):
        data = parse_level(_record(1, ([1, 2],), ([],)))
        engine = LevelEngine(auto_complete=True)
        engine.load_level(data)
        engine.handle_bottle_tap(1)
        engine.handle_bottle_tap(2)
        assert _contents(engine) == {1: [1], 2: [2]}
        engine.load_level(data)
        assert _contents(engine) == {1: [1, 2], 2: []}

    def test_restart_level(self):
        engine = _engine(([1, 2],), ([],), auto_complete=True, number=5)
        engine.handle_bottle_tap(1)
        engine.handle_bottle_tap(2)
        assert engine.restart_level() == LevelLoaded(5)
        assert _contents(engine) == {1: [1, 2], 2: []}


# ---------------------------------------------------------------------------
# Taps and the completion signal
# ---------------------------------------------------------------------------

class TestHandleBottleTap:
    def test_end_to_end_full_run(self):
        engine = _engine(([1, 1, 2],), ([],))
        first = engine.handle_bottle_tap(1)
        assert first == TapOutcome([BottleSelected(1, 1)])
        second = engine.handle_bottle_tap(2)
        assert second.events == [PourStarted(1, 2, 1)]
        assert isinstance(second.completion, PourCompletionSignal)
        assert engine.is_busy

        events = second.completion()
        assert events[0] == BottlesChanged((BottleChange(1, (1, 1)), BottleChange(2, (2,))))
        assert events[1] == LevelSolved(1)
        assert engine.state is SelectionState.IDLE
        assert engine.is_level_solved()

    def test_end_to_end_two_block_run(self):
        engine = _engine(([2, 1, 1],), ([],))
        assert engine.handle_bottle_tap(1).events == [BottleSelected(1, 2)]
        assert engine.lifted_run_length == 2
        outcome = engine.handle_bottle_tap(2)
        assert outcome.events == [PourStarted(1, 2, 2)]
        events = outcome.completion()
        assert _contents(engine) == {1: [2], 2: [1, 1]}
        assert LevelSolved(1) in events
        assert engine.is_level_solved()

    def test_end_to_end_partial_transfer(self):
        engine = _engine(([3, 3],), ([3, 3, 3],))
        engine.handle_bottle_tap(1)
        outcome = engine.handle_bottle_tap(2)
        assert outcome.events == [PourStarted(1, 2, 1)]
        outcome.completion()
        assert _contents(engine) == {1: [3], 2: [3, 3, 3, 3]}

    def test_rejected_pour(self):
        engine = _engine(([1, 2],), ([2, 1],))
        engine.handle_bottle_tap(1)
        outcome = engine.handle_bottle_tap(2)
        assert outcome.events == [PourRejected(1, 2)]
        assert outcome.completion is None
        assert engine.state is SelectionState.IDLE
        assert _contents(engine) == {1: [1, 2], 2: [2, 1]}

    def test_taps_ignored_until_completion(self):
        engine = _engine(([1, 2],), ([],), ([2],))
        engine.handle_bottle_tap(1)
        outcome = engine.handle_bottle_tap(2)
        before = _contents(engine)
        for bottle_id in (1, 2, 3, 3):
            dropped = engine.handle_bottle_tap(bottle_id)
            assert dropped.ignored
            assert dropped.completion is None
        assert _contents(engine) == before
        assert engine.is_busy
        outcome.completion()
        assert not engine.is_busy
        assert engine.handle_bottle_tap(3).events == [BottleSelected(3, 1)]

    def test_unknown_bottle(self):
        engine = _engine(([1],))
        with pytest.raises(UnknownBottleError):
            engine.handle_bottle_tap(42)

    def test_auto_complete(self):
        engine = _engine(([1, 2],), ([2],), auto_complete=True)
        engine.handle_bottle_tap(1)
        outcome = engine.handle_bottle_tap(2)
        assert outcome.completion is None
        assert outcome.events == [
            PourStarted(1, 2, 1),
            BottlesChanged((BottleChange(1, (1,)), BottleChange(2, (2, 2)))),
            LevelSolved(1),
        ]
        assert engine.state is SelectionState.IDLE

    def test_signal_fired_twice(self):
        engine = _engine(([1, 2],), ([],))
        engine.handle_bottle_tap(1)
        signal = engine.handle_bottle_tap(2).completion
        signal()
        assert signal.fired
        with pytest.raises(RuntimeError):
            signal()

    def test_stale_signal_discarded(self, caplog: pytest.LogCaptureFixture):
        engine = _engine(([1, 2],), ([],))
        engine.handle_bottle_tap(1)
        signal = engine.handle_bottle_tap(2).completion
        engine.load_level(_record(2, ([1, 2],), ([],)))
        with caplog.at_level(logging.WARNING, logger="watersort.core.engine"):
            assert signal() == []
        assert "replaced level" in caplog.text
        assert _contents(engine) == {1: [1, 2], 2: []}

    def test_conservation_over_a_game(self):
        engine = _engine(([1, 2, 1, 2],), ([2, 1, 2, 1],), ([],), auto_complete=True)
        initial = Counter(c for blocks in _contents(engine).values() for c in blocks)
        for source, target in [(1, 3), (2, 1), (2, 3), (1, 2), (3, 1), (2, 3)]:
            engine.handle_bottle_tap(source)
            engine.handle_bottle_tap(target)
            if engine.state is SelectionState.SELECTED:
                engine.handle_bottle_tap(target)
            contents = _contents(engine)
            assert Counter(c for blocks in contents.values() for c in blocks) == initial
            assert all(0 <= len(blocks) <= 4 for blocks in contents.values())


# ---------------------------------------------------------------------------
# Unlocking
# ---------------------------------------------------------------------------

class TestUnlock:
    def test_ad_locked_tap_then_external_unlock(self):
        engine = _engine(([1],), ([], 2))
        assert engine.handle_bottle_tap(2).events == [UnlockRequired(2, LockStatus.AD_UNLOCK)]
        assert engine.unlock_bottle(2) is UnlockOutcome.UNLOCKED
        assert engine.bottle(2).lock_status is LockStatus.UNLOCKED
        engine.handle_bottle_tap(1)
        assert engine.handle_bottle_tap(2).events == [PourStarted(1, 2, 1)]

    def test_free_unlock_explicit(self):
        engine = _engine(([1],), ([], 1))
        assert engine.unlock_bottle(2) is UnlockOutcome.UNLOCKED
        assert engine.unlock_bottle(2) is UnlockOutcome.ALREADY_UNLOCKED

    def test_unlock_ignored_while_busy(self):
        engine = _engine(([1],), ([],), ([], 1))
        engine.handle_bottle_tap(1)
        engine.handle_bottle_tap(2)
        assert engine.unlock_bottle(3) is UnlockOutcome.IGNORED_BUSY
        assert engine.bottle(3).lock_status is LockStatus.FREE_UNLOCK

    def test_unlock_unknown_bottle(self):
        engine = _engine(([1],))
        with pytest.raises(UnknownBottleError):
            engine.unlock_bottle(5)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_bottles_ordered_by_position(self):
        engine = LevelEngine()
        engine.load_level(
            {
                "level": 1,
                "bottles": [
                    {"id": 10, "position": {"row": 1, "col": 0}, "blocks": [], "lockStatus": 0},
                    {"id": 20, "position": {"row": 0, "col": 2}, "blocks": [], "lockStatus": 0},
                    {"id": 30, "position": {"row": 0, "col": 1}, "blocks": [], "lockStatus": 0},
                ],
            }
        )
        assert [b.id for b in engine.bottles()] == [30, 20, 10]

    def test_is_level_solved_idempotent(self):
        engine = _engine(([2, 3],), ([],))
        assert engine.is_level_solved() is False
        assert engine.is_level_solved() is False


# ---------------------------------------------------------------------------
# Snapshots handed to callers
# ---------------------------------------------------------------------------

class TestSnapshots:
    def test_bottle_is_frozen_copy(self):
        engine = _engine(([1, 2],), ([],))
        bottle = engine.bottle(1)
        assert isinstance(bottle, BottleData)
        assert bottle.blocks == (1, 2)
        with pytest.raises(AttributeError):
            bottle.blocks.append(9)
        with pytest.raises(dataclasses.FrozenInstanceError):
            bottle.blocks = (9,)
        assert _contents(engine) == {1: [1, 2], 2: []}

    def test_bottles_are_frozen_copies(self):
        engine = _engine(([1],), ([], 1))
        bottles = engine.bottles()
        assert all(isinstance(b, BottleData) for b in bottles)
        with pytest.raises(dataclasses.FrozenInstanceError):
            bottles[1].lock_status = LockStatus.UNLOCKED
        bottles.clear()
        assert engine.bottle(2).lock_status is LockStatus.FREE_UNLOCK
        assert len(engine.bottles()) == 2

    def test_snapshot_does_not_follow_pours(self):
        engine = _engine(([1, 2],), ([],), auto_complete=True)
        before = engine.bottle(1)
        engine.handle_bottle_tap(1)
        engine.handle_bottle_tap(2)
        assert before.blocks == (1, 2)
        assert engine.bottle(1).blocks == (1,)
