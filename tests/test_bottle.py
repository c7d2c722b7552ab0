"""Tests for watersort.core.bottle – the bottle data entity."""

from __future__ import annotations

import pytest

from watersort.core.bottle import Bottle, LockStatus, Position


# ---------------------------------------------------------------------------
# Construction and invariants
# ---------------------------------------------------------------------------

class TestBottleCreation:
    def test_defaults(self):
        b = Bottle(id=1, position=Position(0, 0))
        assert b.blocks == []
        assert b.lock_status is LockStatus.UNLOCKED

    def test_blocks_copied(self):
        source = [1, 2]
        b = Bottle(id=1, position=Position(0, 0), blocks=source)
        source.append(3)
        assert b.blocks == [1, 2]

    def test_lock_status_coerced_from_int(self):
        b = Bottle(id=1, position=Position(0, 0), lock_status=2)
        assert b.lock_status is LockStatus.AD_UNLOCK

    def test_over_capacity_rejected(self):
        with pytest.raises(ValueError, match="exceed capacity"):
            Bottle(id=1, position=Position(0, 0), blocks=[1, 1, 1, 1, 1])

    @pytest.mark.parametrize("color", [0, 8, -1])
    def test_color_out_of_range_rejected(self, color):
        with pytest.raises(ValueError, match="outside"):
            Bottle(id=1, position=Position(0, 0), blocks=[color])

    def test_unknown_lock_status_rejected(self):
        with pytest.raises(ValueError):
            Bottle(id=1, position=Position(0, 0), lock_status=5)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestBottleQueries:
    def test_empty(self):
        b = Bottle(id=1, position=Position(0, 0))
        assert b.is_empty()
        assert not b.is_full()
        assert b.free_space() == 4
        assert b.top_color() is None
        assert b.is_monochrome()

    def test_full_and_top(self):
        b = Bottle(id=1, position=Position(0, 0), blocks=[1, 2, 3, 4])
        assert b.is_full()
        assert b.free_space() == 0
        assert b.top_color() == 4

    def test_monochrome(self):
        assert Bottle(id=1, position=Position(0, 0), blocks=[2, 2, 2]).is_monochrome()
        assert not Bottle(id=1, position=Position(0, 0), blocks=[2, 3]).is_monochrome()

    def test_lock_and_unlock(self):
        b = Bottle(id=1, position=Position(0, 0), lock_status=LockStatus.FREE_UNLOCK)
        assert b.is_locked
        b.unlock()
        assert not b.is_locked
        assert b.lock_status is LockStatus.UNLOCKED

    def test_position_is_tuple(self):
        p = Position(1, 3)
        assert p.row == 1
        assert p.col == 3
        assert p < Position(2, 0)
