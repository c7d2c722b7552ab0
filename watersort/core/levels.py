from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from watersort.core.bottle import Bottle, LockStatus, Position
from watersort.core.config import CAPACITY, DEFAULT_LAYOUT, MAX_PATTERNS, MIN_PATTERN, BoardLayout, levels_dir
from watersort.core.errors import InvalidLevelData, UnknownBottleError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BottleData:
    id: int
    position: Position
    blocks: Tuple[int, ...]
    lock_status: LockStatus

    @classmethod
    def of(cls, bottle: Bottle) -> "BottleData":
        """Frozen copy of a live bottle's current contents."""
        return cls(id=bottle.id, position=bottle.position, blocks=tuple(bottle.blocks), lock_status=bottle.lock_status)


@dataclass(frozen=True)
class LevelData:
    """Validated, immutable description of one puzzle as shipped in a LevelSet."""

    level: int
    bottles: Tuple[BottleData, ...]


class Level:
    """Live board state for one loaded level.

    The bottle set is fixed at construction; bottle contents change as pours apply.
    Raises InvalidLevelData when ``data`` does not fit ``layout`` or breaks a bottle invariant.
    """

    def __init__(self, data: LevelData, layout: BoardLayout = DEFAULT_LAYOUT) -> None:
        check_level(data, layout)
        self._data = data
        try:
            self._bottles: Dict[int, Bottle] = {
                b.id: Bottle(id=b.id, position=b.position, blocks=list(b.blocks), lock_status=b.lock_status)
                for b in data.bottles
            }
        except ValueError as e:
            raise InvalidLevelData(f"level {data.level}: {e}") from e

    @property
    def level_number(self) -> int:
        return self._data.level

    @property
    def data(self) -> LevelData:
        return self._data

    def bottle(self, bottle_id: int) -> Bottle:
        try:
            return self._bottles[bottle_id]
        except KeyError:
            raise UnknownBottleError(f"level {self.level_number} has no bottle {bottle_id}") from None

    def bottles(self) -> List[Bottle]:
        """Bottles ordered by board position (top row first)."""
        return sorted(self._bottles.values(), key=lambda b: b.position)


def check_level(data: LevelData, layout: BoardLayout = DEFAULT_LAYOUT) -> None:
    """Reject bottles outside the board and repeated ids or positions."""
    seen_ids: set[int] = set()
    seen_positions: set[Position] = set()
    for bottle in data.bottles:
        position = bottle.position
        if not layout.contains(position):
            raise InvalidLevelData(
                f"level {data.level}, bottle {bottle.id}: position (row {position.row}, col {position.col}) "
                f"has no board slot in a {layout.rows}x{layout.columns} layout"
            )
        if bottle.id in seen_ids:
            raise InvalidLevelData(f"level {data.level}: duplicate bottle id {bottle.id}")
        if position in seen_positions:
            raise InvalidLevelData(
                f"level {data.level}: bottle {bottle.id} shares position (row {position.row}, col {position.col})"
            )
        seen_ids.add(bottle.id)
        seen_positions.add(position)


def _require_int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidLevelData(f"{what}: expected an integer, got {value!r}")
    return value


def _parse_bottle(raw: Any, level: int) -> BottleData:
    if not isinstance(raw, Mapping):
        raise InvalidLevelData(f"level {level}: bottle record must be a mapping, got {raw!r}")
    if "id" not in raw:
        raise InvalidLevelData(f"level {level}: bottle record missing 'id'")
    bottle_id = _require_int(raw["id"], f"level {level}: bottle id")
    where = f"level {level}, bottle {bottle_id}"

    pos = raw.get("position")
    if not isinstance(pos, Mapping) or "row" not in pos or "col" not in pos:
        raise InvalidLevelData(f"{where}: missing or invalid 'position'")
    position = Position(_require_int(pos["row"], f"{where}: row"), _require_int(pos["col"], f"{where}: col"))

    blocks = raw.get("blocks", [])
    if not isinstance(blocks, list):
        raise InvalidLevelData(f"{where}: 'blocks' must be a list")
    if len(blocks) > CAPACITY:
        raise InvalidLevelData(f"{where}: {len(blocks)} blocks exceed capacity {CAPACITY}")
    for color in blocks:
        _require_int(color, f"{where}: block")
        if not MIN_PATTERN <= color <= MAX_PATTERNS:
            raise InvalidLevelData(f"{where}: color {color} outside [{MIN_PATTERN}, {MAX_PATTERNS}]")

    raw_lock = _require_int(raw.get("lockStatus", 0), f"{where}: lockStatus")
    try:
        lock_status = LockStatus(raw_lock)
    except ValueError:
        raise InvalidLevelData(f"{where}: unknown lockStatus {raw_lock}") from None

    return BottleData(id=bottle_id, position=position, blocks=tuple(blocks), lock_status=lock_status)


def parse_level(raw: Any, layout: BoardLayout = DEFAULT_LAYOUT) -> LevelData:
    """Validate one ``{level, bottles}`` record. Raises InvalidLevelData, never truncates."""
    if not isinstance(raw, Mapping):
        raise InvalidLevelData(f"level record must be a mapping, got {raw!r}")
    if "level" not in raw:
        raise InvalidLevelData("level record missing 'level'")
    number = _require_int(raw["level"], "level number")
    records = raw.get("bottles")
    if not isinstance(records, list):
        raise InvalidLevelData(f"level {number}: 'bottles' must be a list")

    data = LevelData(level=number, bottles=tuple(_parse_bottle(record, number) for record in records))
    check_level(data, layout)
    return data


def parse_level_set(raw: Any, layout: BoardLayout = DEFAULT_LAYOUT, source: str = "level set") -> List[LevelData]:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("levels"), list):
        raise InvalidLevelData(f"{source}: expected a mapping with a 'levels' list")
    levels = [parse_level(item, layout) for item in raw["levels"]]
    if not levels:
        raise InvalidLevelData(f"{source}: 'levels' is empty")
    return levels


class LevelRepository:
    """All levels found in the LevelSet files of a directory, keyed by level number."""

    def __init__(self, directory: Optional[Path] = None, layout: BoardLayout = DEFAULT_LAYOUT) -> None:
        self._directory = directory if directory is not None else levels_dir()
        self._layout = layout
        self._levels = self._load_levels()

    def all(self) -> List[LevelData]:
        return list(self._levels.values())

    def get(self, number: int) -> LevelData:
        return self._levels[number]

    def first(self) -> LevelData:
        return next(iter(self._levels.values()))

    def next_after(self, number: int) -> Optional[LevelData]:
        """The level following ``number`` in play order, or None after the last one."""
        for candidate in self._levels:
            if candidate > number:
                return self._levels[candidate]
        return None

    def _load_levels(self) -> Dict[int, LevelData]:
        if not self._directory.exists():
            raise FileNotFoundError(f"Levels directory not found: {self._directory}")

        found: Dict[int, Tuple[LevelData, str]] = {}
        for path in sorted(self._directory.glob("*.yaml")):
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
            for level in parse_level_set(raw, self._layout, source=path.name):
                if level.level in found:
                    raise InvalidLevelData(
                        f"{path.name}: level {level.level} already defined in {found[level.level][1]}"
                    )
                found[level.level] = (level, path.name)

        if not found:
            raise InvalidLevelData(f"No level set files (*.yaml) found in {self._directory}")
        logger.info("Loaded %d levels from %s", len(found), self._directory)
        return {number: found[number][0] for number in sorted(found)}
