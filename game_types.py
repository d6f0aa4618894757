# file: game_types.py
"""
Value types shared by the engine and its consumers: move directions,
tile snapshots and the five change-events a move can produce.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, Tuple, Union

Position = Tuple[int, int]


class InvalidDirectionError(ValueError):
    pass


class Direction(IntEnum):
    # Same numbering as the gym action space: 0: Up, 1: Down, 2: Left, 3: Right
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @classmethod
    def parse(cls, value) -> "Direction":
        """
        Accepts a Direction, its int value, or a name such as 'up',
        'ArrowUp' or 'swiped-up'. Raises InvalidDirectionError otherwise.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidDirectionError(f"Invalid move direction: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidDirectionError(f"Invalid move direction: {value!r}") from None
        if isinstance(value, str):
            key = value.strip().lower()
            for prefix in ("arrow", "swiped-"):
                if key.startswith(prefix):
                    key = key[len(prefix):]
            try:
                return cls[key.upper()]
            except KeyError:
                pass
        raise InvalidDirectionError(f"Invalid move direction: {value!r}")


@dataclass(frozen=True)
class TileMeta:
    position: Position
    value: int
    id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"position": [self.position[0], self.position[1]], "value": self.value, "id": self.id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TileMeta":
        row, col = data["position"]
        return cls(position=(int(row), int(col)), value=int(data["value"]), id=int(data["id"]))


@dataclass(frozen=True)
class StartMove:
    type: ClassVar[str] = "START_MOVE"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class CreateTile:
    tile: TileMeta
    type: ClassVar[str] = "CREATE_TILE"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "tile": self.tile.to_dict()}


@dataclass(frozen=True)
class UpdateTile:
    tile: TileMeta
    type: ClassVar[str] = "UPDATE_TILE"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "tile": self.tile.to_dict()}


@dataclass(frozen=True)
class MergeTile:
    # source: value before the merge, position = merge cell (where it disappears)
    # destination: doubled value, position = merge cell
    source: TileMeta
    destination: TileMeta
    type: ClassVar[str] = "MERGE_TILE"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "source": self.source.to_dict(),
                "destination": self.destination.to_dict()}


@dataclass(frozen=True)
class EndMove:
    type: ClassVar[str] = "END_MOVE"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type}


ActionMeta = Union[StartMove, CreateTile, UpdateTile, MergeTile, EndMove]


def action_from_dict(data: Dict[str, Any]) -> ActionMeta:
    kind = data.get("type")
    if kind == StartMove.type:
        return StartMove()
    if kind == EndMove.type:
        return EndMove()
    if kind == CreateTile.type:
        return CreateTile(TileMeta.from_dict(data["tile"]))
    if kind == UpdateTile.type:
        return UpdateTile(TileMeta.from_dict(data["tile"]))
    if kind == MergeTile.type:
        return MergeTile(TileMeta.from_dict(data["source"]), TileMeta.from_dict(data["destination"]))
    raise ValueError(f"Unknown action type: {kind!r}")


class MoveStatus(Enum):
    MOVED = "moved"
    NOOP = "noop"
    BUSY = "busy"


@dataclass(frozen=True)
class MoveResult:
    status: MoveStatus
    direction: Direction
    events: Tuple[ActionMeta, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return self.status is MoveStatus.MOVED

    def to_dicts(self):
        return [event.to_dict() for event in self.events]
