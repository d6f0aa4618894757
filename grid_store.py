# file: grid_store.py

import logging
from typing import List, Optional

import numpy as np

from game_types import CreateTile, EndMove, MergeTile, Position, StartMove, TileMeta, UpdateTile

logger = logging.getLogger(__name__)


class BoardCorruptedError(AssertionError):
    """The board broke one of its invariants; the move algorithm is at fault."""


class Tile:
    def __init__(self, tile_id: int, value: int, position: Position):
        self.id = tile_id
        self.value = value
        self.position = position

    def meta(self) -> TileMeta:
        return TileMeta(position=self.position, value=self.value, id=self.id)

    def copy(self) -> "Tile":
        return Tile(self.id, self.value, self.position)

    def __repr__(self):
        return f"Tile(id={self.id}, value={self.value}, position={self.position})"


class Grid:
    """
    Authoritative size x size occupancy of live tiles.
    Only the move engine writes to it (set_tile_at / apply).
    """

    def __init__(self, size: int):
        self.size = size
        self.cells: List[List[Optional[Tile]]] = [[None] * size for _ in range(size)]

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise IndexError(f"Cell ({row}, {col}) is outside a {self.size}x{self.size} board")

    def get_tile_at(self, row: int, col: int) -> Optional[Tile]:
        self._check_bounds(row, col)
        return self.cells[row][col]

    def set_tile_at(self, row: int, col: int, tile: Optional[Tile]) -> None:
        self._check_bounds(row, col)
        self.cells[row][col] = tile
        if tile is not None:
            tile.position = (row, col)

    def all_tiles(self) -> List[Tile]:
        """Row-major snapshot of the live tiles."""
        return [tile for row in self.cells for tile in row if tile is not None]

    def find(self, tile_id: int) -> Optional[Tile]:
        for tile in self.all_tiles():
            if tile.id == tile_id:
                return tile
        return None

    def empty_cells(self) -> List[Position]:
        empty_cells = []
        for r in range(self.size):
            for c in range(self.size):
                if self.cells[r][c] is None:
                    empty_cells.append((r, c))
        return empty_cells

    def values(self) -> np.ndarray:
        board = np.zeros((self.size, self.size), dtype=np.int64)
        for tile in self.all_tiles():
            board[tile.position] = tile.value
        return board

    def copy(self) -> "Grid":
        clone = Grid(self.size)
        for tile in self.all_tiles():
            r, c = tile.position
            clone.cells[r][c] = tile.copy()
        return clone

    def clear(self) -> None:
        self.cells = [[None] * self.size for _ in range(self.size)]

    def apply(self, event) -> None:
        """
        Replays one change-event onto the grid. Events of one move must be
        applied in the order they were emitted.
        """
        if isinstance(event, (StartMove, EndMove)):
            return
        if isinstance(event, CreateTile):
            r, c = event.tile.position
            if self.get_tile_at(r, c) is not None:
                raise BoardCorruptedError(f"CREATE_TILE on occupied cell {event.tile.position}")
            self.set_tile_at(r, c, Tile(event.tile.id, event.tile.value, event.tile.position))
        elif isinstance(event, UpdateTile):
            tile = self._take(event.tile.id)
            tile.value = event.tile.value
            self._place(tile, event.tile.position)
        elif isinstance(event, MergeTile):
            source = self._take(event.source.id)
            destination = self.find(event.destination.id)
            if destination is None:
                raise BoardCorruptedError(f"MERGE_TILE into unknown tile {event.destination.id}")
            if destination.position != event.destination.position:
                self._take(destination.id)
                self._place(destination, event.destination.position)
            destination.value = event.destination.value
            logger.debug("Tile %s merged into %s", source.id, destination.id)
        else:
            raise TypeError(f"Not a change-event: {event!r}")

    def _take(self, tile_id: int) -> Tile:
        tile = self.find(tile_id)
        if tile is None:
            raise BoardCorruptedError(f"No live tile with id {tile_id}")
        r, c = tile.position
        self.cells[r][c] = None
        return tile

    def _place(self, tile: Tile, position: Position) -> None:
        r, c = position
        if self.get_tile_at(r, c) is not None:
            raise BoardCorruptedError(f"Cell {position} is already occupied")
        self.set_tile_at(r, c, tile)

    def check_invariants(self, allocator=None) -> None:
        seen_ids = set()
        for r in range(self.size):
            for c in range(self.size):
                tile = self.cells[r][c]
                if tile is None:
                    continue
                if tile.position != (r, c):
                    self._fail(f"Tile {tile.id} stored at {(r, c)} reports position {tile.position}")
                if tile.id in seen_ids:
                    self._fail(f"Duplicate tile id {tile.id}")
                seen_ids.add(tile.id)
                if tile.value <= 0 or tile.value & (tile.value - 1):
                    self._fail(f"Tile {tile.id} has non power-of-two value {tile.value}")
                if allocator is not None and not allocator.is_live(tile.id):
                    self._fail(f"Tile {tile.id} is on the board but its id is not live")

    def _fail(self, message: str) -> None:
        logger.error("Board invariant violated: %s", message)
        raise BoardCorruptedError(message)

    def __eq__(self, other):
        if not isinstance(other, Grid) or other.size != self.size:
            return NotImplemented
        mine = [(t.id, t.value, t.position) for t in self.all_tiles()]
        theirs = [(t.id, t.value, t.position) for t in other.all_tiles()]
        return mine == theirs

    def __repr__(self):
        return "\n".join("\t".join(map(str, row)) for row in self.values().tolist())
