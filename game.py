# file: game.py

import logging
import random
from enum import Enum

from game_config import GameConfig
from game_types import (CreateTile, Direction, EndMove, MergeTile, MoveResult, MoveStatus,
                        StartMove, TileMeta, UpdateTile)
from grid_store import BoardCorruptedError, Grid, Tile
from tile_ids import TileIdAllocator

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    COMPUTING = "computing"
    COMMITTED = "committed"


def line_cells(size: int, direction: Direction):
    """
    Cells of every line, each ordered from the edge tiles slide towards.
    Lines are rows for LEFT/RIGHT and columns for UP/DOWN, in index order.
    """
    near_to_far = list(range(size))
    far_to_near = near_to_far[::-1]
    if direction == Direction.LEFT:
        return [[(r, c) for c in near_to_far] for r in range(size)]
    if direction == Direction.RIGHT:
        return [[(r, c) for c in far_to_near] for r in range(size)]
    if direction == Direction.UP:
        return [[(r, c) for r in near_to_far] for c in range(size)]
    return [[(r, c) for r in far_to_near] for c in range(size)]


def slide(grid: Grid, direction: Direction):
    """
    Slides and merges every line of `grid` in place.
    Returns (events, retired_ids, score_gain). No ids are allocated here,
    so callers may run it on a scratch copy.
    """
    events = []
    retired_ids = []
    score_gain = 0

    for cells in line_cells(grid.size, direction):
        write_idx = 0
        last_placed = None
        last_merged = False

        for cell in cells:
            tile = grid.get_tile_at(*cell)
            if tile is None:
                continue
            grid.set_tile_at(cell[0], cell[1], None)

            if last_placed is not None and not last_merged and last_placed.value == tile.value:
                # A tile may take part in only one merge per move
                last_placed.value *= 2
                score_gain += last_placed.value
                events.append(MergeTile(
                    source=TileMeta(position=last_placed.position, value=tile.value, id=tile.id),
                    destination=last_placed.meta(),
                ))
                retired_ids.append(tile.id)
                last_merged = True
                continue

            target = cells[write_idx]
            grid.set_tile_at(target[0], target[1], tile)
            if target != cell:
                events.append(UpdateTile(tile.meta()))
            last_placed = tile
            last_merged = False
            write_idx += 1

    return events, retired_ids, score_gain


class Game:
    def __init__(self, size=None, config: GameConfig = None, rng: random.Random = None, seed=None):
        if config is None:
            config = GameConfig() if size is None else GameConfig(size=size)
        elif size is not None and size != config.size:
            raise ValueError(f"size={size} conflicts with config.size={config.size}")
        self.config = config
        self.size = config.size
        self.rng = rng if rng is not None else random.Random(seed)
        self.ids = TileIdAllocator()
        self.grid = Grid(self.size)
        self.score = 0
        self.state = EngineState.IDLE
        self._subscribers = []

        self.new_game()

    # --- subscription ---

    def subscribe(self, callback):
        """Registers callback(event); returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, events):
        for event in events:
            for callback in list(self._subscribers):
                callback(event)

    @property
    def busy(self) -> bool:
        return self.state is not EngineState.IDLE

    # --- board setup ---

    def new_game(self):
        """Clears the board, restarts ids and score, spawns the seed tiles."""
        self.grid.clear()
        self.ids.reset()
        self.score = 0
        events = []
        for _ in range(self.config.initial_tiles):
            event = self.add_new_tile(self.grid)
            if event is not None:
                events.append(event)
        self._check_board()
        self._publish(events)
        return events

    def load_values(self, rows, score=0):
        """Seeds an exact board (0 = empty). Tiles get fresh ids in row-major order."""
        if len(rows) != self.size or any(len(row) != self.size for row in rows):
            raise ValueError(f"Board must be {self.size}x{self.size}")
        values = [[int(value) for value in row] for row in rows]
        for r, row in enumerate(values):
            for c, value in enumerate(row):
                if value < 0 or value & (value - 1):
                    raise ValueError(f"Tile value {value} at {(r, c)} is not a power of two")

        self.grid.clear()
        self.ids.reset()
        self.score = int(score)
        events = []
        for r, row in enumerate(values):
            for c, value in enumerate(row):
                if value == 0:
                    continue
                tile = Tile(self.ids.next_id(), value, (r, c))
                self.grid.set_tile_at(r, c, tile)
                events.append(CreateTile(tile.meta()))
        self._check_board()
        self._publish(events)
        return events

    def _spawn_value(self):
        return self.rng.choices(self.config.spawn_values, weights=self.config.spawn_weights)[0]

    def add_new_tile(self, grid):
        """Adds a new tile to a random empty cell of `grid`; returns its CREATE_TILE or None."""
        empty_cells = grid.empty_cells()
        if not empty_cells:
            return None
        r, c = self.rng.choice(empty_cells)
        tile = Tile(self.ids.next_id(), self._spawn_value(), (r, c))
        grid.set_tile_at(r, c, tile)
        return CreateTile(tile.meta())

    # --- moves ---

    def peek_move(self, direction) -> bool:
        """Would this direction change the board? Nothing is mutated or allocated."""
        direction = Direction.parse(direction)
        events, _, _ = slide(self.grid.copy(), direction)
        return bool(events)

    def move(self, direction) -> MoveResult:
        """
        Processes a move in the given direction.
        Returns the ordered events of the move: START_MOVE, the slide/merge
        events line by line, the spawned tile's CREATE_TILE, END_MOVE.
        A move that changes nothing yields status NOOP and no events at all.
        """
        direction = Direction.parse(direction)
        if self.busy:
            logger.debug("Move %s rejected: engine is %s", direction.name, self.state.value)
            return MoveResult(MoveStatus.BUSY, direction)

        self.state = EngineState.COMPUTING
        try:
            working = self.grid.copy()
            line_events, retired_ids, score_gain = slide(working, direction)
            if not line_events:
                logger.debug("Move %s is a no-op", direction.name)
                return MoveResult(MoveStatus.NOOP, direction)

            for tile_id in retired_ids:
                self.ids.retire(tile_id)
            events = [StartMove()] + line_events
            spawn = self.add_new_tile(working)
            if spawn is not None:
                events.append(spawn)
            events.append(EndMove())

            self.score += score_gain
            for event in events:
                self.grid.apply(event)
            self._check_board()
            if __debug__ and working != self.grid:
                logger.error("Replayed board differs from the computed board")
                raise BoardCorruptedError("Replayed board differs from the computed board")
            logger.debug("Move %s: %d events, score %d", direction.name, len(events), self.score)

            self.state = EngineState.COMMITTED
            self._publish(events)
            return MoveResult(MoveStatus.MOVED, direction, tuple(events))
        finally:
            self.state = EngineState.IDLE

    def _check_board(self):
        if __debug__:
            self.grid.check_invariants(self.ids)

    # --- queries ---

    def board_values(self):
        return self.grid.values()

    def max_tile(self) -> int:
        return int(self.grid.values().max())

    def can_move(self) -> bool:
        board = self.grid.values()
        if (board == 0).any():
            return True
        # Equal orthogonal neighbours can merge
        if (board[:, 1:] == board[:, :-1]).any():
            return True
        return bool((board[1:, :] == board[:-1, :]).any())

    def is_game_over(self) -> bool:
        return not self.can_move()

    def print_board(self):
        for row in self.grid.values().tolist():
            print("\t".join(map(str, row)))
        print(f"Score: {self.score}")


# Console mode for quick manual checks
if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    game = Game()
    key_to_direction = {'w': Direction.UP, 's': Direction.DOWN, 'a': Direction.LEFT, 'd': Direction.RIGHT}

    print("Welcome to 2048 (Console Test Mode)!")
    print("Use W/A/S/D + Enter to move. Q to quit.")

    while not game.is_game_over():
        game.print_board()
        key = input("> ").strip().lower()
        if key == 'q':
            print("Quitting.")
            break
        if key not in key_to_direction:
            print("Invalid key.")
            continue
        result = game.move(key_to_direction[key])
        if not result:
            print("Move not possible or did not change the board.")
        else:
            print(f"Generated {len(result.events)} events.")
            for event in result.events:
                print("  ", event.to_dict())

    game.print_board()
    if game.is_game_over():
        print("\nGame Over!")
    print(f"Final Score: {game.score}")
