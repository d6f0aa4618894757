# file: animation.py
"""
Replays engine events as timed animations.

The driver keeps its own view of the tiles (id -> position, value), built
only from the events it receives. Events between START_MOVE and END_MOVE
are collected and animated together as one batch of fixed duration;
CREATE_TILE events outside a bracket (new game) form a batch of their own.
The driver never calls back into the engine.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from game_config import ANIMATION_DURATION_MS
from game_types import CreateTile, EndMove, MergeTile, StartMove, UpdateTile

logger = logging.getLogger(__name__)


class SpriteFrame(NamedTuple):
    id: int
    row: float
    col: float
    value: int
    scale: float


class _Sprite:
    def __init__(self, tile_id, from_rc, value):
        self.id = tile_id
        self.from_rc = from_rc
        self.to_rc = from_rc
        self.value = value
        self.final_value = value
        self.kind = 'move'  # 'move' | 'appear' | 'merge_moving_tile' | 'merge_target_tile'


class AnimationDriver:
    def __init__(self, duration_ms: int = ANIMATION_DURATION_MS):
        if duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")
        self.duration_ms = duration_ms
        self.tiles: Dict[int, Tuple[Tuple[int, int], int]] = {}
        self._pending: Optional[List] = None
        self._queue: List[List] = []
        self._sprites: Dict[int, _Sprite] = {}
        self._start_time: Optional[float] = None
        self.progress = 0.0

    @property
    def busy(self) -> bool:
        return self._pending is not None or self._start_time is not None or bool(self._queue)

    def reset(self) -> None:
        self.tiles.clear()
        self._pending = None
        self._queue.clear()
        self._sprites.clear()
        self._start_time = None
        self.progress = 0.0

    def feed(self, event, now_ms: float) -> None:
        """Accepts one event in emission order; usable directly as a Game subscriber via a lambda."""
        if isinstance(event, StartMove):
            if self._pending is not None:
                raise RuntimeError("START_MOVE received inside an open transaction")
            self._pending = []
        elif isinstance(event, EndMove):
            if self._pending is None:
                raise RuntimeError("END_MOVE received without START_MOVE")
            batch, self._pending = self._pending, None
            self._enqueue(batch, now_ms)
        elif isinstance(event, (CreateTile, UpdateTile, MergeTile)):
            if self._pending is not None:
                self._pending.append(event)
            elif isinstance(event, CreateTile):
                self._enqueue([event], now_ms)
            else:
                raise RuntimeError(f"{event.type} received outside a transaction")
        else:
            raise TypeError(f"Not a change-event: {event!r}")

    def _enqueue(self, batch, now_ms):
        self._queue.append(batch)
        if self._start_time is None:
            self._start_next(now_ms)

    def _start_next(self, now_ms):
        batch = self._queue.pop(0)
        self._sprites = {}
        # Positions of tiles as the batch progresses, so later events see earlier ones
        current = {tile_id: pos for tile_id, (pos, _) in self.tiles.items()}

        for event in batch:
            if isinstance(event, CreateTile):
                sprite = _Sprite(event.tile.id, event.tile.position, event.tile.value)
                sprite.kind = 'appear'
                self._sprites[sprite.id] = sprite
                current[sprite.id] = event.tile.position
            elif isinstance(event, UpdateTile):
                sprite = self._sprite_for(event.tile.id, current)
                sprite.to_rc = event.tile.position
                current[sprite.id] = event.tile.position
            elif isinstance(event, MergeTile):
                source = self._sprite_for(event.source.id, current)
                source.to_rc = event.source.position
                source.kind = 'merge_moving_tile'
                current.pop(source.id, None)
                target = self._sprite_for(event.destination.id, current)
                target.to_rc = event.destination.position
                target.final_value = event.destination.value
                if target.kind != 'appear':
                    target.kind = 'merge_target_tile'

        self._start_time = now_ms
        self.progress = 0.0
        if self.duration_ms == 0:
            self._finish()

    def _sprite_for(self, tile_id, current):
        sprite = self._sprites.get(tile_id)
        if sprite is None:
            if tile_id not in self.tiles:
                raise KeyError(f"Animation event for unknown tile {tile_id}")
            pos, value = self.tiles[tile_id]
            sprite = _Sprite(tile_id, current.get(tile_id, pos), value)
            self._sprites[tile_id] = sprite
        return sprite

    def update(self, now_ms: float) -> bool:
        """Advances the running batch; returns True while anything is still animating."""
        if self._start_time is None:
            return False
        elapsed = now_ms - self._start_time
        self.progress = min(elapsed / self.duration_ms, 1.0) if self.duration_ms else 1.0
        if self.progress >= 1.0:
            self._finish()
            if self._queue:
                self._start_next(now_ms)
        return self.busy

    def _finish(self):
        for sprite in self._sprites.values():
            if sprite.kind == 'merge_moving_tile':
                self.tiles.pop(sprite.id, None)
            else:
                self.tiles[sprite.id] = (sprite.to_rc, sprite.final_value)
        self._sprites = {}
        self._start_time = None
        self.progress = 0.0
        logger.debug("Animation batch finished, %d tiles on screen", len(self.tiles))

    def frames(self) -> List[SpriteFrame]:
        """Everything to draw right now, static tiles first."""
        frames = []
        for tile_id, (pos, value) in sorted(self.tiles.items()):
            if tile_id not in self._sprites:
                frames.append(SpriteFrame(tile_id, float(pos[0]), float(pos[1]), value, 1.0))

        p = self.progress
        for sprite in self._sprites.values():
            (r0, c0), (r1, c1) = sprite.from_rc, sprite.to_rc
            row = r0 + (r1 - r0) * p
            col = c0 + (c1 - c0) * p
            value, scale = sprite.value, 1.0
            if sprite.kind == 'appear':
                scale = p
                value = sprite.final_value
            elif sprite.kind == 'merge_target_tile' and p > 0.1:
                value = sprite.final_value
                scale = 1.0 + 0.2 * float(np.sin(p * np.pi))
            frames.append(SpriteFrame(sprite.id, row, col, value, scale))
        return frames
