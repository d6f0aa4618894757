# file: game_config.py

import os
from dataclasses import dataclass
from typing import Tuple

# Константы
BOARD_SIZE = 4
ANIMATION_DURATION_MS = 250
INITIAL_TILES = 2

# Pixel geometry for hosts; the engine works in (row, col) only
PIXEL_SIZE = 4
BOARD_MARGIN = 2 * PIXEL_SIZE
DEFAULT_BOARD_WIDTH = 400
REM_PX = 16

BACKGROUND_COLOR = (187, 173, 160)
FONT_COLOR = (119, 110, 101)
SCORE_FONT_COLOR = (238, 228, 218)

# value: (tile colour, text colour)
TILE_COLORS = {
    0: ((205, 193, 180), FONT_COLOR), 2: ((238, 228, 218), FONT_COLOR),
    4: ((237, 224, 200), FONT_COLOR), 8: ((242, 177, 121), SCORE_FONT_COLOR),
    16: ((245, 149, 99), SCORE_FONT_COLOR), 32: ((246, 124, 95), SCORE_FONT_COLOR),
    64: ((246, 94, 59), SCORE_FONT_COLOR), 128: ((237, 207, 114), SCORE_FONT_COLOR),
    256: ((237, 204, 97), SCORE_FONT_COLOR), 512: ((237, 200, 80), SCORE_FONT_COLOR),
    1024: ((237, 197, 63), SCORE_FONT_COLOR), 2048: ((237, 194, 46), SCORE_FONT_COLOR),
}

ENV_BOARD_SIZE = "GAME2048_BOARD_SIZE"
ENV_ANIMATION_MS = "GAME2048_ANIMATION_MS"


class ConfigError(ValueError):
    """Raised for a configuration that cannot produce a playable game."""


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def tile_colors(value: int):
    return TILE_COLORS.get(value, TILE_COLORS[2048])


@dataclass(frozen=True)
class GameConfig:
    """Session parameters fixed at new-game time."""

    size: int = BOARD_SIZE
    initial_tiles: int = INITIAL_TILES
    spawn_values: Tuple[int, ...] = (2, 4)
    spawn_weights: Tuple[float, ...] = (0.9, 0.1)

    def __post_init__(self) -> None:
        if self.size < 2:
            raise ConfigError("size must be >= 2")
        if not 0 <= self.initial_tiles <= self.size * self.size:
            raise ConfigError("initial_tiles must fit on the board")
        if not self.spawn_values:
            raise ConfigError("spawn_values must not be empty")
        if len(self.spawn_values) != len(self.spawn_weights):
            raise ConfigError("spawn_values and spawn_weights must have the same length")
        if any(not _is_power_of_two(v) for v in self.spawn_values):
            raise ConfigError("spawn_values must be positive powers of two")
        if any(w < 0 for w in self.spawn_weights):
            raise ConfigError("spawn_weights must be non-negative")
        if abs(sum(self.spawn_weights) - 1.0) > 1e-9:
            raise ConfigError("spawn_weights must sum to 1")

    @classmethod
    def from_env(cls, **overrides) -> "GameConfig":
        raw = os.environ.get(ENV_BOARD_SIZE)
        if raw is not None and "size" not in overrides:
            try:
                overrides["size"] = int(raw)
            except ValueError:
                raise ConfigError(f"{ENV_BOARD_SIZE} must be an integer, got {raw!r}") from None
        return cls(**overrides)


def animation_duration_from_env() -> int:
    raw = os.environ.get(ENV_ANIMATION_MS)
    if raw is None:
        return ANIMATION_DURATION_MS
    try:
        duration = int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_ANIMATION_MS} must be an integer, got {raw!r}") from None
    if duration < 0:
        raise ConfigError(f"{ENV_ANIMATION_MS} must be >= 0")
    return duration


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel layout of the rendered board, supplied by the UI host."""

    cell_size: float
    margin: float = BOARD_MARGIN
    size: int = BOARD_SIZE

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            raise ConfigError("cell_size must be positive")
        if self.margin < 0:
            raise ConfigError("margin must be non-negative")

    @classmethod
    def from_board_width(cls, board_width: float, size: int = BOARD_SIZE,
                         rem: float = REM_PX, margin: float = BOARD_MARGIN) -> "BoardGeometry":
        # Usable width is the measured board width minus one rem of padding
        usable = round(board_width - rem, 2)
        cell_size = (usable - margin * (size + 1)) / size
        return cls(cell_size=cell_size, margin=margin, size=size)

    @property
    def board_px(self) -> float:
        return self.size * self.cell_size + (self.size + 1) * self.margin

    def cell_origin(self, row: float, col: float) -> Tuple[float, float]:
        """Top-left pixel (x, y) of a cell; fractional rows/cols interpolate."""
        step = self.cell_size + self.margin
        return self.margin + col * step, self.margin + row * step
