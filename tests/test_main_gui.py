"""Input mapping of the pygame front end (no window is opened)."""

import pygame
import pytest

from game_types import Direction
from main_gui import KEY_MAP, swipe_direction


@pytest.mark.parametrize("start, end, expected", [
    ((100, 100), (200, 110), Direction.RIGHT),
    ((100, 100), (10, 90), Direction.LEFT),
    ((100, 100), (105, 10), Direction.UP),
    ((100, 100), (90, 300), Direction.DOWN),
])
def test_swipe_direction(start, end, expected) -> None:
    assert swipe_direction(start, end) is expected


def test_short_drag_is_ignored() -> None:
    assert swipe_direction((100, 100), (110, 105)) is None


def test_arrow_keys_and_wasd() -> None:
    assert KEY_MAP[pygame.K_UP] is Direction.UP
    assert KEY_MAP[pygame.K_a] is Direction.LEFT
    assert len(set(KEY_MAP.values())) == 4
