"""Tests for the animation driver replaying engine events."""

import pytest

from animation import AnimationDriver
from game import Game
from game_config import GameConfig
from game_types import CreateTile, Direction, EndMove, MergeTile, StartMove, TileMeta, UpdateTile


def settled(driver, now=0):
    driver.feed(CreateTile(TileMeta((0, 0), 2, 1)), now)
    driver.feed(CreateTile(TileMeta((0, 3), 2, 2)), now)
    driver.update(now + 10 * driver.duration_ms)
    driver.update(now + 20 * driver.duration_ms)
    return driver


class TestAppear:
    def test_create_outside_bracket_animates(self) -> None:
        driver = AnimationDriver(100)
        driver.feed(CreateTile(TileMeta((1, 2), 2, 1)), 0)
        assert driver.busy

        driver.update(50)
        [frame] = driver.frames()
        assert frame.scale == pytest.approx(0.5)
        assert (frame.row, frame.col) == (1.0, 2.0)

        assert not driver.update(100)
        assert driver.tiles == {1: ((1, 2), 2)}

    def test_unbracketed_creates_are_queued(self) -> None:
        driver = settled(AnimationDriver(100))
        assert not driver.busy
        assert driver.tiles == {1: ((0, 0), 2), 2: ((0, 3), 2)}

    def test_static_frames(self) -> None:
        driver = settled(AnimationDriver(100))
        frames = driver.frames()
        assert [(f.id, f.scale) for f in frames] == [(1, 1.0), (2, 1.0)]


class TestMoveBatch:
    def test_merge_slides_source_then_drops_it(self) -> None:
        driver = settled(AnimationDriver(100))
        now = 5000
        driver.feed(StartMove(), now)
        driver.feed(MergeTile(TileMeta((0, 0), 2, 2), TileMeta((0, 0), 4, 1)), now)
        driver.feed(CreateTile(TileMeta((1, 1), 2, 3)), now)
        assert driver.busy
        assert driver.progress == 0.0
        driver.feed(EndMove(), now)

        driver.update(now + 50)
        by_id = {f.id: f for f in driver.frames()}
        assert by_id[2].col == pytest.approx(1.5)
        assert by_id[1].value == 4
        assert by_id[1].scale > 1.0
        assert by_id[3].scale == pytest.approx(0.5)

        driver.update(now + 100)
        assert not driver.busy
        assert driver.tiles == {1: ((0, 0), 4), 3: ((1, 1), 2)}

    def test_update_then_merge_into_moved_tile(self) -> None:
        driver = settled(AnimationDriver(100))
        driver.feed(StartMove(), 0)
        driver.feed(UpdateTile(TileMeta((0, 1), 2, 1)), 0)
        driver.feed(MergeTile(TileMeta((0, 1), 2, 2), TileMeta((0, 1), 4, 1)), 0)
        driver.feed(EndMove(), 0)
        driver.update(100)
        assert driver.tiles == {1: ((0, 1), 4)}

    def test_second_batch_waits_for_the_first(self) -> None:
        driver = settled(AnimationDriver(100))
        driver.feed(StartMove(), 0)
        driver.feed(UpdateTile(TileMeta((1, 0), 2, 1)), 0)
        driver.feed(EndMove(), 0)
        driver.feed(StartMove(), 10)
        driver.feed(UpdateTile(TileMeta((1, 3), 2, 2)), 10)
        driver.feed(EndMove(), 10)

        assert driver.update(100)
        assert driver.tiles[1] == ((1, 0), 2)
        assert driver.tiles[2] == ((0, 3), 2)
        assert not driver.update(200)
        assert driver.tiles[2] == ((1, 3), 2)

    def test_zero_duration_finishes_immediately(self) -> None:
        driver = AnimationDriver(0)
        driver.feed(CreateTile(TileMeta((0, 0), 2, 1)), 0)
        assert not driver.busy
        assert driver.tiles == {1: ((0, 0), 2)}


class TestProtocolErrors:
    def test_end_without_start(self) -> None:
        with pytest.raises(RuntimeError):
            AnimationDriver().feed(EndMove(), 0)

    def test_nested_start(self) -> None:
        driver = AnimationDriver()
        driver.feed(StartMove(), 0)
        with pytest.raises(RuntimeError):
            driver.feed(StartMove(), 0)

    def test_update_outside_transaction(self) -> None:
        with pytest.raises(RuntimeError):
            AnimationDriver().feed(UpdateTile(TileMeta((0, 0), 2, 1)), 0)

    def test_unknown_tile(self) -> None:
        driver = AnimationDriver()
        driver.feed(StartMove(), 0)
        driver.feed(UpdateTile(TileMeta((0, 0), 2, 9)), 0)
        with pytest.raises(KeyError):
            driver.feed(EndMove(), 0)

    def test_negative_duration(self) -> None:
        with pytest.raises(ValueError):
            AnimationDriver(-1)


class TestWithGame:
    def test_driver_tracks_the_engine(self) -> None:
        clock = [0]
        driver = AnimationDriver(100)
        game = Game(config=GameConfig(), seed=4)
        game.subscribe(lambda event: driver.feed(event, clock[0]))
        game.new_game()

        for direction in [Direction.LEFT, Direction.DOWN, Direction.RIGHT, Direction.UP] * 10:
            clock[0] += 100
            driver.update(clock[0])
            if not driver.busy:
                game.move(direction)
        clock[0] += 1000
        driver.update(clock[0])
        driver.update(clock[0] + 1000)

        expected = {t.id: (t.position, t.value) for t in game.grid.all_tiles()}
        assert driver.tiles == expected
