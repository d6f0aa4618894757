"""Tests for the Gymnasium environment wrapper."""

import numpy as np
import pytest

from game_config import GameConfig
from game_env import Game2048Env

EMPTY = [0, 0, 0, 0]


class TestSpaces:
    def test_flat(self) -> None:
        env = Game2048Env()
        obs, info = env.reset(seed=0)
        assert env.action_space.n == 4
        assert obs.shape == (16,)
        assert obs.dtype == np.float32
        assert env.observation_space.contains(obs)

    def test_2d(self) -> None:
        env = Game2048Env(state_mode='2d')
        obs, _ = env.reset(seed=0)
        assert obs.shape == (1, 4, 4)
        assert env.observation_space.contains(obs)

    def test_board_size_from_config(self) -> None:
        env = Game2048Env(config=GameConfig(size=3))
        obs, _ = env.reset(seed=0)
        assert obs.shape == (9,)

    @pytest.mark.parametrize("kwargs", [{"state_mode": "3d"}, {"reward_mode": "complex"}, {"render_mode": "rgb"}])
    def test_invalid_modes(self, kwargs) -> None:
        with pytest.raises(ValueError):
            Game2048Env(**kwargs)


class TestReset:
    def test_reset_reports_seed_tiles(self) -> None:
        env = Game2048Env()
        obs, info = env.reset(seed=1)
        assert [e["type"] for e in info["events"]] == ["CREATE_TILE", "CREATE_TILE"]
        assert np.count_nonzero(obs) == 2
        assert info["score"] == 0

    def test_same_seed_same_board(self) -> None:
        a, _ = Game2048Env().reset(seed=9)
        b, _ = Game2048Env().reset(seed=9)
        assert np.array_equal(a, b)


class TestStep:
    def test_merge_reward(self) -> None:
        env = Game2048Env()
        env.reset(seed=0)
        env.game.load_values([[2, 2, 0, 0], EMPTY, EMPTY, EMPTY])

        obs, reward, terminated, truncated, info = env.step(2)

        assert reward == 4.0
        assert not terminated
        assert not truncated
        assert info["score"] == 4
        assert info["events"][0] == {"type": "START_MOVE"}
        assert info["events"][1]["type"] == "MERGE_TILE"
        assert info["events"][-1] == {"type": "END_MOVE"}
        assert obs[0] == pytest.approx(2 / 11.0)

    def test_log_score_reward(self) -> None:
        env = Game2048Env(reward_mode='log_score')
        env.reset(seed=0)
        env.game.load_values([[2, 2, 0, 0], EMPTY, EMPTY, EMPTY])
        _, reward, _, _, _ = env.step(np.int64(2))
        assert reward == pytest.approx(2.0)

    def test_noop_penalty(self) -> None:
        env = Game2048Env()
        env.reset(seed=0)
        env.game.load_values([[2, 0, 0, 0], EMPTY, EMPTY, EMPTY])
        _, reward, _, _, info = env.step(2)
        assert reward == -1.0
        assert info["events"] == []

    def test_terminated_on_game_over(self) -> None:
        env = Game2048Env()
        env.reset(seed=0)
        env.game.load_values([[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]])
        _, reward, terminated, _, _ = env.step(0)
        assert terminated
        assert reward == 0.0

    def test_render_ansi(self) -> None:
        env = Game2048Env(render_mode='ansi')
        env.reset(seed=0)
        text = env.render()
        assert text.startswith("Score: 0")
        assert len(text.splitlines()) == 5
