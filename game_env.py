# file: game_env.py

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from game import Game
from game_config import GameConfig

# Normalisation by log2(2048)
LOG2_NORMALIZER = 11.0
INVALID_MOVE_PENALTY = -1.0


class Game2048Env(gym.Env):
    """
    Gymnasium environment around a 2048 game session.

    Args:
        state_mode (str): 'flat' for a (size*size,) vector or '2d' for a (1, size, size) tensor.
        reward_mode (str): 'simple' (score delta) or 'log_score' (log2 of the score delta).
        config (GameConfig): session parameters; defaults to a 4x4 board.
    """
    metadata = {'render_modes': ['human', 'ansi'], 'render_fps': 4}

    def __init__(self, state_mode='flat', reward_mode='simple', config=None, render_mode=None):
        super().__init__()

        if state_mode not in ('flat', '2d'):
            raise ValueError("state_mode must be 'flat' or '2d'")
        if reward_mode not in ('simple', 'log_score'):
            raise ValueError("reward_mode must be 'simple' or 'log_score'")
        if render_mode is not None and render_mode not in self.metadata['render_modes']:
            raise ValueError(f"Unsupported render_mode: {render_mode!r}")
        self.state_mode = state_mode
        self.reward_mode = reward_mode
        self.render_mode = render_mode
        self.config = config or GameConfig()
        self.size = self.config.size
        self.game = Game(config=self.config)

        # 0: Up, 1: Down, 2: Left, 3: Right
        self.action_space = spaces.Discrete(4)

        if self.state_mode == 'flat':
            shape = (self.size * self.size,)
        else:
            # (channels, height, width) for CNN policies
            shape = (1, self.size, self.size)
        self.observation_space = spaces.Box(low=0.0, high=1.0, shape=shape, dtype=np.float32)

    def _get_obs(self):
        board = self.game.board_values()
        processed_board = np.zeros(board.shape, dtype=np.float32)
        occupied = board > 0
        processed_board[occupied] = np.log2(board[occupied]) / LOG2_NORMALIZER
        processed_board = np.clip(processed_board, 0.0, 1.0)

        if self.state_mode == 'flat':
            return processed_board.flatten()
        return np.expand_dims(processed_board, axis=0)

    def _get_info(self, events=()):
        return {
            "score": self.game.score,
            "max_tile": self.game.max_tile(),
            "board": self.game.board_values().tolist(),
            "events": [event.to_dict() for event in events],
        }

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        events = self.game.new_game()
        return self._get_obs(), self._get_info(events)

    def step(self, action):
        score_before = self.game.score
        result = self.game.move(int(action))

        terminated = self.game.is_game_over()
        reward = self._calculate_reward(score_before, self.game.score, bool(result), terminated)
        truncated = False
        return self._get_obs(), reward, terminated, truncated, self._get_info(result.events)

    def _calculate_reward(self, score_before, score_after, changed, is_over):
        if not changed and not is_over:
            return INVALID_MOVE_PENALTY
        score_delta = score_after - score_before
        if self.reward_mode == 'simple':
            return float(score_delta)
        if score_delta > 0:
            return float(np.log2(score_delta))
        return 0.0

    def render(self):
        lines = [f"Score: {self.game.score}"]
        for row in self.game.board_values().tolist():
            lines.append("\t".join(map(str, row)))
        text = "\n".join(lines)
        if self.render_mode == 'ansi':
            return text
        print(text)
        return None
