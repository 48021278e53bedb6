from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_fall.game import Action, BlockFallGame, COLS, GameConfig, GameStatus, ROWS, SpeedRules


class BlockFallEnv(gym.Env):
    """One environment step is one player action followed by one gravity tick.

    Observation is the board with settled cells as 1 and the falling piece
    as 2. Reward is the number of lines cleared during the step.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[SpeedRules] = None,
        render_mode: Optional[str] = None,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.game = BlockFallGame(config, rules)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        self.observation_space = spaces.Box(low=0, high=2, shape=(ROWS, COLS), dtype=np.int8)
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> np.ndarray:
        return self.game.get_state()

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "interval": self.game.interval,
            "pieces_spawned": self.game.pieces_spawned,
            "max_height": self.game.grid.get_max_height(),
            "holes": self.game.grid.count_holes(),
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.game.reset(seed)
        self.game.tick()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        score_before = self.game.score
        if Action(int(action)) != Action.NONE:
            self.game.handle_action(Action(int(action)))
        self.game.tick()
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = self.game.status is GameStatus.GAME_OVER
        truncated = not terminated and self._steps >= self.max_episode_steps
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        cell = 12
        palette = {0: (30, 30, 36), 1: (70, 200, 120), 2: (240, 240, 0)}
        state = self._get_obs()
        img = np.zeros((ROWS * cell, COLS * cell, 3), dtype=np.uint8)
        for y in range(ROWS):
            for x in range(COLS):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = palette[int(state[y, x])]
        return img

    def close(self) -> None:
        pass
