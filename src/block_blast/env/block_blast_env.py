from __future__ import annotations

import random
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_blast.engine import (
    GameConfig,
    GameSession,
    ImmediateScheduler,
    InMemoryLeaderboard,
    SHAPE_TEMPLATES,
    ShapeGenerator,
    UnlimitedCreditAccount,
    valid_origins,
)
from block_blast.engine.board import filled_ratio, occupancy
from block_blast.engine.shapes import COLOR_RGB, BlockColor


def _compute_action_mask(session: GameSession) -> np.ndarray:
    size = session.config.board_size
    k = session.config.dock_size
    mask = np.zeros((k, size, size), dtype=np.bool_)
    if session.is_game_over:
        return mask
    for slot, shape in enumerate(session.dock):
        if shape is None:
            continue
        for r, c in valid_origins(session.board, shape.matrix):
            mask[slot, r, c] = True
    return mask


class BlockBlastEnv(gym.Env):
    """Block blast as a gymnasium environment.

    Action: (slot, row, col). Clears resolve without the visual delay and
    the reward is the engine score gained by the move.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 invalid_action_penalty: float = -1.0,
                 terminal_penalty: float = 0.0,
                 leaderboard_size: int = 10) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        self.leaderboard = InMemoryLeaderboard(max_entries=leaderboard_size)
        self.session = GameSession(
            credits=UnlimitedCreditAccount(),
            submitter=self.leaderboard,
            player_id="agent",
            config=self.config,
            scheduler=ImmediateScheduler(),
        )

        size = self.config.board_size
        k = self.config.dock_size
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "dock": spaces.Box(low=-1, high=len(SHAPE_TEMPLATES) - 1, shape=(k,), dtype=np.int8),
                "dock_remaining": spaces.Discrete(k + 1),
                "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        # Action: (slot, row, col)
        self.action_space = spaces.MultiDiscrete((k, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": occupancy(self.session.board),
            "dock": np.array(self.session.dock_kinds(), dtype=np.int8),
            "dock_remaining": sum(1 for s in self.session.dock if s is not None),
            "combo": np.array([self.session.combo], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.session),
            "score": self.session.score,
            "steps": self._steps,
            "filled_ratio": filled_ratio(self.session.board),
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.session.generator = ShapeGenerator(random.Random(seed), dock_size=self.config.dock_size)
        if self.session.is_game_over:
            self.session.submit_score()
        else:
            self.session.return_to_menu()
        self.session.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        slot, row, col = map(int, action)
        score_before = self.session.score

        placed = self.session.place_at(slot, row, col)
        reward_components: Dict[str, float] = {}
        if placed:
            reward_components["score"] = float(self.session.score - score_before)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        terminated = bool(self.session.is_game_over)
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        self._steps += 1
        truncated = self._steps >= self.config.max_episode_steps

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["placed"] = placed
        return obs, float(sum(reward_components.values())), terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        board = self.session.board
        cell = 12
        h, w = board.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                v = int(board[y, x])
                color = COLOR_RGB[BlockColor(v)] if v else (30, 30, 36)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
