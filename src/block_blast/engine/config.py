from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Configuration for a block blast session"""
    board_size: int = 8
    dock_size: int = 3
    placement_points: int = 1
    line_clear_points: int = 10
    clear_delay_ms: int = 400
    drag_lift_px: float = 60.0
    random_seed: Optional[int] = None
    max_episode_steps: int = 10000
