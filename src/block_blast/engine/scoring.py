from __future__ import annotations

from dataclasses import dataclass

from .config import GameConfig


@dataclass(frozen=True)
class MoveScore:
    cells_placed: int
    lines_cleared: int
    multiplier: int
    points: int


class ComboScorer:
    """Scores placements and tracks the line-clearing streak.

    The multiplier is the length of the current streak of clearing moves:
    the first clear in a streak scores with 1, the next with 2, and any
    move that clears nothing drops it back to 0.
    """

    def __init__(self, config: GameConfig | None = None):
        config = config or GameConfig()
        self.placement_points = config.placement_points
        self.line_clear_points = config.line_clear_points
        self.combo = 0
        self.best_combo = 0

    def reset(self) -> None:
        self.combo = 0
        self.best_combo = 0

    def next_multiplier(self, lines_cleared: int) -> int:
        """Multiplier a move with `lines_cleared` lines would score with"""
        return self.combo + 1 if lines_cleared > 0 else 0

    def score_move(self, cells_placed: int, lines_cleared: int) -> MoveScore:
        self.combo = self.next_multiplier(lines_cleared)
        self.best_combo = max(self.best_combo, self.combo)
        points = cells_placed * self.placement_points
        if lines_cleared > 0:
            points += lines_cleared * self.line_clear_points * self.combo
        return MoveScore(
            cells_placed=cells_placed,
            lines_cleared=lines_cleared,
            multiplier=self.combo,
            points=points,
        )


def reward_points(score: int) -> int:
    """Reward points granted for a finished game (1 per 10 score)"""
    return max(0, score) // 10
