from __future__ import annotations

from typing import Optional, Sequence

from .board import Board, can_place
from .shapes import Shape


def any_placement(board: Board, shape: Shape) -> bool:
    size_r, size_c = board.shape
    for r in range(size_r):
        for c in range(size_c):
            if can_place(board, shape.matrix, r, c):
                return True
    return False


def is_game_over(board: Board, dock: Sequence[Optional[Shape]]) -> bool:
    """True only when no shape left in the dock fits at any origin.

    Every origin of the board is tried for every shape. An empty dock is
    never game over since it gets refilled before the next move.
    """
    available = [shape for shape in dock if shape is not None]
    if not available:
        return False
    return not any(any_placement(board, shape) for shape in available)
