from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .board import Board, can_place
from .shapes import Shape


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PointerMapper:
    """Maps a drag pointer position to a candidate board origin.

    The dragged shape is drawn centered on a point `lift_px` above the
    pointer so a finger or cursor does not hide it. The shape's top-left
    corner, in cell units relative to the board, is rounded to the nearest
    cell. Ghost preview and drop resolution both go through `map_origin`.
    """
    board_x: float
    board_y: float
    cell_size: float
    lift_px: float = 60.0

    def map_origin(self, pointer_x: float, pointer_y: float, shape_rows: int, shape_cols: int) -> Tuple[int, int]:
        anchor_x = pointer_x
        anchor_y = pointer_y - self.lift_px
        left = anchor_x - shape_cols * self.cell_size / 2.0
        top = anchor_y - shape_rows * self.cell_size / 2.0
        col = (left - self.board_x) / self.cell_size
        row = (top - self.board_y) / self.cell_size
        return _round_half_up(row), _round_half_up(col)

    def resolve(self, board: Board, shape: Shape, pointer_x: float, pointer_y: float) -> Optional[Tuple[int, int]]:
        """Origin under the pointer, or None when the shape does not fit there"""
        row, col = self.map_origin(pointer_x, pointer_y, shape.rows, shape.cols)
        if can_place(board, shape.matrix, row, col):
            return row, col
        return None

    def cell_to_pixel(self, row: int, col: int) -> Tuple[float, float]:
        """Top-left pixel of a board cell"""
        return self.board_x + col * self.cell_size, self.board_y + row * self.cell_size
