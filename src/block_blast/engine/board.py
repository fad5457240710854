from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .shapes import Shape


BOARD_SIZE = 8
EMPTY = 0

Board = np.ndarray


@dataclass(frozen=True)
class LineClear:
    """Full row and column indices found after a placement"""
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()

    @property
    def count(self) -> int:
        # An intersection cell feeds both its row and its column
        return len(self.rows) + len(self.cols)

    def __bool__(self) -> bool:
        return self.count > 0


def empty_board(size: int = BOARD_SIZE) -> Board:
    return np.zeros((size, size), dtype=np.int8)


def can_place(board: Board, matrix: np.ndarray, origin_row: int, origin_col: int) -> bool:
    """Check if every occupied cell of `matrix` lands on an empty in-bounds cell"""
    size_r, size_c = board.shape
    piece_h, piece_w = matrix.shape
    for i in range(piece_h):
        for j in range(piece_w):
            if not matrix[i, j]:
                continue
            r = origin_row + i
            c = origin_col + j
            if r < 0 or c < 0 or r >= size_r or c >= size_c:
                return False
            if board[r, c] != EMPTY:
                return False
    return True


def place(board: Board, shape: Shape, origin_row: int, origin_col: int) -> Tuple[Board, int]:
    """
    Return a new board with `shape` stamped in its color, and the number of
    cells placed. Assumes the origin was already validated with `can_place`.
    """
    new_board = board.copy()
    cells_placed = 0
    for i, j in shape.cells():
        new_board[origin_row + i, origin_col + j] = int(shape.color)
        cells_placed += 1
    return new_board, cells_placed


def find_full_lines(board: Board) -> LineClear:
    filled = board != EMPTY
    rows = tuple(int(r) for r in np.flatnonzero(filled.all(axis=1)))
    cols = tuple(int(c) for c in np.flatnonzero(filled.all(axis=0)))
    return LineClear(rows=rows, cols=cols)


def clear_lines(board: Board, lines: LineClear) -> Board:
    """Empty every listed row and column in one batch"""
    new_board = board.copy()
    if lines.rows:
        new_board[list(lines.rows), :] = EMPTY
    if lines.cols:
        new_board[:, list(lines.cols)] = EMPTY
    return new_board


def valid_origins(board: Board, matrix: np.ndarray) -> List[Tuple[int, int]]:
    """All (row, col) origins where `matrix` can be placed"""
    size_r, size_c = board.shape
    return [
        (r, c)
        for r in range(size_r)
        for c in range(size_c)
        if can_place(board, matrix, r, c)
    ]


def occupancy(board: Board) -> np.ndarray:
    return (board != EMPTY).astype(np.int8)


def filled_ratio(board: Board) -> float:
    return float(np.count_nonzero(board)) / float(board.size)
