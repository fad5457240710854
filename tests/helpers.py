from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np

from block_blast.engine import (
    SHAPE_TEMPLATES,
    BlockColor,
    PointerMapper,
    Shape,
    ShapeKind,
)


def make_shape(rows: Sequence[Sequence[int]], color: BlockColor = BlockColor.RED, shape_id: str = "test") -> Shape:
    return Shape(matrix=np.array(rows, dtype=bool), shape_id=shape_id, color=color)


def catalog_shape(kind: ShapeKind, color: BlockColor = BlockColor.BLUE) -> Shape:
    return Shape(matrix=SHAPE_TEMPLATES[kind], shape_id=kind.name.lower(), color=color, kind=kind)


def filled_board(empty_cells: Iterable[tuple[int, int]] = (), color: BlockColor = BlockColor.GREEN) -> np.ndarray:
    board = np.full((8, 8), int(color), dtype=np.int8)
    for r, c in empty_cells:
        board[r, c] = 0
    return board


def pointer_for(mapper: PointerMapper, shape: Shape, row: int, col: int) -> tuple[float, float]:
    """Pointer position that maps exactly onto (row, col) for `shape`"""
    x = mapper.board_x + col * mapper.cell_size + shape.cols * mapper.cell_size / 2
    y = mapper.board_y + row * mapper.cell_size + shape.rows * mapper.cell_size / 2 + mapper.lift_px
    return x, y


class ScriptedGenerator:
    """Hands out pre-built dock triples in order, then repeats the last one"""

    def __init__(self, triples: List[List[Optional[Shape]]]):
        self.triples = triples
        self.calls = 0

    def generate_dock_triple(self) -> List[Optional[Shape]]:
        idx = min(self.calls, len(self.triples) - 1)
        self.calls += 1
        return list(self.triples[idx])
