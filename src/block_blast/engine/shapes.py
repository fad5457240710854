from __future__ import annotations

"""
Shape catalog and dock generation.

Templates are fixed boolean matrices; a dock is refilled with three shapes,
each drawing a template and a color independently from an injected
``random.Random``.
"""

import random
import string
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


class ShapeKind(IntEnum):
    """Enumeration of catalog templates"""
    DOT = 0
    LINE2_H = 1
    LINE2_V = 2
    LINE3_H = 3
    LINE3_V = 4
    LINE4_H = 5
    LINE4_V = 6
    SQUARE2 = 7
    SQUARE3 = 8
    Z = 9
    S = 10
    T = 11
    L = 12
    J = 13
    SMALL_L = 14


class BlockColor(IntEnum):
    """Color tags stored in board cells (0 is reserved for empty)"""
    RED = 1
    ORANGE = 2
    AMBER = 3
    GREEN = 4
    EMERALD = 5
    TEAL = 6
    CYAN = 7
    BLUE = 8
    INDIGO = 9
    VIOLET = 10
    PURPLE = 11
    FUCHSIA = 12
    PINK = 13

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return COLOR_RGB[self]


COLOR_RGB: Dict[BlockColor, Tuple[int, int, int]] = {
    BlockColor.RED: (239, 68, 68),
    BlockColor.ORANGE: (249, 115, 22),
    BlockColor.AMBER: (251, 191, 36),
    BlockColor.GREEN: (34, 197, 94),
    BlockColor.EMERALD: (52, 211, 153),
    BlockColor.TEAL: (20, 184, 166),
    BlockColor.CYAN: (6, 182, 212),
    BlockColor.BLUE: (59, 130, 246),
    BlockColor.INDIGO: (99, 102, 241),
    BlockColor.VIOLET: (139, 92, 246),
    BlockColor.PURPLE: (168, 85, 247),
    BlockColor.FUCHSIA: (217, 70, 239),
    BlockColor.PINK: (236, 72, 153),
}


def _template(rows: List[List[int]]) -> np.ndarray:
    matrix = np.array(rows, dtype=bool)
    matrix.setflags(write=False)
    return matrix


SHAPE_TEMPLATES: Dict[ShapeKind, np.ndarray] = {
    ShapeKind.DOT: _template([[1]]),
    ShapeKind.LINE2_H: _template([[1, 1]]),
    ShapeKind.LINE2_V: _template([[1], [1]]),
    ShapeKind.LINE3_H: _template([[1, 1, 1]]),
    ShapeKind.LINE3_V: _template([[1], [1], [1]]),
    ShapeKind.LINE4_H: _template([[1, 1, 1, 1]]),
    ShapeKind.LINE4_V: _template([[1], [1], [1], [1]]),
    ShapeKind.SQUARE2: _template([[1, 1], [1, 1]]),
    ShapeKind.SQUARE3: _template([[1, 1, 1], [1, 1, 1], [1, 1, 1]]),
    ShapeKind.Z: _template([[1, 1, 0], [0, 1, 1]]),
    ShapeKind.S: _template([[0, 1, 1], [1, 1, 0]]),
    ShapeKind.T: _template([[1, 1, 1], [0, 1, 0]]),
    ShapeKind.L: _template([[1, 0], [1, 0], [1, 1]]),
    ShapeKind.J: _template([[0, 1], [0, 1], [1, 1]]),
    ShapeKind.SMALL_L: _template([[1, 1], [1, 0]]),
}

MAX_SHAPE_SPAN = 4

_ID_ALPHABET = string.digits + string.ascii_lowercase


def validate_template(matrix: np.ndarray) -> bool:
    """Check that a matrix is a usable polyomino template.

    Each dimension must be 1..4 and the matrix must be the tight bounding
    box of its occupied cells (no empty border row or column).
    """
    if matrix.ndim != 2:
        return False
    rows, cols = matrix.shape
    if not (1 <= rows <= MAX_SHAPE_SPAN and 1 <= cols <= MAX_SHAPE_SPAN):
        return False
    occupied = matrix.astype(bool)
    return bool(
        occupied[0, :].any()
        and occupied[-1, :].any()
        and occupied[:, 0].any()
        and occupied[:, -1].any()
    )


@dataclass(eq=False)
class Shape:
    """A placeable piece: template matrix, unique id and color tag"""
    matrix: np.ndarray
    shape_id: str
    color: BlockColor
    kind: Optional[ShapeKind] = None
    cell_count: int = field(init=False)

    def __post_init__(self) -> None:
        self.matrix = np.asarray(self.matrix, dtype=bool)
        self.cell_count = int(self.matrix.sum())

    @property
    def rows(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def cols(self) -> int:
        return int(self.matrix.shape[1])

    def cells(self) -> List[Tuple[int, int]]:
        """Relative (row, col) offsets of the occupied cells"""
        return [(int(i), int(j)) for i, j in zip(*np.nonzero(self.matrix))]


class ShapeGenerator:
    """Draws fresh dock triples from the catalog"""

    def __init__(self, rng: Optional[random.Random] = None, dock_size: int = 3) -> None:
        self.rng = rng or random.Random()
        self.dock_size = dock_size
        self._kinds = list(SHAPE_TEMPLATES)
        self._colors = list(BlockColor)

    def _new_id(self) -> str:
        return "".join(self.rng.choice(_ID_ALPHABET) for _ in range(9))

    def random_shape(self) -> Shape:
        kind = self.rng.choice(self._kinds)
        color = self.rng.choice(self._colors)
        return Shape(matrix=SHAPE_TEMPLATES[kind], shape_id=self._new_id(), color=color, kind=kind)

    def generate_dock_triple(self) -> List[Shape]:
        return [self.random_shape() for _ in range(self.dock_size)]
