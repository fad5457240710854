"""Block blast engine (8x8).

The player drags shapes from a three-slot dock onto an 8x8 board; full rows
and columns clear together and consecutive clearing moves build a combo.
"""

from .board import (
    BOARD_SIZE,
    LineClear,
    can_place,
    clear_lines,
    empty_board,
    find_full_lines,
    place,
    valid_origins,
)
from .config import GameConfig
from .events import SoundEvent
from .game_over import is_game_over
from .pointer import PointerMapper
from .scheduling import ImmediateScheduler, ManualScheduler
from .scoring import ComboScorer, MoveScore, reward_points
from .services import (
    InMemoryCreditAccount,
    InMemoryLeaderboard,
    ScoreSubmissionError,
    UnlimitedCreditAccount,
)
from .session import DragState, GameSession, GameSummary, MoveResult, SessionState, TurnPhase
from .shapes import SHAPE_TEMPLATES, BlockColor, Shape, ShapeGenerator, ShapeKind

__all__ = [
    "BOARD_SIZE",
    "LineClear",
    "can_place",
    "clear_lines",
    "empty_board",
    "find_full_lines",
    "place",
    "valid_origins",
    "GameConfig",
    "SoundEvent",
    "is_game_over",
    "PointerMapper",
    "ImmediateScheduler",
    "ManualScheduler",
    "ComboScorer",
    "MoveScore",
    "reward_points",
    "InMemoryCreditAccount",
    "InMemoryLeaderboard",
    "ScoreSubmissionError",
    "UnlimitedCreditAccount",
    "DragState",
    "GameSession",
    "GameSummary",
    "MoveResult",
    "SessionState",
    "TurnPhase",
    "SHAPE_TEMPLATES",
    "BlockColor",
    "Shape",
    "ShapeGenerator",
    "ShapeKind",
]
