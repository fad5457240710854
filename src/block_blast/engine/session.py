from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .board import Board, LineClear, can_place, clear_lines, empty_board, find_full_lines, place
from .config import GameConfig
from .events import SessionSignals, SoundEvent
from .game_over import is_game_over
from .pointer import PointerMapper
from .scheduling import ImmediateScheduler, Scheduler, TimerHandle
from .scoring import ComboScorer, MoveScore, reward_points
from .services import CreditAccount, ScoreSubmissionError, ScoreSubmitter
from .shapes import Shape, ShapeGenerator


logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    GAME_OVER = "game_over"


class TurnPhase(Enum):
    AWAITING_INPUT = "awaiting_input"
    DRAGGING = "dragging"
    RESOLVING_PLACEMENT = "resolving_placement"
    RESOLVING_CLEAR_DELAY = "resolving_clear_delay"


@dataclass(frozen=True)
class DragState:
    slot: int
    pointer: Tuple[float, float]


@dataclass(frozen=True)
class MoveResult:
    slot: int
    origin: Tuple[int, int]
    lines: LineClear
    score: MoveScore
    game_over: bool


@dataclass(frozen=True)
class GameSummary:
    player_id: str
    score: int
    reward_points: int
    pieces_placed: int
    lines_cleared: int
    best_combo: int


class GameSession:
    """Owns one player's block blast game and drives its turn sequence.

    Input arrives as discrete calls (`begin_drag`, `move_drag`, `end_drag`,
    or `place_at` for headless play). Board and dock are replaced wholesale
    on every resolved move. When a placement fills lines, clearing is
    deferred through the scheduler for `clear_delay_ms`; no drag can start
    until the deferred step has run.
    """

    def __init__(
        self,
        credits: CreditAccount,
        submitter: ScoreSubmitter,
        player_id: str = "player",
        config: Optional[GameConfig] = None,
        generator: Optional[ShapeGenerator] = None,
        scheduler: Optional[Scheduler] = None,
        pointer: Optional[PointerMapper] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.credits = credits
        self.submitter = submitter
        self.player_id = player_id
        self.generator = generator or ShapeGenerator(
            random.Random(self.config.random_seed), dock_size=self.config.dock_size
        )
        self.scheduler: Scheduler = scheduler or ImmediateScheduler()
        self.pointer = pointer or PointerMapper(0.0, 0.0, cell_size=40.0, lift_px=self.config.drag_lift_px)
        self.scorer = ComboScorer(self.config)
        self.signals = SessionSignals()

        self.state = SessionState.IDLE
        self.phase: Optional[TurnPhase] = None
        self.board: Board = empty_board(self.config.board_size)
        self.dock: List[Optional[Shape]] = [None] * self.config.dock_size
        self.score = 0
        self.drag: Optional[DragState] = None
        self.clearing = LineClear()
        self.last_move: Optional[MoveResult] = None
        self.notices: List[str] = []

        self.pieces_placed = 0
        self.lines_cleared_total = 0

        self._pending_clear: Optional[TimerHandle] = None

    # ---------- Helpers ----------
    @property
    def combo(self) -> int:
        return self.scorer.combo

    @property
    def is_game_over(self) -> bool:
        return self.state is SessionState.GAME_OVER

    def _set_state(self, state: SessionState, phase: Optional[TurnPhase]) -> None:
        self.state = state
        self.phase = phase
        logger.debug("session %s -> %s/%s", self.player_id, state.value, phase.value if phase else "-")
        self.signals.state_changed.send(self, state=state, phase=phase)

    def _set_phase(self, phase: TurnPhase) -> None:
        self._set_state(self.state, phase)

    def _emit_sound(self, event: SoundEvent) -> None:
        self.signals.sound.send(self, event=event)

    def _notify(self, message: str) -> None:
        self.notices.append(message)
        self.signals.notice.send(self, message=message)

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self.dock):
            raise ValueError(f"dock slot {slot} out of range 0..{len(self.dock) - 1}")

    def _reset_play_state(self) -> None:
        if self._pending_clear is not None:
            self.scheduler.cancel(self._pending_clear)
            self._pending_clear = None
        self.board = empty_board(self.config.board_size)
        self.dock = [None] * self.config.dock_size
        self.score = 0
        self.scorer.reset()
        self.drag = None
        self.clearing = LineClear()
        self.last_move = None
        self.pieces_placed = 0
        self.lines_cleared_total = 0

    def _accepts_input(self) -> bool:
        return self.state is SessionState.ACTIVE and self.phase is TurnPhase.AWAITING_INPUT

    # ---------- Session lifecycle ----------
    def start(self) -> bool:
        """Spend a play credit and begin a fresh game.

        Returns False, with a notice, when the account has no credit left.
        """
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"cannot start a session while {self.state.value}")
        if self.credits.get_remaining_credits() <= 0:
            self._notify("No play credits left today.")
            return False
        self.credits.spend_credit()
        self._reset_play_state()
        self.dock = list(self.generator.generate_dock_triple())
        self._set_state(SessionState.ACTIVE, TurnPhase.AWAITING_INPUT)
        if is_game_over(self.board, self.dock):
            self._enter_game_over()
        return True

    def return_to_menu(self) -> None:
        """Abandon the current game without submitting a score"""
        self._reset_play_state()
        self._set_state(SessionState.IDLE, None)

    def submit_score(self) -> bool:
        """Forward the final score and go back to idle.

        A failing submitter never keeps the session alive: the failure
        becomes a notice and the session still ends.
        """
        if self.state is not SessionState.GAME_OVER:
            raise RuntimeError("scores are submitted only after game over")
        try:
            ok = bool(self.submitter.submit_score(self.player_id, self.score))
        except (ScoreSubmissionError, OSError) as exc:
            logger.warning("score submission for %s failed: %s", self.player_id, exc)
            ok = False
        if not ok:
            self._notify("Score upload failed.")
        self._set_state(SessionState.IDLE, None)
        return ok

    def summary(self) -> GameSummary:
        return GameSummary(
            player_id=self.player_id,
            score=self.score,
            reward_points=reward_points(self.score),
            pieces_placed=self.pieces_placed,
            lines_cleared=self.lines_cleared_total,
            best_combo=self.scorer.best_combo,
        )

    # ---------- Drag and drop ----------
    def begin_drag(self, slot: int, pointer_x: float, pointer_y: float) -> bool:
        self._check_slot(slot)
        if not self._accepts_input() or self.dock[slot] is None:
            return False
        self.drag = DragState(slot=slot, pointer=(float(pointer_x), float(pointer_y)))
        self._set_phase(TurnPhase.DRAGGING)
        self._emit_sound(SoundEvent.SELECT)
        return True

    def move_drag(self, pointer_x: float, pointer_y: float) -> Optional[Tuple[int, int]]:
        """Track the pointer; returns the ghost origin, if the shape fits there"""
        if self.drag is None:
            return None
        self.drag = DragState(slot=self.drag.slot, pointer=(float(pointer_x), float(pointer_y)))
        return self.ghost()

    def ghost(self) -> Optional[Tuple[int, int]]:
        if self.drag is None:
            return None
        shape = self.dock[self.drag.slot]
        if shape is None:
            return None
        x, y = self.drag.pointer
        return self.pointer.resolve(self.board, shape, x, y)

    def end_drag(self, pointer_x: float, pointer_y: float) -> bool:
        """Drop the dragged shape; False when the drop is rejected"""
        if self.drag is None:
            return False
        slot = self.drag.slot
        shape = self.dock[slot]
        self.drag = None
        origin = None
        if shape is not None:
            origin = self.pointer.resolve(self.board, shape, pointer_x, pointer_y)
        if origin is None:
            self._set_phase(TurnPhase.AWAITING_INPUT)
            return False
        self._resolve_placement(slot, origin[0], origin[1])
        return True

    def cancel_drag(self) -> None:
        if self.drag is None:
            return
        self.drag = None
        self._set_phase(TurnPhase.AWAITING_INPUT)

    def place_at(self, slot: int, row: int, col: int) -> bool:
        """Place a dock shape directly at a grid origin"""
        self._check_slot(slot)
        if not self._accepts_input():
            return False
        shape = self.dock[slot]
        if shape is None or not can_place(self.board, shape.matrix, row, col):
            return False
        self._resolve_placement(slot, int(row), int(col))
        return True

    # ---------- Move resolution ----------
    def _resolve_placement(self, slot: int, row: int, col: int) -> None:
        shape = self.dock[slot]
        assert shape is not None
        self._set_phase(TurnPhase.RESOLVING_PLACEMENT)
        self.board, cells_placed = place(self.board, shape, row, col)
        dock = list(self.dock)
        dock[slot] = None
        self.dock = dock
        self._emit_sound(SoundEvent.PLACE)

        lines = find_full_lines(self.board)
        if not lines:
            self._finish_move(slot, (row, col), cells_placed, lines)
            return

        multiplier = self.scorer.next_multiplier(lines.count)
        self._emit_sound(SoundEvent.COMBO if lines.count > 1 or multiplier > 1 else SoundEvent.CLEAR)
        self.clearing = lines
        self._set_phase(TurnPhase.RESOLVING_CLEAR_DELAY)

        def finish() -> None:
            self._pending_clear = None
            self._finish_move(slot, (row, col), cells_placed, lines)

        handle = self.scheduler.call_later(self.config.clear_delay_ms, finish)
        if not handle.fired:
            self._pending_clear = handle

    def _finish_move(self, slot: int, origin: Tuple[int, int], cells_placed: int, lines: LineClear) -> None:
        if lines:
            self.board = clear_lines(self.board, lines)
            self.clearing = LineClear()
        move_score = self.scorer.score_move(cells_placed, lines.count)
        self.score += move_score.points
        self.pieces_placed += 1
        self.lines_cleared_total += lines.count

        if all(shape is None for shape in self.dock):
            self.dock = list(self.generator.generate_dock_triple())

        over = is_game_over(self.board, self.dock)
        self.last_move = MoveResult(slot=slot, origin=origin, lines=lines, score=move_score, game_over=over)
        if over:
            self._enter_game_over()
        else:
            self._set_phase(TurnPhase.AWAITING_INPUT)

    def _enter_game_over(self) -> None:
        self._set_state(SessionState.GAME_OVER, None)
        self._emit_sound(SoundEvent.GAME_OVER)
        logger.debug("game over for %s with score %d", self.player_id, self.score)

    # ---------- Introspection ----------
    def dock_kinds(self) -> List[int]:
        return [int(s.kind) if s is not None and s.kind is not None else -1 for s in self.dock]
