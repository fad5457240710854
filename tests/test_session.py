import numpy as np
import pytest

from block_blast.engine import (
    BlockColor,
    GameSession,
    ImmediateScheduler,
    InMemoryCreditAccount,
    InMemoryLeaderboard,
    ManualScheduler,
    PointerMapper,
    ScoreSubmissionError,
    SessionState,
    ShapeKind,
    SoundEvent,
    TurnPhase,
    empty_board,
)

from helpers import ScriptedGenerator, catalog_shape, make_shape, pointer_for


MAPPER = PointerMapper(board_x=20, board_y=60, cell_size=44, lift_px=60)


def _session(triples, credits=3, scheduler=None, submitter=None):
    generator = ScriptedGenerator(triples)
    session = GameSession(
        credits=InMemoryCreditAccount(credits),
        submitter=submitter if submitter is not None else InMemoryLeaderboard(),
        player_id="alice",
        generator=generator,
        scheduler=scheduler or ImmediateScheduler(),
        pointer=MAPPER,
    )
    return session, generator


def _record_sounds(session):
    sounds = []

    def on_sound(sender, event):
        sounds.append(event)

    session.signals.sound.connect(on_sound, weak=False)
    return sounds


def _dots():
    return [catalog_shape(ShapeKind.DOT) for _ in range(3)]


def _isolated_holes_board():
    # two isolated holes per row and per column: no dot can complete a line
    empties = [(i, i) for i in range(8)] + [(i, (i + 4) % 8) for i in range(8)]
    board = np.full((8, 8), int(BlockColor.GREEN), dtype=np.int8)
    for r, c in empties:
        board[r, c] = 0
    return board


class FailingSubmitter:
    def __init__(self, exc=None):
        self.exc = exc
        self.calls = 0

    def submit_score(self, player_id, score):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return False


def test_start_spends_one_credit_and_deals_a_dock():
    session, generator = _session([_dots()], credits=2)
    assert session.start()
    assert session.credits.get_remaining_credits() == 1
    assert session.state is SessionState.ACTIVE
    assert session.phase is TurnPhase.AWAITING_INPUT
    assert generator.calls == 1
    assert all(shape is not None for shape in session.dock)
    assert session.score == 0 and session.combo == 0
    assert not session.board.any()


def test_start_without_credit_is_refused_with_notice():
    session, generator = _session([_dots()], credits=0)
    notices = []
    session.signals.notice.connect(lambda sender, message: notices.append(message), weak=False)
    assert not session.start()
    assert session.state is SessionState.IDLE
    assert generator.calls == 0
    assert notices and session.notices == notices


def test_start_while_active_is_an_error():
    session, _ = _session([_dots()])
    session.start()
    with pytest.raises(RuntimeError):
        session.start()


def test_only_one_drag_at_a_time():
    session, _ = _session([_dots()])
    session.start()
    assert session.begin_drag(0, 100, 100)
    assert not session.begin_drag(1, 100, 100)
    assert session.drag.slot == 0
    assert session.phase is TurnPhase.DRAGGING


def test_drag_on_empty_slot_or_bad_index():
    session, _ = _session([[catalog_shape(ShapeKind.DOT), None, None]])
    session.start()
    assert not session.begin_drag(1, 100, 100)
    with pytest.raises(ValueError):
        session.begin_drag(3, 100, 100)


def test_invalid_drop_leaves_everything_untouched():
    session, _ = _session([_dots()])
    sounds = _record_sounds(session)
    session.start()
    dock_before = list(session.dock)
    session.begin_drag(0, 0, 0)
    assert session.move_drag(0, 0) is None
    assert not session.end_drag(0, 0)
    assert session.dock == dock_before
    assert not session.board.any()
    assert session.phase is TurnPhase.AWAITING_INPUT
    assert session.drag is None
    assert sounds == [SoundEvent.SELECT]


def test_cancel_drag_returns_to_awaiting_input():
    session, _ = _session([_dots()])
    session.start()
    session.begin_drag(2, 50, 50)
    session.cancel_drag()
    assert session.drag is None
    assert session.phase is TurnPhase.AWAITING_INPUT
    assert session.dock[2] is not None


def test_ghost_origin_is_the_drop_origin():
    t_shape = catalog_shape(ShapeKind.T, BlockColor.VIOLET)
    session, _ = _session([[t_shape, catalog_shape(ShapeKind.DOT), catalog_shape(ShapeKind.DOT)]])
    session.start()
    session.begin_drag(0, 300, 500)
    ghost = session.move_drag(211.5, 333.25)
    assert ghost == (4, 3)
    assert session.end_drag(211.5, 333.25)
    assert session.last_move.origin == ghost
    assert session.board[4, 3] == int(BlockColor.VIOLET)
    assert session.dock[0] is None


def test_full_row_clears_after_delay():
    line8 = make_shape([[1] * 8], color=BlockColor.ORANGE)
    scheduler = ManualScheduler()
    session, generator = _session([[line8] + _dots()[:2]], scheduler=scheduler)
    sounds = _record_sounds(session)
    session.start()

    x, y = pointer_for(MAPPER, line8, 3, 0)
    assert session.begin_drag(0, x, y)
    assert session.move_drag(x, y) == (3, 0)
    assert session.end_drag(x, y)

    assert session.phase is TurnPhase.RESOLVING_CLEAR_DELAY
    assert session.clearing.rows == (3,)
    assert (session.board[3, :] == int(BlockColor.ORANGE)).all()
    assert session.score == 0
    # no drag can start while the clear is pending
    assert not session.begin_drag(1, 0, 0)

    scheduler.advance(399)
    assert session.phase is TurnPhase.RESOLVING_CLEAR_DELAY
    scheduler.advance(1)

    assert session.phase is TurnPhase.AWAITING_INPUT
    assert not session.board.any()
    assert session.score == 18
    assert session.combo == 1
    assert session.last_move.score.points == 18
    assert session.last_move.lines.count == 1
    assert generator.calls == 1
    assert sounds == [SoundEvent.SELECT, SoundEvent.PLACE, SoundEvent.CLEAR]


def test_square_completing_nothing_scores_cells_and_breaks_combo():
    square = catalog_shape(ShapeKind.SQUARE2)
    session, _ = _session([[square] + _dots()[:2]])
    session.start()
    session.scorer.combo = 3
    assert session.place_at(0, 2, 2)
    assert session.score == 4
    assert session.combo == 0
    assert session.last_move.score.multiplier == 0


def test_consecutive_clears_build_combo_then_reset():
    session, generator = _session([_dots(), _dots()])
    sounds = _record_sounds(session)
    session.start()
    board = empty_board()
    board[0, :7] = int(BlockColor.RED)
    board[1, :7] = int(BlockColor.RED)
    session.board = board

    assert session.place_at(0, 0, 7)
    assert session.last_move.score.multiplier == 1
    assert session.score == 11

    assert session.place_at(1, 1, 7)
    assert session.last_move.score.multiplier == 2
    assert session.score == 11 + 21

    assert session.place_at(2, 5, 5)
    assert session.combo == 0
    assert session.score == 33

    assert generator.calls == 2
    assert all(shape is not None for shape in session.dock)
    assert sounds.count(SoundEvent.CLEAR) == 1
    assert sounds.count(SoundEvent.COMBO) == 1


def test_two_lines_at_once_play_combo_sound():
    session, _ = _session([_dots()])
    sounds = _record_sounds(session)
    session.start()
    board = empty_board()
    board[2, :] = int(BlockColor.RED)
    board[:, 6] = int(BlockColor.RED)
    board[2, 6] = 0
    session.board = board
    assert session.place_at(0, 2, 6)
    assert session.last_move.lines.count == 2
    assert session.score == 1 + 2 * 10 * 1
    assert SoundEvent.COMBO in sounds
    assert not session.board.any()


def test_invalid_place_at_is_rejected():
    session, _ = _session([[catalog_shape(ShapeKind.SQUARE3)] + _dots()[:2]])
    session.start()
    assert not session.place_at(0, 6, 6)
    assert not session.place_at(0, -1, 0)
    assert session.dock[0] is not None
    assert session.score == 0


def _play_into_game_over(session):
    session.start()
    session.board = _isolated_holes_board()
    assert session.place_at(0, 0, 0)


def test_game_over_when_nothing_fits():
    dock = [catalog_shape(ShapeKind.DOT), catalog_shape(ShapeKind.LINE2_H), catalog_shape(ShapeKind.SQUARE2)]
    session, _ = _session([dock])
    sounds = _record_sounds(session)
    _play_into_game_over(session)
    assert session.state is SessionState.GAME_OVER
    assert session.is_game_over
    assert session.last_move.game_over
    assert session.score == 1
    assert sounds[-1] is SoundEvent.GAME_OVER
    assert not session.place_at(1, 0, 0)
    assert not session.begin_drag(1, 0, 0)


def test_refilled_dock_that_cannot_fit_ends_the_game():
    squares = [catalog_shape(ShapeKind.SQUARE3) for _ in range(3)]
    session, generator = _session([_dots(), squares])
    session.start()
    session.board = _isolated_holes_board()
    for slot in range(3):
        assert session.state is SessionState.ACTIVE
        assert session.place_at(slot, slot, slot)
    assert generator.calls == 2
    assert session.dock == squares
    assert session.state is SessionState.GAME_OVER
    assert session.last_move.game_over
    assert session.score == 3


def test_submit_score_forwards_once_and_returns_to_idle():
    dock = [catalog_shape(ShapeKind.DOT), catalog_shape(ShapeKind.LINE2_H), catalog_shape(ShapeKind.SQUARE2)]
    leaderboard = InMemoryLeaderboard()
    session, _ = _session([dock], submitter=leaderboard)
    _play_into_game_over(session)
    summary = session.summary()
    assert summary.score == 1 and summary.pieces_placed == 1
    assert session.submit_score()
    assert leaderboard.entries == [("alice", 1)]
    assert session.state is SessionState.IDLE
    with pytest.raises(RuntimeError):
        session.submit_score()
    assert len(leaderboard.entries) == 1


@pytest.mark.parametrize("exc", [ScoreSubmissionError("offline"), OSError("timeout"), None])
def test_submission_failure_is_a_notice(exc):
    dock = [catalog_shape(ShapeKind.DOT), catalog_shape(ShapeKind.LINE2_H), catalog_shape(ShapeKind.SQUARE2)]
    submitter = FailingSubmitter(exc)
    session, _ = _session([dock], submitter=submitter)
    _play_into_game_over(session)
    assert not session.submit_score()
    assert submitter.calls == 1
    assert session.state is SessionState.IDLE
    assert session.notices


def test_submit_before_game_over_is_an_error():
    session, _ = _session([_dots()])
    session.start()
    with pytest.raises(RuntimeError):
        session.submit_score()


def test_return_to_menu_cancels_pending_clear():
    line8 = make_shape([[1] * 8])
    scheduler = ManualScheduler()
    session, _ = _session([[line8] + _dots()[:2]], scheduler=scheduler)
    session.start()
    assert session.place_at(0, 0, 0)
    assert scheduler.pending == 1
    session.return_to_menu()
    assert scheduler.pending == 0
    assert session.state is SessionState.IDLE
    scheduler.advance(1000)
    assert session.score == 0
    assert not session.board.any()


def test_new_session_after_game_over_resets_state():
    dock = [catalog_shape(ShapeKind.DOT), catalog_shape(ShapeKind.LINE2_H), catalog_shape(ShapeKind.SQUARE2)]
    session, _ = _session([dock, _dots()], credits=2)
    _play_into_game_over(session)
    session.submit_score()
    assert session.start()
    assert session.credits.get_remaining_credits() == 0
    assert session.score == 0
    assert session.pieces_placed == 0
    assert not session.board.any()
