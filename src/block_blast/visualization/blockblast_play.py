from __future__ import annotations

import argparse
from typing import Optional

import pygame

from block_blast.engine import (
    BlockColor,
    GameConfig,
    GameSession,
    InMemoryCreditAccount,
    InMemoryLeaderboard,
    ManualScheduler,
    PointerMapper,
    SessionState,
    Shape,
)
from .sound import SoundPlayer


CELL_SIZE = 44
DOCK_CELL = 20
MARGIN = 20
HEADER = 60
DOCK_HEIGHT = 140

EMPTY_COLOR = (55, 65, 81)
BACKGROUND = (17, 24, 39)
TEXT_COLOR = (230, 230, 230)


def _color(value: int) -> tuple[int, int, int]:
    return BlockColor(value).rgb if value else EMPTY_COLOR


def dock_slot_rect(slot: int, board_px: int, dock_size: int) -> pygame.Rect:
    width = board_px // dock_size
    return pygame.Rect(MARGIN + slot * width, HEADER + board_px + MARGIN, width, DOCK_HEIGHT - MARGIN)


def draw_board(screen: pygame.Surface, session: GameSession) -> None:
    board = session.board
    h, w = board.shape
    for y in range(h):
        for x in range(w):
            rect = pygame.Rect(MARGIN + x * CELL_SIZE, HEADER + y * CELL_SIZE, CELL_SIZE - 4, CELL_SIZE - 4)
            color = _color(int(board[y, x]))
            if y in session.clearing.rows or x in session.clearing.cols:
                color = (255, 255, 255)
            pygame.draw.rect(screen, color, rect, border_radius=6)


def draw_shape(screen: pygame.Surface, shape: Shape, left: float, top: float, cell: int) -> None:
    for i, j in shape.cells():
        rect = pygame.Rect(int(left + j * cell), int(top + i * cell), cell - 2, cell - 2)
        pygame.draw.rect(screen, shape.color.rgb, rect, border_radius=3)


def draw_dock(screen: pygame.Surface, session: GameSession, board_px: int) -> None:
    dragging = session.drag.slot if session.drag is not None else None
    for slot, shape in enumerate(session.dock):
        if shape is None or slot == dragging:
            continue
        area = dock_slot_rect(slot, board_px, len(session.dock))
        left = area.centerx - shape.cols * DOCK_CELL / 2
        top = area.centery - shape.rows * DOCK_CELL / 2
        draw_shape(screen, shape, left, top, DOCK_CELL)


def draw_drag(screen: pygame.Surface, session: GameSession) -> None:
    if session.drag is None:
        return
    shape = session.dock[session.drag.slot]
    if shape is None:
        return
    ghost = session.ghost()
    if ghost is not None:
        for i, j in shape.cells():
            x, y = session.pointer.cell_to_pixel(ghost[0] + i, ghost[1] + j)
            rect = pygame.Rect(int(x), int(y), CELL_SIZE - 4, CELL_SIZE - 4)
            pygame.draw.rect(screen, shape.color.rgb, rect, 2, border_radius=6)
    px, py = session.drag.pointer
    anchor_y = py - session.pointer.lift_px
    left = px - shape.cols * CELL_SIZE / 2
    top = anchor_y - shape.rows * CELL_SIZE / 2
    draw_shape(screen, shape, left, top, CELL_SIZE)


def slot_at(session: GameSession, x: int, y: int, board_px: int) -> Optional[int]:
    for slot in range(len(session.dock)):
        if dock_slot_rect(slot, board_px, len(session.dock)).collidepoint(x, y):
            return slot
    return None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--player", type=str, default="player")
    p.add_argument("--credits", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--mute", action="store_true")
    return p


def run() -> None:
    args = build_parser().parse_args()
    config = GameConfig(random_seed=args.seed)
    board_px = config.board_size * CELL_SIZE
    leaderboard = InMemoryLeaderboard()
    credits = InMemoryCreditAccount(credits=args.credits)
    scheduler = ManualScheduler()
    session = GameSession(
        credits=credits,
        submitter=leaderboard,
        player_id=args.player,
        config=config,
        scheduler=scheduler,
        pointer=PointerMapper(MARGIN, HEADER, CELL_SIZE, lift_px=config.drag_lift_px),
    )

    pygame.init()
    try:
        width = MARGIN * 2 + board_px
        height = HEADER + board_px + DOCK_HEIGHT + MARGIN
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Block Blast")
        font = pygame.font.SysFont(None, 26)
        big_font = pygame.font.SysFont(None, 48)
        if not args.mute:
            session.signals.sound.connect(SoundPlayer(), weak=False)

        clock = pygame.time.Clock()
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        if session.state is SessionState.IDLE:
                            running = False
                        elif session.state is SessionState.ACTIVE:
                            session.return_to_menu()
                    elif event.key in (pygame.K_RETURN, pygame.K_SPACE):
                        if session.state is SessionState.IDLE:
                            session.start()
                        elif session.state is SessionState.GAME_OVER:
                            session.submit_score()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    slot = slot_at(session, *event.pos, board_px)
                    if slot is not None:
                        session.begin_drag(slot, *event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    session.move_drag(*event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    session.end_drag(*event.pos)
                elif event.type == pygame.WINDOWLEAVE:
                    session.cancel_drag()

            scheduler.advance(clock.tick(60))

            screen.fill(BACKGROUND)
            header = f"Score {session.score}   Combo x{session.combo}   Credits {credits.get_remaining_credits()}"
            screen.blit(font.render(header, True, TEXT_COLOR), (MARGIN, 20))
            draw_board(screen, session)
            draw_dock(screen, session, board_px)
            draw_drag(screen, session)

            if session.state is SessionState.IDLE:
                hint = "Enter: start (1 credit)   Esc: quit"
                if session.notices:
                    hint = session.notices[-1]
                screen.blit(font.render(hint, True, (250, 204, 21)), (MARGIN, height - 30))
            elif session.state is SessionState.GAME_OVER:
                summary = session.summary()
                over = big_font.render(f"No moves! {summary.score}", True, (96, 165, 250))
                screen.blit(over, over.get_rect(center=(width // 2, HEADER + board_px // 2)))
                claim = f"Enter: claim {summary.reward_points} PT"
                screen.blit(font.render(claim, True, TEXT_COLOR), (MARGIN, height - 30))
            if session.combo > 1:
                combo = big_font.render(f"{session.combo}x COMBO!", True, (250, 204, 21))
                screen.blit(combo, combo.get_rect(center=(width // 2, HEADER // 2 + 10)))

            pygame.display.flip()
    finally:
        pygame.quit()

    for player_id, score in leaderboard.top():
        print(f"{player_id}: {score}")


if __name__ == "__main__":  # pragma: no cover
    run()
