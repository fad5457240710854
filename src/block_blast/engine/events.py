from __future__ import annotations

from enum import Enum

from blinker import Signal


class SoundEvent(Enum):
    """Audio cues produced by session transitions; playback lives elsewhere"""
    SELECT = "select"
    PLACE = "place"
    CLEAR = "clear"
    COMBO = "combo"
    GAME_OVER = "gameover"


class SessionSignals:
    """Per-session signals.

    `sound` sends ``event=SoundEvent``; `notice` sends ``message=str``;
    `state_changed` sends ``state=SessionState, phase=TurnPhase``.
    """

    def __init__(self) -> None:
        self.sound = Signal("sound")
        self.notice = Signal("notice")
        self.state_changed = Signal("state_changed")
