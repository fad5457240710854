from __future__ import annotations

"""
External collaborators consumed by the session: the play-credit account and
score submission. In-memory implementations back local play and tests.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple


class ScoreSubmissionError(Exception):
    """Raised by a score submitter when the score could not be recorded"""


class CreditAccount(Protocol):
    def get_remaining_credits(self) -> int: ...

    def spend_credit(self) -> None: ...


class ScoreSubmitter(Protocol):
    def submit_score(self, player_id: str, score: int) -> bool: ...


@dataclass
class InMemoryCreditAccount:
    credits: int = 5

    def get_remaining_credits(self) -> int:
        return self.credits

    def spend_credit(self) -> None:
        if self.credits <= 0:
            raise ValueError("no play credit left to spend")
        self.credits -= 1


class UnlimitedCreditAccount:
    """Credit account that never runs out (headless agents)"""

    def get_remaining_credits(self) -> int:
        return 1

    def spend_credit(self) -> None:
        pass


@dataclass
class InMemoryLeaderboard:
    """Keeps submitted scores; only the best `max_entries` when a cap is set"""
    entries: List[Tuple[str, int]] = field(default_factory=list)
    max_entries: Optional[int] = None

    def submit_score(self, player_id: str, score: int) -> bool:
        self.entries.append((player_id, int(score)))
        if self.max_entries is not None and len(self.entries) > self.max_entries:
            self.entries = self.top(self.max_entries)
        return True

    def top(self, n: int = 10) -> List[Tuple[str, int]]:
        return sorted(self.entries, key=lambda e: e[1], reverse=True)[:n]
