from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Protocol


Callback = Callable[[], None]


@dataclass(eq=False)
class TimerHandle:
    due_ms: float
    callback: Callback
    cancelled: bool = False
    fired: bool = False


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle: ...

    def cancel(self, handle: TimerHandle) -> None: ...


@dataclass
class ManualScheduler:
    """Deferred callbacks driven by an external clock.

    A frame loop calls `advance(dt_ms)` every tick; due callbacks run on
    that same thread, in due order.
    """
    now_ms: float = 0.0
    _pending: List[TimerHandle] = field(default_factory=list)

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(due_ms=self.now_ms + max(0.0, float(delay_ms)), callback=callback)
        self._pending.append(handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True
        if handle in self._pending:
            self._pending.remove(handle)

    def advance(self, dt_ms: float) -> int:
        """Move the clock forward and run everything now due; returns how many ran"""
        self.now_ms += float(dt_ms)
        ran = 0
        while True:
            due = [h for h in self._pending if not h.cancelled and h.due_ms <= self.now_ms]
            if not due:
                return ran
            handle = min(due, key=lambda h: h.due_ms)
            self._pending.remove(handle)
            handle.fired = True
            handle.callback()
            ran += 1

    @property
    def pending(self) -> int:
        return len(self._pending)


class ImmediateScheduler:
    """Runs callbacks as soon as they are scheduled (no visual delay)"""

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(due_ms=0.0, callback=callback)
        handle.fired = True
        callback()
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True
