"""
Battle timers.

The game loop drives time: each frame it calls BattleClock.advance(dt) and
any timer whose due time has passed fires. Tests drive the same clock with
whole seconds, so nothing here touches the wall clock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

TimerCallback = Callable[[], None]


@dataclass(eq=False)
class TimerHandle:
    """A scheduled callback. Keep the handle to cancel it."""
    due: float
    callback: TimerCallback
    interval: Optional[float] = None  # None = one-shot
    seq: int = 0
    cancelled: bool = False
    _clock: Optional["BattleClock"] = field(default=None, repr=False)

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    @property
    def active(self) -> bool:
        return not self.cancelled and self._clock is not None and self in self._clock._timers

    def cancel(self) -> None:
        self.cancelled = True
        if self._clock is not None:
            self._clock._discard(self)


class BattleClock:
    """Owns the scheduled callbacks of one combat session."""

    def __init__(self) -> None:
        self.now: float = 0.0
        self._timers: List[TimerHandle] = []
        self._seq: int = 0

    def schedule(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """Fire callback once, `delay` seconds from now."""
        return self._add(max(0.0, delay), callback, None)

    def schedule_interval(self, interval: float, callback: TimerCallback) -> TimerHandle:
        """Fire callback every `interval` seconds until cancelled."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        return self._add(interval, callback, interval)

    def _add(self, delay: float, callback: TimerCallback, interval: Optional[float]) -> TimerHandle:
        self._seq += 1
        handle = TimerHandle(
            due=self.now + delay,
            callback=callback,
            interval=interval,
            seq=self._seq,
            _clock=self,
        )
        self._timers.append(handle)
        return handle

    def _discard(self, handle: TimerHandle) -> None:
        if handle in self._timers:
            self._timers.remove(handle)

    def pending(self) -> int:
        return len(self._timers)

    def cancel_all(self) -> None:
        for handle in list(self._timers):
            handle.cancel()

    def advance(self, dt: float) -> None:
        """
        Move time forward by dt, firing due timers in due-time order.

        Callbacks may schedule or cancel timers; the queue is re-read after
        every firing. A repeating timer fires once per elapsed interval.
        """
        target = self.now + max(0.0, dt)

        while True:
            due = [t for t in self._timers if t.due <= target]
            if not due:
                break
            handle = min(due, key=lambda t: (t.due, t.seq))
            self.now = handle.due
            if handle.interval is not None:
                handle.due += handle.interval
            else:
                self._discard(handle)
            handle.callback()

        self.now = target
