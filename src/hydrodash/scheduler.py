"""Cooperative single-threaded timer scheduler.

Timers fire in order of their due time; timers due at the same instant fire in
the order they were scheduled. Time is virtual: :meth:`Scheduler.advance` moves
it forward and fires everything that became due, :meth:`Scheduler.run` paces the
same loop against the asyncio event loop for live use.
"""

import asyncio
import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Timer:
    name: str
    interval: float
    callback: Callable[[], None] = field(repr=False)
    next_due: float
    active: bool = True

    def cancel(self) -> None:
        self.active = False


@dataclass
class Scheduler:
    start: float = 0.0
    _now: float = field(init=False, repr=False)
    _queue: list[tuple[float, int, Timer]] = field(default_factory=list, init=False, repr=False)
    _seq: count = field(default_factory=count, init=False, repr=False)
    _timers: list[Timer] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._now = self.start

    def now(self) -> float:
        return self._now

    @property
    def timers(self) -> list[Timer]:
        return [t for t in self._timers if t.active]

    def every(self, interval: float, callback: Callable[[], None], name: str = "timer") -> Timer:
        if interval <= 0:
            raise ValueError(f"Timer '{name}': interval must be positive, got {interval}")
        timer = Timer(name=name, interval=interval, callback=callback, next_due=self._now + interval)
        self._timers.append(timer)
        self._push(timer)
        return timer

    def cancel(self, timer: Timer | None) -> None:
        if timer is None:
            return
        timer.cancel()
        self._timers = [t for t in self._timers if t.active]

    def cancel_all(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        self._queue.clear()

    def _push(self, timer: Timer) -> None:
        heapq.heappush(self._queue, (timer.next_due, next(self._seq), timer))

    def next_due(self) -> float | None:
        while self._queue and not self._queue[0][2].active:
            heapq.heappop(self._queue)
        return self._queue[0][0] if self._queue else None

    def advance(self, seconds: float) -> int:
        """Move virtual time forward, firing due timers. Returns the number of firings."""
        if seconds < 0:
            raise ValueError("cannot advance time backwards")
        return self.advance_to(self._now + seconds)

    def advance_to(self, target: float) -> int:
        if target < self._now:
            raise ValueError("cannot advance time backwards")
        fired = 0
        while True:
            due = self.next_due()
            if due is None or due > target:
                break
            _, _, timer = heapq.heappop(self._queue)
            self._now = due
            try:
                timer.callback()
            except Exception:
                logger.exception(f"Timer '{timer.name}' failed at t={due}")
            fired += 1
            if timer.active:
                timer.next_due = due + timer.interval
                self._push(timer)
        self._now = target
        return fired

    async def run(self, duration: float | None = None) -> None:
        """Fire timers in wall-clock pace until ``duration`` elapses or no timer is left."""
        end = None if duration is None else self._now + duration
        while True:
            due = self.next_due()
            if due is None:
                break
            if end is not None and due > end:
                await asyncio.sleep(end - self._now)
                self.advance_to(end)
                break
            await asyncio.sleep(due - self._now)
            self.advance_to(due)
