from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Tick:
    """One evaluation of the stream graph.

    ``index`` counts graph ticks since the graph was built, ``seconds`` is the
    simulated time at which the tick fired and ``dt`` the time since the
    previous tick.
    """

    index: int
    seconds: float = 0.0
    dt: float = 1.0

    def __index__(self) -> int:
        return self.index

    def __int__(self) -> int:
        return self.index

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Tick):
            return self.index == other.index and self.seconds == other.seconds
        if isinstance(other, int):
            return self.index == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.index)

    def crossed(self, period: float) -> bool:
        """True if a multiple of ``period`` lies in ``(seconds - dt, seconds]``."""
        if period <= 0:
            return False
        return self.seconds // period > (self.seconds - self.dt) // period
