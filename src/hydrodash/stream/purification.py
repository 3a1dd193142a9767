from dataclasses import dataclass, field

from . import ids
from .base import BaseStream, TickContext
from .events import INACTIVE
from .strategies import EfficiencyRange


@dataclass
class _Release:
    portion: float
    remaining: int


@dataclass
class Purification(BaseStream):
    """Purified water, released gradually.

    Every dam emission above ``min_level`` purifies ``level * efficiency``
    and schedules it for release in ``steps`` equal portions over the
    following ticks. The published value is the running total released.
    """

    efficiency: EfficiencyRange = field(default_factory=lambda: EfficiencyRange(0.5, 0.8))
    min_level: float = 20.0
    steps: int = 5
    dam: str = ids.DAM
    _pending: list[_Release] = field(default_factory=list, init=False, repr=False)
    _total: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.steps < 1:
            raise ValueError("steps must be at least 1")

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.dam,)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def update(self, ctx: TickContext) -> None:
        released = 0.0
        any_released = bool(self._pending)
        for release in self._pending:
            released += release.portion
            release.remaining -= 1
        self._pending = [r for r in self._pending if r.remaining > 0]

        if ctx.fired(self.dam):
            level = float(ctx.latest(self.dam))
            if level > self.min_level:
                water = level * self.efficiency.sample(ctx.rng)
                self._pending.append(_Release(portion=water / self.steps, remaining=self.steps))

        if not any_released:
            self.skip(INACTIVE, ctx.tick)
            return
        self._total += released
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._pending = []
        self._total = 0.0
