from dataclasses import dataclass, field

from . import ids
from .base import BaseStream, TickContext
from .events import INACTIVE
from .strategies import EfficiencyRange


@dataclass
class PowerPlant(BaseStream):
    """Accumulated power output: ``level * 0.4 * efficiency * 10`` per dam emission above ``min_level``."""

    efficiency: EfficiencyRange = field(default_factory=lambda: EfficiencyRange(0.7, 0.9))
    min_level: float = 30.0
    flow_fraction: float = 0.4
    output_factor: float = 10.0
    dam: str = ids.DAM
    distinct: bool = field(default=True, kw_only=True)
    _total: float = field(default=0.0, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.dam,)

    def generate(self, level: float, efficiency: float) -> float:
        return level * self.flow_fraction * efficiency * self.output_factor

    def update(self, ctx: TickContext) -> None:
        if not ctx.fired(self.dam):
            return
        level = float(ctx.latest(self.dam))
        if level <= self.min_level:
            self.skip(INACTIVE, ctx.tick)
            return
        self._total += self.generate(level, self.efficiency.sample(ctx.rng))
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._total = 0.0
