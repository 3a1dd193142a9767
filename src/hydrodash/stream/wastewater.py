from dataclasses import dataclass, field

from . import ids
from .base import BaseStream, TickContext
from .strategies import EfficiencyRange


@dataclass
class WastewaterTreatment(BaseStream):
    efficiency: EfficiencyRange = field(default_factory=lambda: EfficiencyRange(0.6, 0.9))
    wastewater_input: str = ids.WASTEWATER_INPUT
    distinct: bool = field(default=True, kw_only=True)
    _total: float = field(default=0.0, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.wastewater_input,)

    def update(self, ctx: TickContext) -> None:
        if not ctx.fired(self.wastewater_input):
            return
        raw = max(0.0, float(ctx.latest(self.wastewater_input)))
        self._total += raw * self.efficiency.sample(ctx.rng)
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._total = 0.0
