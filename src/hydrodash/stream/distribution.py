from dataclasses import dataclass, field

from . import ids
from .base import BaseStream, TickContext
from .strategies import DailyQuota


@dataclass
class Distribution(BaseStream):
    """Running distributed volume, tiered on dam level, less a daily quota."""

    quota: DailyQuota = field(default_factory=DailyQuota)
    dam: str = ids.DAM
    _total: float = field(default=0.0, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.dam,)

    @staticmethod
    def tier(level: float) -> float:
        if level > 70:
            return level * 0.8
        if level > 30:
            return level * 0.5
        return level * 0.2

    def update(self, ctx: TickContext) -> None:
        if not ctx.fired(self.dam):
            return
        self._total = self.quota.apply(self._total + self.tier(float(ctx.latest(self.dam))), ctx.tick)
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._total = 0.0
