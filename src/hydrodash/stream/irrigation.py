from collections.abc import Mapping
from dataclasses import dataclass, field

from hydrodash.common import Weather

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY


def _default_weather_factors() -> dict[Weather, float]:
    return {Weather.SUNNY: 1.2, Weather.RAINY: 0.5}


@dataclass
class Irrigation(BaseStream):
    """Running sum of irrigation need, ``purified * 0.3`` scaled by weather."""

    need_fraction: float = 0.3
    weather_factors: Mapping[Weather, float] = field(default_factory=_default_weather_factors)
    purification: str = ids.PURIFICATION
    weather: str = ids.WEATHER
    distinct: bool = field(default=True, kw_only=True)
    _total: float = field(default=0.0, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.purification, self.weather)

    def need(self, purified: float, weather: Weather) -> float:
        return purified * self.need_fraction * self.weather_factors.get(Weather(weather), 1.0)

    def update(self, ctx: TickContext) -> None:
        if not ctx.ready(self.purification, self.weather):
            self.skip(NOT_READY, ctx.tick)
            return
        self._total += self.need(float(ctx.latest(self.purification)), ctx.latest(self.weather))
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._total = 0.0
