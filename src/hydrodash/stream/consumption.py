from dataclasses import dataclass, field

from hydrodash.common import Weather

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY
from .strategies import DailyQuota


@dataclass
class UserConsumption(BaseStream):
    """Running user consumption, less a daily quota once per period.

    Consumption drops to 80 % when quality is below ``low_quality`` and
    rises by 20 % in sunny weather.
    """

    quota: DailyQuota = field(default_factory=DailyQuota)
    low_quality: float = 50.0
    consumption_input: str = ids.USER_CONSUMPTION_INPUT
    water_quality: str = ids.WATER_QUALITY
    weather: str = ids.WEATHER
    _total: float = field(default=0.0, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.consumption_input, self.water_quality, self.weather)

    def adjust(self, consumption: float, quality: float, weather: Weather) -> float:
        if quality < self.low_quality:
            consumption *= 0.8
        if Weather(weather) is Weather.SUNNY:
            consumption *= 1.2
        return consumption

    def update(self, ctx: TickContext) -> None:
        if not ctx.ready(self.consumption_input, self.water_quality, self.weather):
            self.skip(NOT_READY, ctx.tick)
            return
        adjusted = self.adjust(
            max(0.0, float(ctx.latest(self.consumption_input))),
            float(ctx.latest(self.water_quality)),
            ctx.latest(self.weather),
        )
        self._total = self.quota.apply(self._total + adjusted, ctx.tick)
        self.emit(self._total, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._total = 0.0
