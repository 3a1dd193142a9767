from dataclasses import dataclass

from hydrodash.common import Weather

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY

WEATHER_RISK = {Weather.RAINY: 20.0, Weather.STORMY: 40.0}


@dataclass
class FloodRisk(BaseStream):
    high_level: float = 80.0
    very_high_level: float = 90.0
    dam: str = ids.DAM
    weather: str = ids.WEATHER

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.dam, self.weather)

    def risk(self, level: float, weather: Weather) -> float:
        risk = WEATHER_RISK.get(Weather(weather), 0.0)
        if level > self.high_level:
            risk += 30
        if level > self.very_high_level:
            risk += 20
        return min(100.0, risk)

    def update(self, ctx: TickContext) -> None:
        if not ctx.ready(self.dam, self.weather):
            self.skip(NOT_READY, ctx.tick)
            return
        self.emit(self.risk(float(ctx.latest(self.dam)), ctx.latest(self.weather)), ctx.tick)
