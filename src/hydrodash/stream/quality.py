from dataclasses import dataclass

from hydrodash.common import Weather, clamp

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY, ZERO_DENOMINATOR


@dataclass
class WaterQuality(BaseStream):
    """Share of purified water in all processed water, as a 0-100 score.

    Storms reduce the score by ``storm_factor``. With nothing processed yet
    the score is undefined and nothing is published.
    """

    storm_factor: float = 0.9
    purification: str = ids.PURIFICATION
    wastewater: str = ids.WASTEWATER
    weather: str = ids.WEATHER

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.purification, self.wastewater, self.weather)

    def score(self, purified: float, treated: float, weather: Weather) -> float | None:
        total = purified + treated
        if total == 0:
            return None
        score = purified / total * 100
        if Weather(weather) is Weather.STORMY:
            score *= self.storm_factor
        return clamp(score)

    def update(self, ctx: TickContext) -> None:
        if not ctx.ready(self.purification, self.wastewater, self.weather):
            self.skip(NOT_READY, ctx.tick)
            return
        score = self.score(
            float(ctx.latest(self.purification)),
            float(ctx.latest(self.wastewater)),
            ctx.latest(self.weather),
        )
        if score is None:
            self.skip(ZERO_DENOMINATOR, ctx.tick)
            return
        self.emit(score, ctx.tick)
