from collections.abc import Mapping
from dataclasses import dataclass, field

from hydrodash.common import Weather, clamp

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY
from .strategies import DirectLevel, LevelPolicy


@dataclass
class DamLevel(BaseStream):
    """Dam fill percentage from water input, glacier flow and weather.

    ``(input + glacier flow) * weather factor`` plus a random variation of
    ``±variation / 2`` points, passed through the level policy and clamped to
    [0, 100]. While a level is held (manual mode) that level is published
    instead.
    """

    weather_factors: Mapping[Weather, float]
    variation: float = 10.0
    policy: LevelPolicy = field(default_factory=DirectLevel)
    initial_level: float | None = None
    water_input: str = ids.WATER_INPUT
    weather: str = ids.WEATHER
    glacier: str = ids.GLACIER
    _held: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.variation < 0:
            raise ValueError("variation cannot be negative")
        if self.policy is None:
            raise ValueError("policy is required")

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.water_input, self.weather, self.glacier)

    @property
    def held(self) -> float | None:
        return self._held

    def hold(self, level: float) -> None:
        self._held = clamp(float(level))

    def release(self) -> None:
        self._held = None

    def target(self, water_input: float, glacier_flow: float, weather: Weather, noise: float) -> float:
        level = (water_input + glacier_flow) * self.weather_factors[Weather(weather)]
        level += (noise - 0.5) * self.variation
        return clamp(level)

    def update(self, ctx: TickContext) -> None:
        if self._held is not None:
            self.emit(self._held, ctx.tick)
            return
        if not ctx.ready(self.water_input, self.weather):
            self.skip(NOT_READY, ctx.tick)
            return

        reading = ctx.latest(self.glacier)
        glacier_flow = reading.water_flow if reading is not None else 0.0
        target = self.target(
            float(ctx.latest(self.water_input)),
            glacier_flow,
            ctx.latest(self.weather),
            ctx.rng.random(),
        )
        previous = self._value if self._has_value else self.initial_level
        self.emit(clamp(self.policy.level(previous, target)), ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._held = None
