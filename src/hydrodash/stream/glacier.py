from collections.abc import Mapping
from dataclasses import dataclass, field

from hydrodash.common import Weather

from . import ids
from .base import BaseStream, TickContext
from .events import NOT_READY


@dataclass(frozen=True, slots=True)
class GlacierReading:
    volume: float
    melt_rate: float
    water_flow: float


@dataclass
class GlacierMelt(BaseStream):
    """Melts a fraction of the glacier volume every tick, depending on weather.

    The volume is carried forward between ticks; a value arriving on the
    glacier input replaces it. Readings are only published when volume or
    water flow changed.
    """

    melt_coefficients: Mapping[Weather, float]
    water_loss_factor: float = 0.95
    weather: str = ids.WEATHER
    glacier_input: str = ids.GLACIER_INPUT
    distinct: bool = field(default=True, kw_only=True)
    _volume: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.water_loss_factor <= 1.0:
            raise ValueError(f"water_loss_factor must be between 0.0 and 1.0, got {self.water_loss_factor}")

    @property
    def inputs(self) -> tuple[str, ...]:
        return (self.weather, self.glacier_input)

    @property
    def volume(self) -> float | None:
        return self._volume

    def melt(self, volume: float, weather: Weather) -> GlacierReading:
        melt_rate = volume * self.melt_coefficients[Weather(weather)]
        return GlacierReading(
            volume=max(0.0, volume - melt_rate),
            melt_rate=melt_rate,
            water_flow=melt_rate * self.water_loss_factor,
        )

    def update(self, ctx: TickContext) -> None:
        if ctx.fired(self.glacier_input):
            self._volume = float(ctx.latest(self.glacier_input))
        if self._volume is None or not ctx.ready(self.weather):
            self.skip(NOT_READY, ctx.tick)
            return

        reading = self.melt(self._volume, ctx.latest(self.weather))
        self._volume = reading.volume
        self.emit(reading, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._volume = None
