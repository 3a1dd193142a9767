import logging
from dataclasses import dataclass, field

from hydrodash.common import WEATHER_STATES, Weather
from hydrodash.protocols import RandomSource
from hydrodash.rng import choice
from hydrodash.sources import InputChannel

logger = logging.getLogger(__name__)


@dataclass
class WeatherSimulator:
    """Memoryless random walk over the weather states.

    Every :meth:`step` draws a state uniformly, independent of the current
    one, and publishes it to the weather channel when it differs from the
    last published state.
    """

    channel: InputChannel
    rng: RandomSource
    states: tuple[Weather, ...] = WEATHER_STATES
    _current: Weather | None = field(default=None, init=False, repr=False)

    @property
    def current(self) -> Weather | None:
        return self._current

    def sample(self) -> Weather:
        return choice(self.rng, self.states)

    def step(self) -> Weather:
        weather = self.sample()
        if weather != self._current:
            logger.debug(f"Weather changed: {self._current} -> {weather}")
            self._current = weather
            self.channel.publish(weather)
        return weather

    def set(self, weather: Weather | str) -> None:
        self._current = Weather(weather)
        self.channel.publish(self._current)
