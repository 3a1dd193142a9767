import logging
from dataclasses import dataclass, field
from typing import Any

from hydrodash.common import Weather

logger = logging.getLogger(__name__)


@dataclass
class InputChannel:
    """Latest-value entry point for external or simulated values.

    Readers see the newest published value; ``version`` increments on every
    accepted publish so streams can tell whether something new arrived since
    they last looked. A frozen channel ignores publishes.
    """

    name: str
    _value: Any = field(default=None, init=False, repr=False)
    _version: int = field(default=0, init=False, repr=False)
    frozen: bool = field(default=False, init=False)
    closed: bool = field(default=False, init=False)

    @property
    def value(self) -> Any:
        return self._value

    @property
    def version(self) -> int:
        return self._version

    @property
    def has_value(self) -> bool:
        return self._version > 0

    def publish(self, value: Any) -> bool:
        if self.closed:
            logger.debug(f"Channel '{self.name}' is closed, dropping {value!r}")
            return False
        if self.frozen:
            logger.debug(f"Channel '{self.name}' is frozen, dropping {value!r}")
            return False
        self._value = value
        self._version += 1
        return True

    def freeze(self) -> None:
        self.frozen = True

    def unfreeze(self) -> None:
        self.frozen = False

    def close(self) -> None:
        self.closed = True


@dataclass
class DataSources:
    water: InputChannel = field(default_factory=lambda: InputChannel("water"))
    weather: InputChannel = field(default_factory=lambda: InputChannel("weather"))
    wastewater: InputChannel = field(default_factory=lambda: InputChannel("wastewater"))
    user_consumption: InputChannel = field(default_factory=lambda: InputChannel("user_consumption"))
    glacier: InputChannel = field(default_factory=lambda: InputChannel("glacier"))

    def channels(self) -> dict[str, InputChannel]:
        return {
            "water": self.water,
            "weather": self.weather,
            "wastewater": self.wastewater,
            "user_consumption": self.user_consumption,
            "glacier": self.glacier,
        }

    def publish_weather(self, weather: Weather | str) -> bool:
        return self.weather.publish(Weather(weather))

    def dispose(self) -> None:
        for channel in self.channels().values():
            channel.close()
