from dataclasses import replace
from enum import Enum
from typing import ClassVar, Self

ParamBounds = tuple[float, float]


class Weather(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"


WEATHER_STATES: tuple[Weather, ...] = tuple(Weather)


class AlertPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {AlertPriority.HIGH: 3, AlertPriority.MEDIUM: 2, AlertPriority.LOW: 1}


class Mode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"

    def toggled(self) -> "Mode":
        return Mode.MANUAL if self is Mode.AUTOMATIC else Mode.AUTOMATIC


class SystemStatus(str, Enum):
    CRITICAL = "Critical"
    CONCERNING = "Concerning"
    NORMAL = "Normal"


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(value, hi))


class BoundViolationError(ValueError):
    """Raised when a parameter value violates its declared bounds."""

    def __init__(self, param: str, value: float, bounds: ParamBounds):
        self.param = param
        self.value = value
        self.bounds = bounds
        lo, hi = bounds
        super().__init__(f"Parameter '{param}' value {value} outside bounds [{lo}, {hi}]")


class Strategy:
    """Mixin for stream policies with tunable parameters.

    Concrete strategies should:
    1. Inherit from Strategy
    2. Be frozen dataclasses
    3. Declare __params__ listing tunable field names
    """

    __params__: ClassVar[tuple[str, ...]] = ()
    __bounds__: ClassVar[dict[str, ParamBounds]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        invalid = set(cls.__bounds__) - set(cls.__params__)
        if invalid:
            raise TypeError(f"{cls.__name__}: __bounds__ references unknown params: {invalid}")

    def __post_init__(self) -> None:
        """Validate parameter values against bounds."""
        for param in self.__params__:
            if param not in self.__bounds__:
                continue
            value = getattr(self, param)
            lo, hi = self.__bounds__[param]
            if not (lo <= value <= hi):
                raise BoundViolationError(param, value, (lo, hi))

    def params(self) -> dict[str, float]:
        """Return current parameter values."""
        return {name: getattr(self, name) for name in self.__params__}

    def bounds(self) -> dict[str, ParamBounds]:
        return dict(self.__bounds__)

    def with_params(self, **kwargs: float) -> Self:
        """Create new instance with updated parameters (immutable)."""
        invalid = set(kwargs) - set(self.__params__)
        if invalid:
            raise ValueError(f"Unknown parameters: {invalid}")
        return replace(self, **kwargs)
