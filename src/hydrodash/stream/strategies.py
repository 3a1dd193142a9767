from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

from hydrodash.common import Strategy
from hydrodash.protocols import RandomSource
from hydrodash.rng import uniform
from hydrodash.time import Tick


@runtime_checkable
class LevelPolicy(Protocol):
    def level(self, previous: float | None, target: float) -> float: ...


@dataclass(frozen=True)
class DirectLevel:
    """Publish the computed target level as is."""

    def level(self, previous: float | None, target: float) -> float:
        return target


@dataclass(frozen=True)
class SmoothedLevel(Strategy):
    """Exponential smoothing towards the computed target level."""

    __params__: ClassVar[tuple[str, ...]] = ("smoothing_factor",)
    __bounds__: ClassVar[dict[str, tuple[float, float]]] = {"smoothing_factor": (0.0, 1.0)}
    smoothing_factor: float = 0.1

    def level(self, previous: float | None, target: float) -> float:
        if previous is None:
            return target
        return previous + (target - previous) * self.smoothing_factor


@dataclass(frozen=True)
class EfficiencyRange(Strategy):
    __params__: ClassVar[tuple[str, ...]] = ("low", "high")
    __bounds__: ClassVar[dict[str, tuple[float, float]]] = {"low": (0.0, 1.0), "high": (0.0, 1.0)}
    low: float
    high: float

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must not exceed high ({self.high})")

    def sample(self, rng: RandomSource) -> float:
        return uniform(rng, self.low, self.high)


@dataclass(frozen=True)
class DailyQuota(Strategy):
    """Subtract a fixed quota from a running total once per period."""

    __params__: ClassVar[tuple[str, ...]] = ("quota", "period")
    __bounds__: ClassVar[dict[str, tuple[float, float]]] = {"quota": (0.0, float("inf")), "period": (1.0, float("inf"))}
    quota: float = 1000.0
    period: float = 86_400.0

    def apply(self, total: float, t: Tick) -> float:
        if t.crossed(self.period):
            return max(0.0, total - self.quota)
        return total
