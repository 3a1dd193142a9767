from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from hydrodash.common import Weather
from hydrodash.config import SystemConfig
from hydrodash.graph import StreamGraph
from hydrodash.scheduler import Scheduler
from hydrodash.stream import BaseStream, TickContext
from hydrodash.system import WaterSystem
from hydrodash.time import Tick

# --- Random sources ---


@dataclass
class FixedRandom:
    """Replays a fixed sequence of numbers in ``[0, 1)``, cycling when exhausted."""

    values: tuple[float, ...] = (0.5,)
    _index: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.values = tuple(self.values)
        if not self.values:
            raise ValueError("FixedRandom needs at least one value")
        for v in self.values:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"FixedRandom values must be in [0, 1), got {v}")

    def random(self) -> float:
        value = self.values[self._index % len(self.values)]
        self._index += 1
        return value

    @property
    def calls(self) -> int:
        return self._index


def weather_draw(weather: Weather | str) -> float:
    """Random number that makes the weather simulator pick ``weather``."""
    index = list(Weather).index(Weather(weather))
    return (index + 0.5) / len(Weather)


# --- Streams ---


@dataclass
class StubStream(BaseStream):
    """Emits values pushed with :meth:`push` on the next tick."""

    upstream: tuple[str, ...] = ()
    _queued: list[Any] = field(default_factory=list, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        return self.upstream

    def push(self, value: Any) -> None:
        self._queued.append(value)

    def update(self, ctx: TickContext) -> None:
        if self._queued:
            self.emit(self._queued.pop(0), ctx.tick)


@dataclass
class FailingStream(BaseStream):
    upstream: tuple[str, ...] = ()
    message: str = "boom"

    @property
    def inputs(self) -> tuple[str, ...]:
        return self.upstream

    def update(self, ctx: TickContext) -> None:
        raise RuntimeError(self.message)


def make_ctx(
    values: dict[str, Any] | None = None,
    emitted: Iterable[str] = (),
    index: int = 1,
    seconds: float | None = None,
    dt: float = 1.0,
    rng: Any = None,
) -> TickContext:
    return TickContext(
        tick=Tick(index=index, seconds=float(index) if seconds is None else seconds, dt=dt),
        rng=rng if rng is not None else FixedRandom(),
        values=dict(values or {}),
        emitted=set(emitted),
    )


def make_graph(*streams: BaseStream, rng: Any = None) -> StreamGraph:
    graph = StreamGraph(rng=rng if rng is not None else FixedRandom())
    for stream in streams:
        graph.add_stream(stream)
    graph.validate()
    return graph


# --- Systems ---


def make_config(**overrides: Any) -> SystemConfig:
    return SystemConfig().with_overrides(**overrides) if overrides else SystemConfig()


def make_system(
    values: Iterable[float] = (0.5,),
    start: bool = True,
    **config_overrides: Any,
) -> WaterSystem:
    system = WaterSystem(
        config=make_config(**config_overrides),
        rng=FixedRandom(tuple(values)),
        scheduler=Scheduler(),
    )
    if start:
        system.start()
    return system
