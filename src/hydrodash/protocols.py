from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random numbers in ``[0, 1)``."""

    def random(self) -> float: ...


@runtime_checkable
class Clock(Protocol):
    def now(self) -> float: ...
