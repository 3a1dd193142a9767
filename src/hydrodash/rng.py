from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeVar

import numpy as np

from hydrodash.protocols import RandomSource

T = TypeVar("T")


@dataclass
class NumpyRandom:
    """Random source backed by a numpy ``Generator``.

    Pass a ``seed`` for reproducible runs.
    """

    seed: int | None = None
    _generator: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._generator = np.random.default_rng(self.seed)

    def random(self) -> float:
        return float(self._generator.random())

    def reseed(self, seed: int | None = None) -> None:
        self.seed = seed
        self._generator = np.random.default_rng(seed)


def uniform(rng: RandomSource, lo: float, hi: float) -> float:
    return lo + rng.random() * (hi - lo)


def choice(rng: RandomSource, options: Sequence[T]) -> T:
    if not options:
        raise ValueError("cannot choose from an empty sequence")
    index = min(int(rng.random() * len(options)), len(options) - 1)
    return options[index]
