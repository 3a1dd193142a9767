from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from hydrodash.protocols import Clock

T = TypeVar("T")


@dataclass
class TimedCache:
    """Memoizes computations for ``ttl`` seconds of clock time.

    :meth:`sweep` drops entries older than ``max_age``.
    """

    clock: Clock
    ttl: float = 1.0
    max_age: float = 5.0
    _entries: dict[str, tuple[Any, float]] = field(default_factory=dict, init=False, repr=False)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        now = self.clock.now()
        cached = self._entries.get(key)
        if cached is not None and now - cached[1] < self.ttl:
            return cached[0]
        value = compute()
        self._entries[key] = (value, now)
        return value

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def sweep(self) -> int:
        now = self.clock.now()
        stale = [key for key, (_, stamp) in self._entries.items() if now - stamp > self.max_age]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)
