import logging
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceLogEntry:
    timestamp: float  # simulated seconds
    source: str
    amount: float


@dataclass
class WaterSourceLog:
    """Readings of the water sources (dam, glacier) as they are published."""

    _entries: list[SourceLogEntry] = field(default_factory=list, init=False, repr=False)
    _listeners: list[Callable[[SourceLogEntry], None]] = field(default_factory=list, init=False, repr=False)

    @property
    def entries(self) -> list[SourceLogEntry]:
        return list(self._entries)

    def add(self, entry: SourceLogEntry) -> None:
        self._entries.append(entry)
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Water source log listener failed")

    def source_logger(self, source: str, clock: Callable[[], float]) -> Callable[[float], None]:
        def log(amount: float) -> None:
            self.add(SourceLogEntry(timestamp=clock(), source=source, amount=float(amount)))

        return log

    def subscribe(self, listener: Callable[[SourceLogEntry], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        self._entries.clear()

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(e) for e in self._entries], columns=["timestamp", "source", "amount"])

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class StateHistory:
    """Per-tick snapshots of the system state, newest last."""

    maxlen: int = 10_000
    _rows: deque[dict[str, Any]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._rows = deque(maxlen=self.maxlen)

    def record(self, seconds: float, state: dict[str, Any]) -> None:
        self._rows.append({"seconds": seconds, **state})

    def clear(self) -> None:
        self._rows.clear()

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(list(self._rows))
        if not frame.empty:
            frame = frame.set_index("seconds")
        return frame

    def __len__(self) -> int:
        return len(self._rows)
