import heapq
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from datetime import datetime
from itertools import count
from uuid import uuid4

from hydrodash.common import AlertPriority

from .alert import Alert, AlertKey

logger = logging.getLogger(__name__)

MAX_ALERTS = 1000

Listener = Callable[[tuple[Alert, ...]], None]


@dataclass
class _Entry:
    alert: Alert
    seq: int  # recency: larger is newer


@dataclass
class AlertQueue:
    """Bounded priority queue of deduplicated alerts.

    Alerts sharing ``(priority, message)`` are merged: the count goes up and
    the entry becomes the most recent of its priority. Once the queue holds
    more than ``max_alerts`` entries, the lowest-priority, oldest entry is
    evicted. A min-heap ordered by ``(priority rank, recency)`` backs the
    eviction; superseded heap entries are skipped lazily and compacted when
    they outnumber the live ones.
    """

    max_alerts: int = MAX_ALERTS
    now: Callable[[], datetime] = field(default=datetime.now, repr=False)
    _entries: dict[AlertKey, _Entry] = field(default_factory=dict, init=False, repr=False)
    _heap: list[tuple[int, int, AlertKey]] = field(default_factory=list, init=False, repr=False)
    _seq: count = field(default_factory=count, init=False, repr=False)
    _listeners: list[Listener] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_alerts < 1:
            raise ValueError("max_alerts must be at least 1")

    def add(self, message: str, priority: AlertPriority | str) -> Alert:
        priority = AlertPriority(priority)
        key = (priority, message)
        seq = next(self._seq)
        timestamp = self.now()

        existing = self._entries.get(key)
        if existing is not None:
            alert = replace(existing.alert, count=existing.alert.count + 1, timestamp=timestamp)
        else:
            alert = Alert(id=str(uuid4()), message=message, timestamp=timestamp, priority=priority)
        self._entries[key] = _Entry(alert=alert, seq=seq)
        heapq.heappush(self._heap, (priority.rank, seq, key))

        if len(self._entries) > self.max_alerts:
            self._evict()
        if len(self._heap) > 2 * len(self._entries) + 16:
            self._compact()

        self._notify()
        return alert

    def _is_live(self, seq: int, key: AlertKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.seq == seq

    def _evict(self) -> Alert | None:
        while self._heap:
            _, seq, key = heapq.heappop(self._heap)
            if self._is_live(seq, key):
                evicted = self._entries.pop(key).alert
                logger.debug(f"Alert queue full, evicted {evicted.priority.value} alert '{evicted.message}'")
                return evicted
        return None

    def _compact(self) -> None:
        self._heap = [(e.alert.priority.rank, e.seq, k) for k, e in self._entries.items()]
        heapq.heapify(self._heap)

    def snapshot(self) -> tuple[Alert, ...]:
        """Alerts ordered high to low priority, most recent first within a priority."""
        ordered = sorted(self._entries.values(), key=lambda e: (-e.alert.priority.rank, -e.seq))
        return tuple(e.alert for e in ordered)

    def get(self, message: str, priority: AlertPriority | str) -> Alert | None:
        entry = self._entries.get((AlertPriority(priority), message))
        return entry.alert if entry is not None else None

    def clear(self) -> None:
        self._entries.clear()
        self._heap.clear()
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Alert listener failed")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Alert]:
        return iter(self.snapshot())
