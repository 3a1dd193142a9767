from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, TypeVar

from hydrodash.common import Strategy
from hydrodash.protocols import RandomSource
from hydrodash.time import Tick

from .events import UNCHANGED, EmissionSkipped, StreamEvent, StreamFaulted, ValueEmitted

EVENT_HISTORY = 2000

T = TypeVar("T", bound=StreamEvent)


@dataclass
class TickContext:
    """What a stream may read while the graph evaluates one tick.

    ``values`` holds the latest published value of every stream that has
    emitted at least once, ``emitted`` the ids that emitted during this tick.
    The graph updates both in topological order, so upstream values are
    current by the time a stream reads them.
    """

    tick: Tick
    rng: RandomSource
    values: Mapping[str, Any] = field(default_factory=dict)
    emitted: set[str] = field(default_factory=set)

    def latest(self, stream_id: str, default: Any = None) -> Any:
        return self.values.get(stream_id, default)

    def fired(self, stream_id: str) -> bool:
        return stream_id in self.emitted

    def ready(self, *stream_ids: str) -> bool:
        return all(sid in self.values for sid in stream_ids)


@dataclass
class BaseStream:
    id: str
    distinct: bool = field(default=False, kw_only=True)
    events: deque[StreamEvent] = field(default_factory=lambda: deque(maxlen=EVENT_HISTORY), init=False, repr=False)
    _value: Any = field(default=None, init=False, repr=False)
    _has_value: bool = field(default=False, init=False, repr=False)
    _last_emitted: int | None = field(default=None, init=False, repr=False)

    @property
    def inputs(self) -> tuple[str, ...]:
        """Ids of the upstream streams this stream reads."""
        return ()

    @property
    def value(self) -> Any:
        return self._value

    @property
    def has_value(self) -> bool:
        return self._has_value

    def emitted_at(self, t: int) -> bool:
        return self._last_emitted is not None and self._last_emitted == int(t)

    def record(self, event: StreamEvent) -> None:
        self.events.append(event)

    def events_at(self, t: int) -> list[StreamEvent]:
        return [e for e in self.events if e.t == t]

    def events_of_type(self, event_type: type[T]) -> list[T]:
        return [e for e in self.events if isinstance(e, event_type)]

    def emit(self, value: Any, t: Tick) -> bool:
        if self.distinct and self._has_value and value == self._value:
            self.skip(UNCHANGED, t)
            return False
        self._value = value
        self._has_value = True
        self._last_emitted = t.index
        self.record(ValueEmitted(value=value, t=t.index))
        return True

    def skip(self, reason: str, t: Tick) -> None:
        self.record(EmissionSkipped(reason=reason, t=t.index))

    def fault(self, context: str, error: BaseException, t: Tick) -> None:
        self.record(StreamFaulted(context=context, error=repr(error), t=t.index))

    def update(self, ctx: TickContext) -> None:
        raise NotImplementedError("Subclasses must implement update()")

    def strategies(self) -> dict[str, Strategy]:
        """Return all Strategy-typed fields (tunable policies only)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if isinstance(getattr(self, f.name), Strategy)}

    def reset(self) -> None:
        """Forget the published value and recorded events.

        Subclasses carrying accumulated state should override, calling
        super().reset() first.
        """
        self.events.clear()
        self._value = None
        self._has_value = False
        self._last_emitted = None
