import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import networkx as nx

from hydrodash.protocols import RandomSource
from hydrodash.stream import BaseStream, TickContext
from hydrodash.time import Tick

from .validation import UnknownInputError, ValidationError

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


@dataclass(eq=False)
class Subscription:
    stream_id: str
    callback: Callback = field(repr=False)
    _graph: "StreamGraph | None" = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._graph is not None

    def unsubscribe(self) -> None:
        if self._graph is not None:
            self._graph._remove_subscription(self)
            self._graph = None


@dataclass
class StreamGraph:
    """Dependency graph of streams, evaluated in topological order.

    One :meth:`tick` updates every stream once, leaves before roots, so each
    stream only ever reads values its upstreams already published during the
    same tick. Subscribers are called synchronously right after the stream
    they follow emits. A stream (or subscriber) that raises is logged and
    skipped; its last good value stays visible downstream.
    """

    rng: RandomSource
    performance_logs: bool = False

    _streams: dict[str, BaseStream] = field(default_factory=dict, init=False, repr=False)
    _graph: nx.DiGraph = field(default_factory=nx.DiGraph, init=False, repr=False)
    _order: list[str] = field(default_factory=list, init=False, repr=False)
    _validated: bool = field(default=False, init=False, repr=False)
    _values: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _subscriptions: dict[str, list[Subscription]] = field(default_factory=dict, init=False, repr=False)
    _tick_index: int = field(default=0, init=False, repr=False)
    _last_seconds: float | None = field(default=None, init=False, repr=False)
    _destroyed: bool = field(default=False, init=False, repr=False)

    def add_stream(self, stream: BaseStream) -> BaseStream:
        if self._destroyed:
            raise RuntimeError("Cannot add streams to a destroyed graph")
        if stream.id in self._streams:
            raise ValueError(f"Stream '{stream.id}' already exists")
        self._streams[stream.id] = stream
        self._graph.add_node(stream.id)
        self._validated = False
        return stream

    def validate(self) -> None:
        for stream_id, stream in self._streams.items():
            missing = frozenset(stream.inputs) - self._streams.keys()
            if missing:
                raise UnknownInputError(stream_id, missing)

        self._graph.remove_edges_from(list(self._graph.edges))
        for stream_id, stream in self._streams.items():
            for upstream in stream.inputs:
                self._graph.add_edge(upstream, stream_id)

        if not nx.is_directed_acyclic_graph(self._graph):
            cycle = " -> ".join(u for u, _ in nx.find_cycle(self._graph))
            raise ValidationError(f"Stream graph contains a cycle: {cycle}")

        self._order = list(nx.topological_sort(self._graph))
        self._validated = True

    @property
    def streams(self) -> dict[str, BaseStream]:
        return self._streams

    @property
    def order(self) -> list[str]:
        if not self._validated:
            self.validate()
        return list(self._order)

    @property
    def values(self) -> MappingProxyType:
        return MappingProxyType(self._values)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def tick_count(self) -> int:
        return self._tick_index

    def upstream(self, stream_id: str) -> set[str]:
        if not self._validated:
            self.validate()
        return nx.ancestors(self._graph, stream_id)

    def downstream(self, stream_id: str) -> set[str]:
        if not self._validated:
            self.validate()
        return nx.descendants(self._graph, stream_id)

    def __getitem__(self, stream_id: str) -> BaseStream:
        return self._streams[stream_id]

    def __contains__(self, stream_id: object) -> bool:
        return stream_id in self._streams

    def subscribe(self, stream_id: str, callback: Callback) -> Subscription:
        if self._destroyed:
            raise RuntimeError("Cannot subscribe to a destroyed graph")
        if stream_id not in self._streams:
            raise KeyError(f"Stream '{stream_id}' not found in graph")
        subscription = Subscription(stream_id=stream_id, callback=callback, _graph=self)
        self._subscriptions.setdefault(stream_id, []).append(subscription)
        return subscription

    def subscriptions(self, stream_id: str | None = None) -> list[Subscription]:
        if stream_id is not None:
            return list(self._subscriptions.get(stream_id, []))
        return [s for subs in self._subscriptions.values() for s in subs]

    def _remove_subscription(self, subscription: Subscription) -> None:
        subs = self._subscriptions.get(subscription.stream_id, [])
        if subscription in subs:
            subs.remove(subscription)

    def tick(self, seconds: float | None = None) -> Tick | None:
        if self._destroyed:
            logger.debug("Tick requested on a destroyed graph, ignoring")
            return None
        if not self._validated:
            self.validate()

        self._tick_index += 1
        if seconds is None:
            seconds = float(self._tick_index)
        dt = seconds - self._last_seconds if self._last_seconds is not None else seconds
        self._last_seconds = seconds
        tick = Tick(index=self._tick_index, seconds=seconds, dt=dt)
        ctx = TickContext(tick=tick, rng=self.rng, values=self._values)

        for stream_id in self._order:
            stream = self._streams[stream_id]
            if not self._update(stream, ctx):
                continue
            if stream.emitted_at(tick.index):
                self._values[stream_id] = stream.value
                ctx.emitted.add(stream_id)
                self._notify(stream_id, stream.value)

        return tick

    def _update(self, stream: BaseStream, ctx: TickContext) -> bool:
        started = time.perf_counter() if self.performance_logs else 0.0
        try:
            stream.update(ctx)
        except Exception as e:
            logger.exception(f"Error in stream '{stream.id}' at tick {ctx.tick.index}, keeping last value")
            stream.fault(f"stream '{stream.id}'", e, ctx.tick)
            return False
        finally:
            if self.performance_logs:
                elapsed = (time.perf_counter() - started) * 1000
                logger.debug(f"{stream.id} update: {elapsed:.3f} ms")
        return True

    def _notify(self, stream_id: str, value: Any) -> None:
        for subscription in list(self._subscriptions.get(stream_id, [])):
            if not subscription.active:
                continue
            try:
                subscription.callback(value)
            except Exception:
                logger.exception(f"Subscriber of stream '{stream_id}' failed")

    def reset(self) -> None:
        """Reset every stream and the latest-value table, keeping subscriptions."""
        for stream in self._streams.values():
            stream.reset()
        self._values.clear()
        self._tick_index = 0
        self._last_seconds = None

    def destroy(self) -> None:
        """Unsubscribe everything. The graph ignores ticks afterwards."""
        for subscription in self.subscriptions():
            subscription._graph = None
        self._subscriptions.clear()
        self._destroyed = True
        logger.debug(f"Stream graph destroyed ({len(self._streams)} streams)")
