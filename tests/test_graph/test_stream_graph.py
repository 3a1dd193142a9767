import logging

import pytest

from hydrodash.graph import StreamGraph, UnknownInputError, ValidationError
from hydrodash.stream import StreamFaulted
from hydrodash.testing import FailingStream, FixedRandom, StubStream, make_graph


class TestAddStream:
    def test_duplicate_id_rejected(self):
        graph = StreamGraph(rng=FixedRandom())
        graph.add_stream(StubStream("a"))

        with pytest.raises(ValueError, match="Stream 'a' already exists"):
            graph.add_stream(StubStream("a"))

    def test_cannot_add_to_destroyed_graph(self):
        graph = make_graph(StubStream("a"))
        graph.destroy()

        with pytest.raises(RuntimeError, match="destroyed"):
            graph.add_stream(StubStream("b"))

    def test_contains_and_getitem(self):
        a = StubStream("a")
        graph = make_graph(a)

        assert "a" in graph
        assert "b" not in graph
        assert graph["a"] is a


class TestValidate:
    def test_unknown_input(self):
        graph = StreamGraph(rng=FixedRandom())
        graph.add_stream(StubStream("b", upstream=("a",)))

        with pytest.raises(UnknownInputError) as exc_info:
            graph.validate()

        assert exc_info.value.stream_id == "b"
        assert exc_info.value.missing == frozenset({"a"})

    def test_cycle_detected(self):
        graph = StreamGraph(rng=FixedRandom())
        graph.add_stream(StubStream("a", upstream=("b",)))
        graph.add_stream(StubStream("b", upstream=("a",)))

        with pytest.raises(ValidationError, match="cycle"):
            graph.validate()

    def test_order_is_topological(self):
        graph = make_graph(
            StubStream("c", upstream=("b",)),
            StubStream("b", upstream=("a",)),
            StubStream("a"),
        )

        assert graph.order == ["a", "b", "c"]

    def test_upstream_and_downstream(self):
        graph = make_graph(
            StubStream("a"),
            StubStream("b", upstream=("a",)),
            StubStream("c", upstream=("b",)),
            StubStream("d"),
        )

        assert graph.upstream("c") == {"a", "b"}
        assert graph.downstream("a") == {"b", "c"}
        assert graph.downstream("d") == set()


class TestTick:
    def test_tick_publishes_values(self):
        a = StubStream("a")
        graph = make_graph(a)
        a.push(1.0)

        tick = graph.tick()

        assert tick.index == 1
        assert graph.values == {"a": 1.0}
        assert graph.tick_count == 1

    def test_seconds_and_dt(self):
        graph = make_graph(StubStream("a"))

        first = graph.tick(seconds=2.0)
        second = graph.tick(seconds=5.0)

        assert (first.seconds, first.dt) == (2.0, 2.0)
        assert (second.seconds, second.dt) == (5.0, 3.0)

    def test_downstream_sees_upstream_emission_in_same_tick(self):
        seen = []

        class Recorder(StubStream):
            def update(self, ctx):
                seen.append((ctx.fired("a"), ctx.latest("a")))

        a = StubStream("a")
        graph = make_graph(Recorder("b", upstream=("a",)), a)
        a.push(3.0)

        graph.tick()
        graph.tick()

        assert seen == [(True, 3.0), (False, 3.0)]

    def test_failing_stream_is_isolated(self, caplog):
        a = StubStream("a")
        b = StubStream("b")
        failing = FailingStream("f", upstream=("a",), message="kaput")
        graph = make_graph(a, failing, b)
        a.push(1.0)
        b.push(2.0)

        with caplog.at_level(logging.ERROR, logger="hydrodash.graph.graph"):
            graph.tick()

        assert graph.values == {"a": 1.0, "b": 2.0}
        (event,) = failing.events_of_type(StreamFaulted)
        assert "kaput" in event.error
        assert "Error in stream 'f'" in caplog.text

    def test_failing_stream_keeps_last_value_visible(self):
        class FlakyStream(StubStream):
            fail: bool = False

            def update(self, ctx):
                if self.fail:
                    raise RuntimeError("flaky")
                super().update(ctx)

        flaky = FlakyStream("a")
        graph = make_graph(flaky)
        flaky.push(1.0)
        graph.tick()

        flaky.fail = True
        graph.tick()

        assert graph.values["a"] == 1.0

    def test_destroyed_graph_ignores_ticks(self):
        graph = make_graph(StubStream("a"))
        graph.destroy()

        assert graph.tick() is None
        assert graph.destroyed

    def test_performance_logs(self, caplog):
        graph = StreamGraph(rng=FixedRandom(), performance_logs=True)
        graph.add_stream(StubStream("a"))

        with caplog.at_level(logging.DEBUG, logger="hydrodash.graph.graph"):
            graph.tick()

        assert "a update:" in caplog.text


class TestSubscribe:
    def test_callback_receives_emissions(self):
        a = StubStream("a")
        graph = make_graph(a)
        received = []
        graph.subscribe("a", received.append)

        a.push(1.0)
        graph.tick()
        graph.tick()
        a.push(2.0)
        graph.tick()

        assert received == [1.0, 2.0]

    def test_unknown_stream(self):
        graph = make_graph(StubStream("a"))

        with pytest.raises(KeyError):
            graph.subscribe("missing", print)

    def test_unsubscribe(self):
        a = StubStream("a")
        graph = make_graph(a)
        received = []
        subscription = graph.subscribe("a", received.append)

        subscription.unsubscribe()
        a.push(1.0)
        graph.tick()

        assert received == []
        assert not subscription.active
        assert graph.subscriptions("a") == []

    def test_failing_subscriber_does_not_block_others(self):
        a = StubStream("a")
        graph = make_graph(a)
        received = []

        def broken(value):
            raise RuntimeError("subscriber failed")

        graph.subscribe("a", broken)
        graph.subscribe("a", received.append)
        a.push(1.0)
        graph.tick()

        assert received == [1.0]

    def test_destroy_deactivates_subscriptions(self):
        graph = make_graph(StubStream("a"))
        subscription = graph.subscribe("a", print)

        graph.destroy()

        assert not subscription.active
        assert graph.subscriptions() == []


class TestReset:
    def test_reset_clears_values_and_keeps_subscriptions(self):
        a = StubStream("a")
        graph = make_graph(a)
        graph.subscribe("a", print)
        a.push(1.0)
        graph.tick()

        graph.reset()

        assert dict(graph.values) == {}
        assert graph.tick_count == 0
        assert not a.has_value
        assert len(graph.subscriptions("a")) == 1
