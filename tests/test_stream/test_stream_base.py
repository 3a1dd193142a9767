import pytest

from hydrodash.sources import InputChannel
from hydrodash.stream import (
    UNCHANGED,
    BaseStream,
    ChannelStream,
    EmissionSkipped,
    PowerPlant,
    StreamFaulted,
    ValueEmitted,
)
from hydrodash.stream.base import EVENT_HISTORY
from hydrodash.testing import StubStream, make_ctx
from hydrodash.time import Tick


class TestEmit:
    def test_emit_records_event(self):
        stream = StubStream("a")

        stream.emit(1.0, Tick(index=3))

        assert stream.value == 1.0
        assert stream.has_value
        assert stream.emitted_at(3)
        assert stream.events_at(3) == [ValueEmitted(value=1.0, t=3)]

    def test_distinct_suppresses_repeated_value(self):
        stream = StubStream("a", distinct=True)

        assert stream.emit(1.0, Tick(index=1))
        assert not stream.emit(1.0, Tick(index=2))

        assert not stream.emitted_at(2)
        assert stream.events_of_type(EmissionSkipped) == [EmissionSkipped(reason=UNCHANGED, t=2)]

    def test_non_distinct_republishes(self):
        stream = StubStream("a")

        stream.emit(1.0, Tick(index=1))
        stream.emit(1.0, Tick(index=2))

        assert len(stream.events_of_type(ValueEmitted)) == 2

    def test_fault_records_error(self):
        stream = StubStream("a")

        stream.fault("update", RuntimeError("boom"), Tick(index=1))

        (event,) = stream.events_of_type(StreamFaulted)
        assert event.context == "update"
        assert "boom" in event.error

    def test_event_history_is_bounded(self):
        stream = StubStream("a")

        for i in range(EVENT_HISTORY + 10):
            stream.emit(float(i), Tick(index=i))

        assert len(stream.events) == EVENT_HISTORY

    def test_base_update_is_abstract(self):
        with pytest.raises(NotImplementedError):
            BaseStream("a").update(make_ctx())

    def test_reset(self):
        stream = StubStream("a")
        stream.emit(1.0, Tick(index=1))

        stream.reset()

        assert stream.value is None
        assert not stream.has_value
        assert not stream.emitted_at(1)

    def test_strategies_lists_strategy_fields(self):
        power = PowerPlant("power")

        assert set(power.strategies()) == {"efficiency"}


class TestChannelStream:
    def test_emits_new_channel_values(self):
        channel = InputChannel("water")
        stream = ChannelStream("water_input", channel=channel)

        channel.publish(40.0)
        stream.update(make_ctx(index=1))
        stream.update(make_ctx(index=2))

        assert stream.value == 40.0
        assert stream.emitted_at(1) is True
        assert stream.emitted_at(2) is False

    def test_publish_of_equal_value_is_new_arrival(self):
        channel = InputChannel("water")
        stream = ChannelStream("water_input", channel=channel)

        channel.publish(40.0)
        stream.update(make_ctx(index=1))
        channel.publish(40.0)
        stream.update(make_ctx(index=2))

        assert stream.emitted_at(2)

    def test_distinct_channel_stream_drops_repeats(self):
        channel = InputChannel("weather")
        stream = ChannelStream("weather", channel=channel, distinct=True)

        channel.publish("sunny")
        stream.update(make_ctx(index=1))
        channel.publish("sunny")
        stream.update(make_ctx(index=2))

        assert not stream.emitted_at(2)

    def test_silent_before_first_publish(self):
        stream = ChannelStream("water_input", channel=InputChannel("water"))

        stream.update(make_ctx())

        assert not stream.has_value
        assert len(stream.events) == 0
