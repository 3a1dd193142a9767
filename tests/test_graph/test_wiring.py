import pytest

from hydrodash.common import Weather
from hydrodash.graph import build_stream_graph
from hydrodash.sources import DataSources
from hydrodash.stream import DamLevel, DirectLevel, SmoothedLevel, ids
from hydrodash.testing import FixedRandom, make_config


@pytest.fixture
def sources() -> DataSources:
    return DataSources()


def build(sources: DataSources, **overrides):
    return build_stream_graph(sources, make_config(**overrides), FixedRandom())


def publish_inputs(sources: DataSources, water=40.0, weather=Weather.CLOUDY, glacier=0.0, waste=10.0, use=20.0):
    sources.water.publish(water)
    sources.publish_weather(weather)
    sources.glacier.publish(glacier)
    sources.wastewater.publish(waste)
    sources.user_consumption.publish(use)


class TestTopology:
    def test_all_streams_present(self, sources):
        graph = build(sources)

        assert set(graph.streams) == {
            ids.WATER_INPUT,
            ids.WEATHER,
            ids.WASTEWATER_INPUT,
            ids.USER_CONSUMPTION_INPUT,
            ids.GLACIER_INPUT,
            ids.GLACIER,
            ids.DAM,
            ids.PURIFICATION,
            ids.POWER,
            ids.IRRIGATION,
            ids.WASTEWATER,
            ids.WATER_QUALITY,
            ids.FLOOD_RISK,
            ids.USER_CONSUMPTION,
            ids.DISTRIBUTION,
        }

    def test_dam_feeds_downstream_streams(self, sources):
        graph = build(sources)

        assert {ids.PURIFICATION, ids.POWER, ids.DISTRIBUTION, ids.FLOOD_RISK} <= graph.downstream(ids.DAM)
        assert {ids.IRRIGATION, ids.WATER_QUALITY, ids.USER_CONSUMPTION} <= graph.downstream(ids.DAM)

    def test_glacier_precedes_dam(self, sources):
        order = build(sources).order

        assert order.index(ids.GLACIER) < order.index(ids.DAM)
        assert order.index(ids.WATER_QUALITY) < order.index(ids.USER_CONSUMPTION)

    def test_default_dam_policy_is_direct(self, sources):
        dam = build(sources)[ids.DAM]

        assert isinstance(dam, DamLevel)
        assert isinstance(dam.policy, DirectLevel)
        assert dam.initial_level == 70.0

    def test_custom_dam_policy(self, sources):
        policy = SmoothedLevel(smoothing_factor=0.2)
        graph = build_stream_graph(sources, make_config(), FixedRandom(), dam_policy=policy)

        assert graph[ids.DAM].policy is policy

    def test_distribution_and_consumption_share_quota(self, sources):
        graph = build(sources, daily_quota=250.0)

        assert graph[ids.DISTRIBUTION].quota.quota == 250.0
        assert graph[ids.USER_CONSUMPTION].quota is graph[ids.DISTRIBUTION].quota


class TestPropagation:
    def test_dam_level_from_inputs(self, sources):
        graph = build(sources)
        publish_inputs(sources)

        graph.tick()

        assert graph.values[ids.DAM] == pytest.approx(40.0)
        assert graph.values[ids.FLOOD_RISK] == 0.0
        assert graph.values[ids.DISTRIBUTION] == pytest.approx(20.0)

    def test_purified_water_reaches_quality_and_consumption(self, sources):
        graph = build(sources)
        publish_inputs(sources)

        graph.tick()
        graph.tick()

        # purification: 40 * 0.65 / 5 = 5.2, wastewater: 10 * 0.75 = 7.5
        assert graph.values[ids.PURIFICATION] == pytest.approx(5.2)
        assert graph.values[ids.WASTEWATER] == pytest.approx(7.5)
        assert graph.values[ids.WATER_QUALITY] == pytest.approx(5.2 / 12.7 * 100)
        assert ids.USER_CONSUMPTION in graph.values

    def test_low_dam_produces_no_purified_water(self, sources):
        graph = build(sources)
        publish_inputs(sources, water=15.0, weather=Weather.SUNNY)

        for _ in range(10):
            graph.tick()

        assert graph.values[ids.DAM] <= 20.0
        assert ids.PURIFICATION not in graph.values
        assert ids.WATER_QUALITY not in graph.values

    def test_values_stay_in_range(self, sources):
        graph = build(sources)
        publish_inputs(sources, water=500.0, weather=Weather.STORMY, glacier=1_000_000.0)

        for _ in range(20):
            graph.tick()

        for stream_id in (ids.DAM, ids.WATER_QUALITY, ids.FLOOD_RISK):
            assert 0.0 <= graph.values[stream_id] <= 100.0
