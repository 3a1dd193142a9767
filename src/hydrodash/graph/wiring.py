from hydrodash.config import SystemConfig
from hydrodash.protocols import RandomSource
from hydrodash.sources import DataSources
from hydrodash.stream import (
    ChannelStream,
    DailyQuota,
    DamLevel,
    Distribution,
    FloodRisk,
    GlacierMelt,
    Irrigation,
    LevelPolicy,
    PowerPlant,
    Purification,
    UserConsumption,
    WastewaterTreatment,
    WaterQuality,
    ids,
)

from .graph import StreamGraph


def build_stream_graph(
    sources: DataSources,
    config: SystemConfig,
    rng: RandomSource,
    dam_policy: LevelPolicy | None = None,
) -> StreamGraph:
    """Wire the water-management streams onto a fresh graph.

    Inputs (channels) feed glacier and dam; the dam feeds purification,
    power, distribution and flood risk; purification feeds irrigation and
    quality; wastewater feeds quality; quality feeds user consumption.
    """
    graph = StreamGraph(rng=rng, performance_logs=config.enable_performance_logs)
    quota = DailyQuota(quota=config.daily_quota, period=config.daily_quota_period)

    graph.add_stream(ChannelStream(ids.WATER_INPUT, channel=sources.water))
    graph.add_stream(ChannelStream(ids.WEATHER, channel=sources.weather, distinct=True))
    graph.add_stream(ChannelStream(ids.WASTEWATER_INPUT, channel=sources.wastewater))
    graph.add_stream(ChannelStream(ids.USER_CONSUMPTION_INPUT, channel=sources.user_consumption))
    graph.add_stream(ChannelStream(ids.GLACIER_INPUT, channel=sources.glacier))

    graph.add_stream(
        GlacierMelt(
            ids.GLACIER,
            melt_coefficients=config.melt_coefficients,
            water_loss_factor=config.water_loss_factor,
        )
    )
    dam_kwargs = {} if dam_policy is None else {"policy": dam_policy}
    graph.add_stream(
        DamLevel(
            ids.DAM,
            weather_factors=config.weather_dam_factors,
            variation=config.dam_random_variation,
            initial_level=config.initial_dam_water_level,
            **dam_kwargs,
        )
    )
    graph.add_stream(Purification(ids.PURIFICATION, steps=config.purification_release_steps))
    graph.add_stream(PowerPlant(ids.POWER))
    graph.add_stream(Distribution(ids.DISTRIBUTION, quota=quota))
    graph.add_stream(FloodRisk(ids.FLOOD_RISK))
    graph.add_stream(Irrigation(ids.IRRIGATION))
    graph.add_stream(WastewaterTreatment(ids.WASTEWATER))
    graph.add_stream(WaterQuality(ids.WATER_QUALITY))
    graph.add_stream(UserConsumption(ids.USER_CONSUMPTION, quota=quota))

    graph.validate()
    return graph
