from dataclasses import asdict, dataclass
from typing import Any, Self

from hydrodash.common import Weather
from hydrodash.config import SystemConfig


@dataclass
class SystemState:
    water_level: float
    dam_water_volume: float
    glacier_volume: float
    melt_rate: float
    water_flow: float
    purified_water: float
    power_generated: float
    water_distributed: float
    irrigation_water: float
    treated_wastewater: float
    water_quality: float
    flood_risk: float
    user_consumption: float
    weather_condition: Weather
    is_auto_mode: bool = True

    @classmethod
    def initial(cls, config: SystemConfig) -> Self:
        level = config.initial_dam_water_level
        return cls(
            water_level=level,
            dam_water_volume=level / 100 * config.dam_capacity,
            glacier_volume=config.initial_glacier_volume,
            melt_rate=config.initial_melt_rate,
            water_flow=config.initial_water_flow,
            purified_water=config.initial_purified_water,
            power_generated=config.initial_power_generated,
            water_distributed=config.initial_water_distributed,
            irrigation_water=config.initial_irrigation_water,
            treated_wastewater=config.initial_treated_wastewater,
            water_quality=config.initial_water_quality,
            flood_risk=config.initial_flood_risk,
            user_consumption=config.initial_user_consumption,
            weather_condition=config.initial_weather,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["weather_condition"] = self.weather_condition.value
        return data
