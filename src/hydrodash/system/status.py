from hydrodash.common import SystemStatus
from hydrodash.config import SystemConfig


def overall_system_status(water_level: float, water_quality: float, config: SystemConfig) -> SystemStatus:
    """Classify the system from dam level and water quality.

    Critical when either value is below its critical threshold, concerning
    when the level is at or below the low threshold or quality is below the
    medium threshold, normal otherwise.
    """
    if water_level < config.critical_water_level or water_quality < config.critical_water_quality:
        return SystemStatus.CRITICAL
    if water_level <= config.low_water_level or water_quality < config.medium_water_quality:
        return SystemStatus.CONCERNING
    return SystemStatus.NORMAL
