from . import ids
from .base import BaseStream, TickContext
from .channel import ChannelStream
from .consumption import UserConsumption
from .dam import DamLevel
from .distribution import Distribution
from .events import (
    INACTIVE,
    NOT_READY,
    UNCHANGED,
    ZERO_DENOMINATOR,
    EmissionSkipped,
    StreamEvent,
    StreamFaulted,
    ValueEmitted,
)
from .flood import FloodRisk
from .glacier import GlacierMelt, GlacierReading
from .irrigation import Irrigation
from .power import PowerPlant
from .purification import Purification
from .quality import WaterQuality
from .strategies import DailyQuota, DirectLevel, EfficiencyRange, LevelPolicy, SmoothedLevel
from .wastewater import WastewaterTreatment
from .weather import WeatherSimulator

__all__ = [
    "ids",
    # Events
    "EmissionSkipped",
    "INACTIVE",
    "NOT_READY",
    "StreamEvent",
    "StreamFaulted",
    "UNCHANGED",
    "ValueEmitted",
    "ZERO_DENOMINATOR",
    # Strategies
    "DailyQuota",
    "DirectLevel",
    "EfficiencyRange",
    "LevelPolicy",
    "SmoothedLevel",
    # Base
    "BaseStream",
    "TickContext",
    # Streams
    "ChannelStream",
    "DamLevel",
    "Distribution",
    "FloodRisk",
    "GlacierMelt",
    "GlacierReading",
    "Irrigation",
    "PowerPlant",
    "Purification",
    "UserConsumption",
    "WastewaterTreatment",
    "WaterQuality",
    "WeatherSimulator",
]
