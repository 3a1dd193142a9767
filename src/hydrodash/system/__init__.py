from .cache import TimedCache
from .state import SystemState
from .status import overall_system_status
from .water_system import WaterSystem

__all__ = [
    "SystemState",
    "TimedCache",
    "WaterSystem",
    "overall_system_status",
]
