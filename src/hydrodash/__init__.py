"""
hydrodash

Simulated water-management dashboard model: a dam fed by water input and
glacier melt, with purification, power, irrigation, wastewater treatment,
water quality, flood risk, user consumption and distribution derived from it,
plus a deduplicating alert queue.

The subsystems are streams in a dependency graph that is evaluated in
topological order on every tick of a cooperative scheduler.

Classes:
    WaterSystem: Owns the shared state and drives the whole simulation.
    SystemConfig: Tunable constants (initial values, thresholds, timing).
    SystemState: The mutable state record read by dashboards.
    StreamGraph: Dependency graph of streams evaluated in topological order.
    AlertQueue: Bounded priority queue of deduplicated alerts.
    Scheduler: Virtual-time timer scheduler.
"""

from .alerts import Alert, AlertQueue, AlertRule, AlertRuleEngine, default_rules
from .common import AlertPriority, Mode, SystemStatus, Weather
from .config import ConfigError, SystemConfig
from .graph import StreamGraph, ValidationError, build_stream_graph
from .rng import NumpyRandom
from .scheduler import Scheduler
from .sources import DataSources, InputChannel
from .system import SystemState, WaterSystem, overall_system_status

__all__ = [
    "Alert",
    "AlertPriority",
    "AlertQueue",
    "AlertRule",
    "AlertRuleEngine",
    "ConfigError",
    "DataSources",
    "InputChannel",
    "Mode",
    "NumpyRandom",
    "Scheduler",
    "StreamGraph",
    "SystemConfig",
    "SystemState",
    "SystemStatus",
    "ValidationError",
    "Weather",
    "WaterSystem",
    "build_stream_graph",
    "default_rules",
    "overall_system_status",
]

__version__ = "0.1.0"
