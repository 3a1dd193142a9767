import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from hydrodash.alerts import Alert, AlertQueue, AlertRule, AlertRuleEngine, default_rules
from hydrodash.common import AlertPriority, Mode, SystemStatus, clamp
from hydrodash.config import SystemConfig
from hydrodash.graph import StreamGraph, Subscription, build_stream_graph
from hydrodash.logbook import StateHistory, WaterSourceLog
from hydrodash.protocols import RandomSource
from hydrodash.rng import NumpyRandom, uniform
from hydrodash.scheduler import Scheduler, Timer
from hydrodash.sources import DataSources
from hydrodash.stream import DamLevel, GlacierReading, LevelPolicy, WeatherSimulator, ids

from .cache import TimedCache
from .state import SystemState
from .status import overall_system_status

logger = logging.getLogger(__name__)

StateListener = Callable[[str, Any], None]

# stream id -> state field, for streams whose value is copied as is
_STATE_FIELDS = {
    ids.WEATHER: "weather_condition",
    ids.PURIFICATION: "purified_water",
    ids.POWER: "power_generated",
    ids.IRRIGATION: "irrigation_water",
    ids.WASTEWATER: "treated_wastewater",
    ids.WATER_QUALITY: "water_quality",
    ids.FLOOD_RISK: "flood_risk",
    ids.USER_CONSUMPTION: "user_consumption",
    ids.DISTRIBUTION: "water_distributed",
}


@dataclass
class WaterSystem:
    """Simulated water-management system.

    Owns the shared :class:`SystemState`, the input channels, the stream
    graph and the alert queue, and drives them from scheduler timers: the
    weather changes every ``weather_interval``, simulated inputs arrive every
    ``simulation_interval`` while in automatic mode, and the graph ticks
    every ``tick_interval``. The state is only written by the graph
    subscriptions set up here; callers read snapshots and use the control
    methods.

    Example:
        system = WaterSystem(rng=NumpyRandom(seed=1))
        system.start()
        system.advance(60)
        system.state.water_level
    """

    config: SystemConfig = field(default_factory=SystemConfig)
    rng: RandomSource = field(default_factory=NumpyRandom)
    scheduler: Scheduler = field(default_factory=Scheduler)
    dam_policy: LevelPolicy | None = None
    alert_queue: AlertQueue | None = None
    rules: tuple[AlertRule, ...] | None = None

    _state: SystemState = field(init=False, repr=False)
    _mode: Mode = field(default=Mode.AUTOMATIC, init=False)
    _manual_level: float = field(init=False, repr=False)
    _sources: DataSources | None = field(default=None, init=False, repr=False)
    _graph: StreamGraph | None = field(default=None, init=False, repr=False)
    _weather: WeatherSimulator | None = field(default=None, init=False, repr=False)
    _engine: AlertRuleEngine | None = field(default=None, init=False, repr=False)
    _subscriptions: list[Subscription] = field(default_factory=list, init=False, repr=False)
    _timers: dict[str, Timer] = field(default_factory=dict, init=False, repr=False)
    _listeners: list[StateListener] = field(default_factory=list, init=False, repr=False)
    _cache: TimedCache = field(init=False, repr=False)
    _source_log: WaterSourceLog = field(default_factory=WaterSourceLog, init=False, repr=False)
    _history: StateHistory = field(default_factory=StateHistory, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)
    _destroyed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.rules is None:
            self.rules = default_rules(self.config)
        if self.alert_queue is None:
            self.alert_queue = AlertQueue(now=self.simulated_datetime)
        self._state = SystemState.initial(self.config)
        self._manual_level = self.config.initial_water_level
        self._cache = TimedCache(
            clock=self.scheduler,
            ttl=self.config.throttle_delay,
            max_age=self.config.cache_max_age,
        )

    # --- lifecycle ---

    def start(self) -> None:
        """Build the stream graph and start the timers (no-op when running)."""
        if self._destroyed:
            logger.warning("start() called on a destroyed water system, ignoring")
            return
        if self._running:
            return
        self._build()
        self._running = True
        logger.info("Water system started")

    def reset_system(self) -> None:
        """Tear everything down and rebuild from the initial configuration."""
        if self._destroyed:
            logger.warning("reset_system() called on a destroyed water system, ignoring")
            return
        self._teardown()
        self._state = SystemState.initial(self.config)
        self._mode = Mode.AUTOMATIC
        self._manual_level = self.config.initial_water_level
        self._cache.invalidate()
        self.alert_queue.clear()
        self._source_log.clear()
        self._history.clear()
        self._build()
        self._running = True
        self._notify("*", None)
        logger.info("Water system fully reset")

    def destroy(self) -> None:
        """Stop for good: cancel timers and drop every subscription."""
        if self._destroyed:
            return
        self._teardown()
        self._cache.invalidate()
        self._listeners.clear()
        self._destroyed = True
        logger.info("Water system destroyed")

    def __enter__(self) -> "WaterSystem":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    def _build(self) -> None:
        self._sources = DataSources()
        self._graph = build_stream_graph(self._sources, self.config, self.rng, self.dam_policy)
        self._weather = WeatherSimulator(channel=self._sources.weather, rng=self.rng)

        self._subscriptions.append(self._graph.subscribe(ids.DAM, self._on_dam_level))
        self._subscriptions.append(self._graph.subscribe(ids.GLACIER, self._on_glacier))
        for stream_id, state_field in _STATE_FIELDS.items():
            self._subscriptions.append(
                self._graph.subscribe(stream_id, lambda value, f=state_field: self._write(f, value))
            )

        self._engine = AlertRuleEngine(queue=self.alert_queue, rules=self.rules)
        self._engine.attach(self._graph)

        self._prime_inputs()
        self._timers["weather"] = self.scheduler.every(self.config.weather_interval, self._weather.step, "weather")
        if self._mode is Mode.MANUAL:
            self._sources.water.freeze()
            self._graph[ids.DAM].hold(self._manual_level)
        else:
            self._start_simulation()
        self._timers["tick"] = self.scheduler.every(self.config.tick_interval, self._tick, "tick")
        self._timers["cache_sweep"] = self.scheduler.every(
            self.config.cache_sweep_interval, self._cache.sweep, "cache_sweep"
        )

    def _teardown(self) -> None:
        for timer in self._timers.values():
            self.scheduler.cancel(timer)
        self._timers.clear()
        if self._engine is not None:
            self._engine.detach()
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        if self._graph is not None:
            self._graph.destroy()
        if self._sources is not None:
            self._sources.dispose()
        self._engine = None
        self._graph = None
        self._sources = None
        self._weather = None
        self._running = False

    def _prime_inputs(self) -> None:
        sources = self._sources
        self._weather.set(self.config.initial_weather)
        sources.wastewater.publish(self.config.initial_treated_wastewater)
        sources.user_consumption.publish(self.config.initial_user_consumption)
        sources.glacier.publish(self.config.initial_glacier_volume)
        sources.water.publish(self._water_input())
        self._weather.step()

    # --- timers ---

    def _start_simulation(self) -> None:
        if "simulation" not in self._timers:
            self._timers["simulation"] = self.scheduler.every(
                self.config.simulation_interval, self._simulate_inputs, "simulation"
            )

    def _stop_simulation(self) -> None:
        self.scheduler.cancel(self._timers.pop("simulation", None))

    def _water_input(self) -> float:
        cfg = self.config
        base = uniform(self.rng, cfg.base_water_input_min, cfg.base_water_input_max)
        seasonal = 1 + cfg.seasonal_factor_amplitude * math.sin(self.scheduler.now() / cfg.seasonal_factor_period)
        return base * seasonal

    def _simulate_inputs(self) -> None:
        if self._mode is not Mode.AUTOMATIC or self._sources is None:
            return
        cfg = self.config
        self._sources.water.publish(self._water_input())
        self._sources.wastewater.publish(uniform(self.rng, cfg.wastewater_input_min, cfg.wastewater_input_max))
        self._sources.user_consumption.publish(
            uniform(self.rng, cfg.user_consumption_input_min, cfg.user_consumption_input_max)
        )

    def _tick(self) -> None:
        if self._graph is None:
            return
        tick = self._graph.tick(self.scheduler.now())
        if tick is not None:
            self._history.record(tick.seconds, self._state.to_dict())

    def advance(self, seconds: float) -> None:
        """Advance simulated time, firing every timer that becomes due."""
        self.scheduler.advance(seconds)

    async def run(self, duration: float | None = None) -> None:
        """Run the timers in real time on the asyncio event loop."""
        self.start()
        await self.scheduler.run(duration)

    # --- state wiring ---

    def _write(self, state_field: str, value: Any) -> bool:
        if getattr(self._state, state_field) == value:
            return False
        setattr(self._state, state_field, value)
        if state_field == "water_level":
            self._write("dam_water_volume", value / 100 * self.config.dam_capacity)
        self._notify(state_field, value)
        return True

    def _on_dam_level(self, level: float) -> None:
        self._write("water_level", level)
        if self.config.enable_water_source_logs:
            self._source_log.source_logger("Dam", self.scheduler.now)(level)

    def _on_glacier(self, reading: GlacierReading) -> None:
        self._write("glacier_volume", reading.volume)
        self._write("melt_rate", reading.melt_rate)
        self._write("water_flow", reading.water_flow)
        if self.config.enable_water_source_logs:
            self._source_log.source_logger("Glacier", self.scheduler.now)(reading.water_flow)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(field, value)`` after every effective state write.

        A full reset is reported once as ``("*", None)``.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state_field: str, value: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(state_field, value)
            except Exception:
                logger.exception(f"State listener failed on '{state_field}'")

    # --- controls ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_manual_mode(self) -> bool:
        return self._mode is Mode.MANUAL

    def _dam(self) -> DamLevel | None:
        if self._graph is None:
            return None
        return self._graph[ids.DAM]

    def set_water_level(self, level: float) -> bool:
        """Set the dam level by hand. Only effective in manual mode."""
        if self._mode is not Mode.MANUAL:
            logger.warning(f"set_water_level({level}) ignored: system is in automatic mode")
            return False
        try:
            level = float(level)
        except (TypeError, ValueError):
            logger.warning(f"set_water_level({level!r}) ignored: not a number")
            return False
        if not math.isfinite(level):
            logger.warning(f"set_water_level({level}) ignored: not a finite number")
            return False

        level = clamp(level)
        self._manual_level = level
        dam = self._dam()
        if dam is not None:
            dam.hold(level)
        self._write("water_level", level)
        return True

    def toggle_manual_mode(self) -> Mode:
        """Switch between automatic and manual mode.

        Manual mode pauses the simulated inputs, freezes the water input
        channel and holds the dam at the current level until
        :meth:`set_water_level` changes it.
        """
        if self._destroyed:
            logger.warning("toggle_manual_mode() called on a destroyed water system, ignoring")
            return self._mode

        self._mode = self._mode.toggled()
        dam = self._dam()
        if self._mode is Mode.MANUAL:
            self._stop_simulation()
            self._manual_level = self._state.water_level
            if self._sources is not None:
                self._sources.water.freeze()
            if dam is not None:
                dam.hold(self._manual_level)
        else:
            if self._sources is not None:
                self._sources.water.unfreeze()
            if dam is not None:
                dam.release()
            if self._running:
                self._start_simulation()
        self._write("is_auto_mode", self._mode is Mode.AUTOMATIC)
        logger.info(f"Switched to {self._mode.value} mode")
        return self._mode

    def toggle_auto_mode(self) -> Mode:
        """Same transition as :meth:`toggle_manual_mode`, named from the automatic side."""
        return self.toggle_manual_mode()

    def add_alert(self, message: str, priority: AlertPriority | str) -> Alert | None:
        try:
            priority = AlertPriority(priority)
        except ValueError:
            logger.warning(f"add_alert({message!r}, {priority!r}) ignored: unknown priority")
            return None
        return self.alert_queue.add(message, priority)

    # --- readouts ---

    def simulated_datetime(self) -> datetime:
        """Scheduler time as a timestamp, counted from ``config.start_time``."""
        return self.config.start_time + timedelta(seconds=self.scheduler.now())

    @property
    def state(self) -> SystemState:
        return replace(self._state)

    @property
    def alerts(self) -> tuple[Alert, ...]:
        return self.alert_queue.snapshot()

    @property
    def sources(self) -> DataSources | None:
        return self._sources

    @property
    def graph(self) -> StreamGraph | None:
        return self._graph

    @property
    def running(self) -> bool:
        return self._running

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def current_water_level(self) -> float:
        return self._manual_level if self._mode is Mode.MANUAL else self._state.water_level

    @property
    def total_water_processed(self) -> float:
        return self._cache.get_or_compute(
            "total_water_processed",
            lambda: self._state.purified_water + self._state.water_distributed,
        )

    @property
    def system_efficiency(self) -> float:
        def compute() -> float:
            processed = self.total_water_processed
            if processed == 0:
                return 0.0
            return self._state.purified_water / processed * 100

        return self._cache.get_or_compute("system_efficiency", compute)

    @property
    def overall_system_status(self) -> SystemStatus:
        return overall_system_status(self._state.water_level, self._state.water_quality, self.config)

    @property
    def water_source_logs(self) -> WaterSourceLog:
        return self._source_log

    def history(self) -> pd.DataFrame:
        """Per-tick state snapshots indexed by simulated seconds."""
        return self._history.to_frame()
