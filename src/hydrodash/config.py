import difflib
import json
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Self

from hydrodash.common import Weather

_PERCENT_FIELDS = (
    "initial_water_level",
    "initial_water_quality",
    "initial_flood_risk",
    "initial_dam_water_level",
    "critical_water_level",
    "low_water_level",
    "high_water_level",
    "very_high_water_level",
    "low_water_quality",
    "medium_water_quality",
    "critical_water_quality",
    "high_flood_risk",
)

_WEATHER_TABLES = ("melt_coefficients", "weather_dam_factors")


class ConfigError(ValueError):
    """Raised when a configuration value is missing, unknown or out of range."""

    def __init__(self, path: str, message: str, hint: str | None = None):
        self.path = path
        self.message = message
        self.hint = hint
        text = f"Config error at {path}: {message}"
        if hint:
            text += f" (hint: {hint})"
        super().__init__(text)


def _weather_table(**values: float) -> dict[Weather, float]:
    return {Weather(name): value for name, value in values.items()}


@dataclass(frozen=True)
class SystemConfig:
    # initial values
    initial_water_level: float = 50.0
    initial_glacier_volume: float = 1_000_000.0
    initial_water_quality: float = 90.0
    initial_flood_risk: float = 10.0
    initial_purified_water: float = 0.0
    initial_power_generated: float = 0.0
    initial_water_distributed: float = 0.0
    initial_irrigation_water: float = 0.0
    initial_treated_wastewater: float = 0.0
    initial_user_consumption: float = 0.0
    initial_melt_rate: float = 0.0
    initial_water_flow: float = 0.0
    initial_dam_water_level: float = 70.0
    initial_dam_water_volume: float = 1_000_000.0
    initial_weather: Weather = Weather.SUNNY
    start_time: datetime = datetime(2024, 1, 1)  # wall-clock time at scheduler time 0

    # thresholds
    critical_water_level: float = 20.0
    low_water_level: float = 30.0
    high_water_level: float = 80.0
    very_high_water_level: float = 90.0
    low_water_quality: float = 60.0
    medium_water_quality: float = 70.0
    critical_water_quality: float = 50.0
    high_flood_risk: float = 80.0
    low_water_distribution: float = 50.0
    high_water_distribution: float = 500.0
    high_irrigation_water: float = 1000.0
    low_power_generation: float = 100.0
    high_power_generation: float = 1000.0
    high_user_consumption: float = 500.0
    high_glacier_water_flow: float = 50.0
    critical_glacier_water_flow: float = 80.0

    # timing (seconds)
    throttle_delay: float = 1.0
    weather_interval: float = 10.0
    tick_interval: float = 1.0
    simulation_interval: float = 2.0
    daily_quota_period: float = 86_400.0
    cache_sweep_interval: float = 10.0
    cache_max_age: float = 5.0

    # simulated inputs
    seasonal_factor_amplitude: float = 0.3
    seasonal_factor_period: float = 60.0 * 60.0 * 24.0 * 30.0
    base_water_input_min: float = 20.0
    base_water_input_max: float = 60.0
    wastewater_input_min: float = 5.0
    wastewater_input_max: float = 15.0
    user_consumption_input_min: float = 10.0
    user_consumption_input_max: float = 30.0

    # model coefficients
    melt_coefficients: Mapping[Weather, float] = field(
        default_factory=lambda: _weather_table(sunny=0.0001, cloudy=0.00005, rainy=0.00015, stormy=0.0002),
        hash=False,
    )
    water_loss_factor: float = 0.95
    weather_dam_factors: Mapping[Weather, float] = field(
        default_factory=lambda: _weather_table(sunny=0.9, cloudy=1.0, rainy=1.1, stormy=1.3),
        hash=False,
    )
    dam_random_variation: float = 10.0
    purification_release_steps: int = 5
    daily_quota: float = 1000.0

    # diagnostics
    enable_performance_logs: bool = False
    enable_water_source_logs: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int | float):
                continue
            if not math.isfinite(value) or value < 0:
                raise ConfigError(f.name, f"expected a finite non-negative number, got {value}")

        for name in _PERCENT_FIELDS:
            value = getattr(self, name)
            if value > 100:
                raise ConfigError(name, f"expected a percentage in [0, 100], got {value}")

        levels = (
            self.critical_water_level,
            self.low_water_level,
            self.high_water_level,
            self.very_high_water_level,
        )
        if list(levels) != sorted(levels):
            raise ConfigError(
                "critical_water_level",
                "water level thresholds must be ordered critical <= low <= high <= very_high",
            )

        for name in ("weather_interval", "tick_interval", "simulation_interval", "daily_quota_period"):
            if getattr(self, name) <= 0:
                raise ConfigError(name, "interval must be positive")

        if self.purification_release_steps < 1:
            raise ConfigError("purification_release_steps", "must be at least 1")

        for low, high in (
            ("base_water_input_min", "base_water_input_max"),
            ("wastewater_input_min", "wastewater_input_max"),
            ("user_consumption_input_min", "user_consumption_input_max"),
        ):
            if getattr(self, low) > getattr(self, high):
                raise ConfigError(low, f"must not exceed {high}")

        for name in _WEATHER_TABLES:
            table = getattr(self, name)
            missing = set(Weather) - set(table)
            if missing:
                raise ConfigError(name, f"missing weather entries: {sorted(w.value for w in missing)}")
            for weather, value in table.items():
                if not math.isfinite(value) or value < 0:
                    raise ConfigError(
                        f"{name}.{Weather(weather).value}", f"expected a finite non-negative number, got {value}"
                    )
            object.__setattr__(self, name, MappingProxyType({Weather(w): float(v) for w, v in table.items()}))

    @property
    def dam_capacity(self) -> float:
        return self.initial_dam_water_volume

    def with_overrides(self, **kwargs: Any) -> Self:
        """Return a copy with the given fields replaced (validated again)."""
        return self.from_mapping(kwargs, base=self)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], base: "SystemConfig | None" = None) -> Self:
        """Build a config from a plain mapping.

        Keys may be snake_case field names or the upper-case constant names
        (``CRITICAL_WATER_LEVEL``). Weather tables accept weather names as keys.
        """
        if not isinstance(raw, Mapping):
            raise ConfigError("config", f"expected a mapping, got {type(raw).__name__}")

        allowed = tuple(f.name for f in fields(cls))
        values: dict[str, Any] = {}
        for key, value in raw.items():
            name = str(key).lower()
            if name not in allowed:
                close = difflib.get_close_matches(name, allowed, n=1, cutoff=0.7)
                hint = f"did you mean '{close[0]}'?" if close else None
                raise ConfigError(str(key), "unknown configuration key", hint)
            if name in _WEATHER_TABLES:
                value = _parse_weather_table(name, value)
            elif name == "initial_weather":
                value = _parse_weather(name, value)
            elif name == "start_time":
                value = _parse_datetime(name, value)
            values[name] = value

        if base is None:
            return cls(**values)
        return replace(base, **values)

    @classmethod
    def from_json(cls, path: str | Path) -> Self:
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(str(path), f"failed to read JSON config: {e}") from e
        return cls.from_mapping(raw)


def _parse_datetime(path: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise ConfigError(path, f"expected an ISO 8601 timestamp, got '{value}'") from e


def _parse_weather(path: str, value: Any) -> Weather:
    try:
        return Weather(value)
    except ValueError as e:
        raise ConfigError(path, f"unknown weather '{value}'") from e


def _parse_weather_table(path: str, value: Any) -> dict[Weather, float]:
    if not isinstance(value, Mapping):
        raise ConfigError(path, f"expected a mapping of weather to number, got {type(value).__name__}")
    return {_parse_weather(f"{path}.{k}", k): float(v) for k, v in value.items()}


DEFAULT_CONFIG = SystemConfig()
