import logging
import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from hydrodash.common import AlertPriority, Weather
from hydrodash.config import SystemConfig
from hydrodash.stream import ids

from .alert import Alert
from .queue import AlertQueue

if TYPE_CHECKING:
    from hydrodash.graph import StreamGraph, Subscription

logger = logging.getLogger(__name__)

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
}


@dataclass(frozen=True, slots=True)
class AlertRule:
    """Threshold check on one stream producing a fixed alert.

    ``attribute`` selects a field of structured values (e.g. the water flow
    of a glacier reading) before comparing.
    """

    source: str
    op: str
    limit: Any
    message: str
    priority: AlertPriority
    attribute: str | None = None

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unknown operator '{self.op}', expected one of {sorted(_OPERATORS)}")

    def matches(self, value: Any) -> bool:
        if self.attribute is not None:
            value = getattr(value, self.attribute)
        return _OPERATORS[self.op](value, self.limit)


def default_rules(config: SystemConfig) -> tuple[AlertRule, ...]:
    high, medium, low = AlertPriority.HIGH, AlertPriority.MEDIUM, AlertPriority.LOW
    return (
        AlertRule(ids.DAM, ">=", config.very_high_water_level, "Dam at critical level", high),
        AlertRule(ids.DAM, ">=", config.high_water_level, "Dam at high level", medium),
        AlertRule(ids.DAM, "<=", config.critical_water_level, "Dam at very low level", high),
        AlertRule(ids.DAM, "<=", config.low_water_level, "Dam at low level", medium),
        AlertRule(ids.WEATHER, "==", Weather.STORMY, "Storm conditions", low),
        AlertRule(ids.WATER_QUALITY, "<", config.low_water_quality, "Low water quality", high),
        AlertRule(ids.FLOOD_RISK, ">", config.high_flood_risk, "High flood risk", high),
        AlertRule(ids.DISTRIBUTION, "<", config.low_water_distribution, "Low water distribution", medium),
        AlertRule(ids.DISTRIBUTION, ">", config.high_water_distribution, "High water distribution", low),
        AlertRule(ids.IRRIGATION, ">", config.high_irrigation_water, "High irrigation water use", medium),
        AlertRule(ids.POWER, "<", config.low_power_generation, "Low power generation", medium),
        AlertRule(ids.POWER, ">", config.high_power_generation, "High power generation", low),
        AlertRule(ids.USER_CONSUMPTION, ">", config.high_user_consumption, "High user consumption", medium),
        AlertRule(
            ids.GLACIER, ">", config.critical_glacier_water_flow, "Critical glacier water flow", high, "water_flow"
        ),
        AlertRule(ids.GLACIER, ">", config.high_glacier_water_flow, "High glacier water flow", medium, "water_flow"),
    )


@dataclass
class AlertRuleEngine:
    """Evaluates every rule of a stream each time that stream emits.

    Rules are independent: all that match fire, each calling
    :meth:`AlertQueue.add`.
    """

    queue: AlertQueue
    rules: tuple[AlertRule, ...] = ()
    _subscriptions: list["Subscription"] = field(default_factory=list, init=False, repr=False)

    @property
    def sources(self) -> set[str]:
        return {rule.source for rule in self.rules}

    def rules_for(self, source: str) -> list[AlertRule]:
        return [rule for rule in self.rules if rule.source == source]

    def evaluate(self, source: str, value: Any) -> list[Alert]:
        fired: list[Alert] = []
        for rule in self.rules_for(source):
            try:
                matched = rule.matches(value)
            except Exception:
                logger.exception(f"Alert rule '{rule.message}' failed on {source}={value!r}")
                continue
            if matched:
                fired.append(self.queue.add(rule.message, rule.priority))
        return fired

    def evaluate_all(self, values: Iterable[tuple[str, Any]]) -> list[Alert]:
        fired: list[Alert] = []
        for source, value in values:
            fired.extend(self.evaluate(source, value))
        return fired

    def attach(self, graph: "StreamGraph") -> list["Subscription"]:
        for source in sorted(self.sources):
            if source not in graph:
                logger.warning(f"Alert rules reference unknown stream '{source}', skipping")
                continue
            self._subscriptions.append(graph.subscribe(source, lambda value, s=source: self.evaluate(s, value)))
        return list(self._subscriptions)

    def detach(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
