from .alert import Alert, AlertKey
from .queue import MAX_ALERTS, AlertQueue
from .rules import AlertRule, AlertRuleEngine, default_rules

__all__ = [
    "MAX_ALERTS",
    "Alert",
    "AlertKey",
    "AlertQueue",
    "AlertRule",
    "AlertRuleEngine",
    "default_rules",
]
