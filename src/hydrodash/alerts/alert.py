from dataclasses import dataclass
from datetime import datetime

from hydrodash.common import AlertPriority

AlertKey = tuple[AlertPriority, str]


@dataclass(frozen=True, slots=True)
class Alert:
    id: str
    message: str
    timestamp: datetime
    priority: AlertPriority
    count: int = 1

    @property
    def key(self) -> AlertKey:
        return (self.priority, self.message)
