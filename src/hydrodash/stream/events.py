from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ValueEmitted:
    value: Any
    t: int  # tick index


@dataclass(frozen=True, slots=True)
class EmissionSkipped:
    reason: str
    t: int


@dataclass(frozen=True, slots=True)
class StreamFaulted:
    context: str
    error: str
    t: int


NOT_READY = "not_ready"
UNCHANGED = "unchanged"
INACTIVE = "inactive"
ZERO_DENOMINATOR = "zero_denominator"

StreamEvent = ValueEmitted | EmissionSkipped | StreamFaulted
