from .graph import StreamGraph, Subscription
from .validation import UnknownInputError, ValidationError
from .wiring import build_stream_graph

__all__ = [
    "StreamGraph",
    "Subscription",
    "UnknownInputError",
    "ValidationError",
    "build_stream_graph",
]
