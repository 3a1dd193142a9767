from dataclasses import dataclass, field

from hydrodash.sources import InputChannel

from .base import BaseStream, TickContext


@dataclass
class ChannelStream(BaseStream):
    """Publishes whatever arrived on an input channel since the last tick."""

    channel: InputChannel
    _seen_version: int = field(default=0, init=False, repr=False)

    def update(self, ctx: TickContext) -> None:
        version = self.channel.version
        if version == self._seen_version:
            return
        self._seen_version = version
        self.emit(self.channel.value, ctx.tick)

    def reset(self) -> None:
        super().reset()
        self._seen_version = 0
