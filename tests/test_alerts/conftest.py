from datetime import datetime, timedelta

import pytest

from hydrodash.alerts import AlertQueue


class FakeClock:
    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue(clock) -> AlertQueue:
    return AlertQueue(now=clock)
