from hydrodash.scheduler import Scheduler
from hydrodash.system import TimedCache


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.calls


class TestTimedCache:
    def test_reuses_value_within_ttl(self):
        clock = Scheduler()
        cache = TimedCache(clock=clock, ttl=1.0)
        compute = Counter()

        assert cache.get_or_compute("k", compute) == 1
        clock.advance(0.5)
        assert cache.get_or_compute("k", compute) == 1
        assert compute.calls == 1

    def test_recomputes_after_ttl(self):
        clock = Scheduler()
        cache = TimedCache(clock=clock, ttl=1.0)
        compute = Counter()

        cache.get_or_compute("k", compute)
        clock.advance(1.0)

        assert cache.get_or_compute("k", compute) == 2

    def test_keys_are_independent(self):
        cache = TimedCache(clock=Scheduler())

        cache.get_or_compute("a", lambda: "A")

        assert cache.get_or_compute("b", lambda: "B") == "B"

    def test_invalidate(self):
        cache = TimedCache(clock=Scheduler())
        compute = Counter()
        cache.get_or_compute("a", compute)
        cache.get_or_compute("b", compute)

        cache.invalidate("a")
        assert len(cache) == 1

        cache.invalidate()
        assert len(cache) == 0

    def test_sweep_drops_old_entries(self):
        clock = Scheduler()
        cache = TimedCache(clock=clock, ttl=1.0, max_age=5.0)
        cache.get_or_compute("old", lambda: 1)
        clock.advance(4.0)
        cache.get_or_compute("new", lambda: 2)
        clock.advance(2.0)

        assert cache.sweep() == 1
        assert len(cache) == 1
