import asyncio

from medlearn.core.stats_cache import StatsCache, run_periodic_sweep, stats_key


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = StatsCache(ttl_seconds=300, clock=clock)
    cache.set(stats_key(1), {"totalSessions": 3})

    clock.now = 299
    assert cache.get("stats_1") == {"totalSessions": 3}
    clock.now = 300
    assert cache.get("stats_1") is None
    assert len(cache) == 0


def test_get_or_build_only_builds_on_miss():
    cache = StatsCache(ttl_seconds=300, clock=FakeClock())
    calls = []

    def build():
        calls.append(1)
        return {"n": len(calls)}

    assert cache.get_or_build("k", build) == {"n": 1}
    assert cache.get_or_build("k", build) == {"n": 1}
    cache.invalidate("k", "missing")
    assert cache.get_or_build("k", build) == {"n": 2}


def test_sweep_removes_only_expired():
    clock = FakeClock()
    cache = StatsCache(ttl_seconds=10, clock=clock)
    cache.set("old", 1)
    clock.now = 6
    cache.set("new", 2)
    clock.now = 12

    assert cache.sweep() == 1
    assert cache.get("old") is None
    assert cache.get("new") == 2


def test_periodic_sweep_runs_until_cancelled():
    clock = FakeClock()
    cache = StatsCache(ttl_seconds=1, clock=clock)
    cache.set("k", 1)
    clock.now = 5

    async def scenario():
        task = asyncio.create_task(run_periodic_sweep(cache, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return task.cancelled()

    assert asyncio.run(scenario()) is True
    assert len(cache) == 0
