from __future__ import annotations

import asyncio

from price_api.app.services.refresh import CacheWarmer


def test_cache_warmer_refreshes_the_warm_set(service, source, backend, make_points) -> None:
    for symbol in ("BTC", "ETH"):
        source.data[symbol] = make_points([(0, 1)])
    warmer = CacheWarmer(service, symbols=("BTC", "ETH"), period_seconds=3600)

    async def scenario():
        warmer.start()
        assert warmer.running
        for _ in range(500):
            if len(backend.sets) == 2:
                break
            await asyncio.sleep(0.01)
        await warmer.stop()

    asyncio.run(scenario())

    assert sorted(key for key, _ in backend.sets) == ["price:BTC:30d", "price:ETH:30d"]
    assert not warmer.running
    assert {call[3] for call in source.calls} == {"1d"}
