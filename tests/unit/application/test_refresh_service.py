# nosec B101

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.fetcher import ParallelFetcher
from application.services.refresh_service import RefreshOrchestrator, warm_cache
from application.services.resolver import Resolver
from domain.models.currency import Resolution
from infrastructure.cache.memory_cache import FreshnessCache

FOUR_MINUTES = 4 * 60 * 1000


@pytest.fixture
def cache(clock):
    return FreshnessCache(clock=clock)


@pytest.fixture
def fetcher():
    return AsyncMock(spec=ParallelFetcher)


@pytest.fixture
def orchestrator(fetcher, cache):
    return RefreshOrchestrator(fetcher=fetcher, resolver=Resolver(), cache=cache)


@pytest.mark.asyncio
async def test_refresh_updates_cache(orchestrator, fetcher, cache, make_result):
    fetcher.fetch_all.return_value = [
        make_result('A', EUR='0.90'),
        make_result('B', EUR='0.94'),
    ]

    resolved = await orchestrator.refresh()

    assert resolved.resolution == Resolution.AVERAGED
    assert cache.get().data == resolved
    assert cache.is_refreshing() is False


@pytest.mark.asyncio
async def test_refresh_all_sources_failed_leaves_cache_untouched(
    orchestrator, fetcher, cache, resolved_rates
):
    cache.set(resolved_rates)
    fetcher.fetch_all.return_value = []

    assert await orchestrator.refresh() is None
    assert cache.get().data == resolved_rates
    assert cache.is_refreshing() is False


@pytest.mark.asyncio
async def test_refresh_skipped_when_already_refreshing(orchestrator, fetcher, cache):
    cache.set_refreshing(True)

    assert await orchestrator.refresh() is None
    fetcher.fetch_all.assert_not_called()
    assert cache.is_refreshing() is True


@pytest.mark.asyncio
async def test_concurrent_refresh_only_one_fetches(orchestrator, fetcher, make_result):
    release = asyncio.Event()

    async def blocked_fetch_all():
        await release.wait()
        return [make_result('A', EUR='0.92')]

    fetcher.fetch_all.side_effect = blocked_fetch_all

    first = asyncio.create_task(orchestrator.refresh())
    await asyncio.sleep(0)
    second = await orchestrator.refresh()
    release.set()
    first_result = await first

    assert second is None
    assert first_result is not None
    assert first_result.sources == ['A']
    fetcher.fetch_all.assert_awaited_once()


@pytest.mark.asyncio
async def test_refresh_clears_flag_after_unexpected_error(orchestrator, fetcher, cache):
    fetcher.fetch_all.side_effect = RuntimeError('boom')

    assert await orchestrator.refresh() is None
    assert cache.is_refreshing() is False


@pytest.mark.asyncio
async def test_background_refresh_scheduled_when_near_expiry(
    orchestrator, fetcher, cache, clock, resolved_rates, make_result
):
    cache.set(resolved_rates)
    clock.advance(FOUR_MINUTES + 1)
    fetcher.fetch_all.return_value = [make_result('A', clock.now, EUR='0.93')]

    assert orchestrator.maybe_background_refresh(cache.get()) is True
    await asyncio.gather(*orchestrator._background_tasks)

    snapshot = cache.get()
    assert snapshot.data.sources == ['A']
    assert snapshot.age == 0


@pytest.mark.asyncio
async def test_background_refresh_not_needed(orchestrator, fetcher, cache, resolved_rates):
    cache.set(resolved_rates)

    assert orchestrator.maybe_background_refresh(cache.get()) is False
    assert orchestrator.maybe_background_refresh(None) is False
    fetcher.fetch_all.assert_not_called()


@pytest.mark.asyncio
async def test_background_refresh_skipped_while_refreshing(
    orchestrator, fetcher, cache, clock, resolved_rates
):
    cache.set(resolved_rates)
    clock.advance(FOUR_MINUTES + 1)
    cache.set_refreshing(True)

    assert orchestrator.maybe_background_refresh(cache.get()) is False
    fetcher.fetch_all.assert_not_called()


@pytest.mark.asyncio
async def test_background_refresh_losing_the_flag_returns_none(
    orchestrator, fetcher, cache, clock, resolved_rates
):
    cache.set(resolved_rates)
    clock.advance(FOUR_MINUTES + 1)

    assert orchestrator.maybe_background_refresh(cache.get()) is True
    # another refresh claims the flag before the scheduled task starts
    assert cache.try_begin_refresh() is True
    results = await asyncio.gather(*orchestrator._background_tasks)

    assert results == [None]
    fetcher.fetch_all.assert_not_called()
    assert cache.is_refreshing() is True
    assert cache.get().data == resolved_rates


@pytest.mark.asyncio
async def test_background_refresh_failure_is_swallowed(cache, clock, resolved_rates):
    cache.set(resolved_rates)
    clock.advance(FOUR_MINUTES + 1)

    orchestrator = RefreshOrchestrator(
        fetcher=AsyncMock(spec=ParallelFetcher), resolver=Resolver(), cache=cache
    )
    orchestrator.refresh = AsyncMock(side_effect=RuntimeError('background boom'))

    assert orchestrator.maybe_background_refresh(cache.get()) is True
    tasks = list(orchestrator._background_tasks)
    await asyncio.gather(*tasks, return_exceptions=True)
    await asyncio.sleep(0)

    assert orchestrator._background_tasks == set()
    assert cache.get().data == resolved_rates


@pytest.mark.asyncio
async def test_shutdown_cancels_background_tasks(orchestrator, fetcher, cache, clock, resolved_rates):
    cache.set(resolved_rates)
    clock.advance(FOUR_MINUTES + 1)

    async def never_returns():
        await asyncio.Event().wait()

    fetcher.fetch_all.side_effect = never_returns

    orchestrator.maybe_background_refresh(cache.get())
    await asyncio.sleep(0)
    await orchestrator.shutdown()
    await asyncio.sleep(0)

    assert orchestrator._background_tasks == set()
    assert cache.is_refreshing() is False


@pytest.mark.asyncio
async def test_warm_cache_retries_until_data(resolved_rates):
    orchestrator = Mock(spec=RefreshOrchestrator)
    orchestrator.refresh = AsyncMock(side_effect=[None, resolved_rates])

    result = await warm_cache(orchestrator, attempts=3, min_wait=0, max_wait=0)

    assert result == resolved_rates
    assert orchestrator.refresh.await_count == 2


@pytest.mark.asyncio
async def test_warm_cache_gives_up_after_attempts():
    orchestrator = Mock(spec=RefreshOrchestrator)
    orchestrator.refresh = AsyncMock(return_value=None)

    result = await warm_cache(orchestrator, attempts=2, min_wait=0, max_wait=0)

    assert result is None
    assert orchestrator.refresh.await_count == 2
