import logging

from application.services.refresh_service import RefreshOrchestrator
from domain.models.currency import CacheStats, RatesOutcome, RatesStatus
from infrastructure.cache.memory_cache import FreshnessCache

logger = logging.getLogger(__name__)

STALE_WARNING = 'Data may be outdated. Live sources are temporarily unavailable.'
UNAVAILABLE_ERROR = 'Exchange rate data is temporarily unavailable. Please try again later.'


class RateService:
    def __init__(
        self,
        cache: FreshnessCache,
        orchestrator: RefreshOrchestrator,
        retry_after_seconds: int = 30,
    ):
        self.cache = cache
        self.orchestrator = orchestrator
        self.retry_after_seconds = retry_after_seconds

    async def get_rates(self) -> RatesOutcome:
        """Serve the best rates available.

        Fresh cache wins (and may kick off a background refresh), then a
        synchronous refresh, then stale cache with a warning. With nothing at
        all the outcome is ``unavailable`` with a retry hint.
        """
        cached = self.cache.get()

        if cached is not None and not cached.is_stale:
            logger.info('Returning fresh cached data')
            self.orchestrator.maybe_background_refresh(cached)
            return RatesOutcome(
                status=RatesStatus.LIVE,
                data=cached.data,
                cached=True,
                cache_age=cached.age,
            )

        logger.info('Fetching fresh data...')
        fresh = await self.orchestrator.refresh()
        if fresh is not None:
            return RatesOutcome(status=RatesStatus.LIVE, data=fresh, cached=False)

        if cached is not None:
            logger.warning(f'Returning stale cached data (age: {cached.age}ms, APIs unavailable)')
            return RatesOutcome(
                status=RatesStatus.STALE,
                data=cached.data,
                cached=True,
                cache_age=cached.age,
                warning=STALE_WARNING,
            )

        logger.error('No data available (all sources failed, no cache)')
        return RatesOutcome(
            status=RatesStatus.UNAVAILABLE,
            error=UNAVAILABLE_ERROR,
            retry_after=self.retry_after_seconds,
        )

    def health(self) -> CacheStats:
        return self.cache.stats()
