import asyncio
import logging

from tenacity import (
	AsyncRetrying,
	RetryError,
	retry_if_exception_type,
	stop_after_attempt,
	wait_exponential,
)

from application.services.fetcher import ParallelFetcher
from application.services.resolver import Resolver
from domain.exceptions.currency import RatesUnavailableError
from domain.models.currency import CacheSnapshot, ResolvedRates
from infrastructure.cache.memory_cache import FreshnessCache

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
	"""Runs fetch -> resolve -> cache, one refresh at a time."""

	def __init__(self, fetcher: ParallelFetcher, resolver: Resolver, cache: FreshnessCache):
		self.fetcher = fetcher
		self.resolver = resolver
		self.cache = cache
		self._background_tasks: set[asyncio.Task] = set()

	async def refresh(self) -> ResolvedRates | None:
		if not self.cache.try_begin_refresh():
			logger.info('Refresh already in progress, skipping...')
			return None

		try:
			results = await self.fetcher.fetch_all()
			resolved = self.resolver.resolve(results)

			if resolved is not None:
				self.cache.set(resolved)
				logger.info(f'Cache updated ({resolved.resolution.value} from {resolved.sources})')
			else:
				logger.warning('Refresh produced no data - all sources failed')

			return resolved
		except Exception as e:
			logger.error(f'Error refreshing rates: {e}', exc_info=True)
			return None
		finally:
			self.cache.set_refreshing(False)

	def maybe_background_refresh(self, snapshot: CacheSnapshot | None) -> bool:
		"""Schedule a detached refresh when the snapshot is close to expiry."""
		# Advisory check only; refresh() claims the flag and returns None if it loses.
		if snapshot is None or not snapshot.needs_refresh or self.cache.is_refreshing():
			return False

		logger.info('Triggering background refresh (cache near expiry)')
		task = asyncio.create_task(self.refresh())
		self._background_tasks.add(task)
		task.add_done_callback(self._on_background_done)
		return True

	def _on_background_done(self, task: asyncio.Task) -> None:
		self._background_tasks.discard(task)
		if task.cancelled():
			return
		exc = task.exception()
		if exc is not None:
			logger.error(f'Background refresh failed: {exc}')

	async def shutdown(self) -> None:
		tasks = list(self._background_tasks)
		for task in tasks:
			task.cancel()
		if tasks:
			await asyncio.gather(*tasks, return_exceptions=True)


async def warm_cache(
	orchestrator: RefreshOrchestrator,
	attempts: int = 3,
	min_wait: float = 1,
	max_wait: float = 10,
) -> ResolvedRates | None:
	"""Pre-populate the cache at startup, retrying while every source fails."""
	logger.info('Pre-warming cache...')
	try:
		async for attempt in AsyncRetrying(
			stop=stop_after_attempt(attempts),
			wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
			retry=retry_if_exception_type(RatesUnavailableError),
		):
			with attempt:
				resolved = await orchestrator.refresh()
				if resolved is None:
					raise RatesUnavailableError('Cache pre-warm produced no data')
	except RetryError:
		logger.warning(f'Cache pre-warm failed after {attempts} attempts - will retry on first request')
		return None

	logger.info('Cache pre-warmed successfully')
	return resolved
