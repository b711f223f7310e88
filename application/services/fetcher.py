import asyncio
import logging

from domain.models.currency import SourceResult
from infrastructure.providers.base import ProviderDescriptor, SourceClient

logger = logging.getLogger(__name__)


class ParallelFetcher:
	def __init__(self, client: SourceClient, providers: list[ProviderDescriptor]):
		self.client = client
		self.providers = providers

	async def fetch_all(self, providers: list[ProviderDescriptor] | None = None) -> list[SourceResult]:
		"""Query every provider concurrently and keep the ones that answered.

		Waits for all providers, so total latency is bounded by one fetch
		timeout. Results follow provider order.
		"""
		providers = self.providers if providers is None else providers
		logger.info(f'Fetching from {len(providers)} sources in parallel...')

		results = await asyncio.gather(*(self.client.fetch(provider) for provider in providers))

		successful = [result for result in results if result is not None]
		logger.info(f'{len(successful)}/{len(providers)} sources responded successfully')
		return successful
