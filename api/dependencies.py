import asyncio
import logging

from application.services import (
	ParallelFetcher,
	RateService,
	RefreshOrchestrator,
	Resolver,
	warm_cache,
)
from config.settings import get_settings
from infrastructure.cache.memory_cache import FreshnessCache
from infrastructure.providers import SourceClient, build_providers

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for the objects that live as long as the application."""

	source_client: SourceClient | None = None
	cache: FreshnessCache | None = None
	orchestrator: RefreshOrchestrator | None = None
	rate_service: RateService | None = None
	warmup_task: asyncio.Task | None = None


deps = AppDependencies()


def init_dependencies() -> None:
	"""Initialize all application-scoped dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	providers = build_providers(settings.ENABLED_PROVIDERS)
	deps.source_client = SourceClient(
		base_currency=settings.BASE_CURRENCY,
		target_currencies=settings.TARGET_CURRENCIES,
		timeout_ms=settings.FETCH_TIMEOUT_MS,
	)
	deps.cache = FreshnessCache(
		hard_ttl_ms=settings.CACHE_TTL_MS,
		soft_ttl_ms=settings.REFRESH_THRESHOLD_MS,
	)
	deps.orchestrator = RefreshOrchestrator(
		fetcher=ParallelFetcher(deps.source_client, providers),
		resolver=Resolver(conflict_window_ms=settings.CONFLICT_WINDOW_MS),
		cache=deps.cache,
	)
	deps.rate_service = RateService(
		cache=deps.cache,
		orchestrator=deps.orchestrator,
		retry_after_seconds=settings.RETRY_AFTER_SECONDS,
	)
	logger.info(f'Dependencies initialized with providers: {[p.id for p in providers]}')


def bootstrap() -> None:
	"""Start the cache warm-up in the background. Called after init_dependencies()."""
	if deps.orchestrator is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	settings = get_settings()
	deps.warmup_task = asyncio.create_task(
		warm_cache(deps.orchestrator, attempts=settings.WARMUP_ATTEMPTS)
	)


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.warmup_task and not deps.warmup_task.done():
		deps.warmup_task.cancel()
		await asyncio.gather(deps.warmup_task, return_exceptions=True)
	if deps.orchestrator:
		await deps.orchestrator.shutdown()
	if deps.source_client:
		await deps.source_client.close()

	deps.source_client = deps.cache = deps.orchestrator = deps.rate_service = None
	deps.warmup_task = None
	logger.info('Cleanup complete')


def get_rate_service() -> RateService:
	if deps.rate_service is None:
		raise RuntimeError('Rate service not initialized')
	return deps.rate_service
