from .fetcher import ParallelFetcher
from .rate_service import RateService
from .refresh_service import RefreshOrchestrator, warm_cache
from .resolver import Resolver

__all__ = ['ParallelFetcher', 'RateService', 'RefreshOrchestrator', 'Resolver', 'warm_cache']
