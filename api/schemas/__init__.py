from .responses import (
	CacheStatsResponse,
	CurrenciesResponse,
	HealthResponse,
	RatesResponse,
	UnavailableResponse,
)

__all__ = [
	'CacheStatsResponse',
	'CurrenciesResponse',
	'HealthResponse',
	'RatesResponse',
	'UnavailableResponse',
]
