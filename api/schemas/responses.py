from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class RatesResponse(BaseModel):
	model_config = ConfigDict(
		populate_by_name=True,
		json_schema_extra={
			'example': {
				'status': 'live',
				'base': 'USD',
				'currencies': ['EUR', 'GBP'],
				'rates': {'EUR': 0.92, 'GBP': 0.79},
				'timestamp': 1760745600000,
				'sources': ['exchangerate-api', 'open.er-api'],
				'resolution': 'averaged',
				'cached': True,
				'cacheAge': 42000,
			}
		},
	)

	status: str = Field(..., description='live or stale')
	base: str = Field(..., description='Base currency code')
	currencies: list[str] = Field(..., description='Tracked target currency codes')
	rates: dict[str, Decimal] = Field(..., description='Rate per target currency')
	timestamp: int = Field(..., description='Effective data time, epoch milliseconds')
	sources: list[str] = Field(..., description='Providers that contributed')
	resolution: str = Field(..., description='single-source, freshest-source or averaged')
	cached: bool = Field(..., description='Whether the data came from the cache')
	cache_age: int | None = Field(None, alias='cacheAge', description='Cache age in milliseconds')
	warning: str | None = Field(None, description='Degradation warning for stale data')

	@field_serializer('rates')
	def rates_as_numbers(self, rates: dict[str, Decimal]) -> dict[str, float]:
		return {code: float(rate) for code, rate in rates.items()}


class UnavailableResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	status: str = 'unavailable'
	base: str
	currencies: list[str]
	error: str
	retry_after: int | None = Field(None, alias='retryAfter', description='Suggested retry delay in seconds')


class CacheStatsResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	has_data: bool = Field(..., alias='hasData')
	timestamp: int | None = Field(None, description='When the cache was last filled, epoch milliseconds')
	age: int | None = None
	is_stale: bool | None = Field(None, alias='isStale')
	is_refreshing: bool = Field(..., alias='isRefreshing')


class HealthResponse(BaseModel):
	status: str = 'ok'
	uptime: float = Field(..., description='Seconds since the process started')
	cache: CacheStatsResponse


class CurrenciesResponse(BaseModel):
	base: str
	targets: list[str]

	model_config = ConfigDict(
		json_schema_extra={'examples': [{'base': 'USD', 'targets': ['EUR', 'GBP', 'JPY']}]}
	)
