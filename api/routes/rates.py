import time
from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_rate_service
from api.schemas import (
	CacheStatsResponse,
	CurrenciesResponse,
	HealthResponse,
	RatesResponse,
	UnavailableResponse,
)
from application.services import RateService
from config.settings import Settings, get_settings
from domain.exceptions.currency import RatesUnavailableError
from domain.models.currency import RatesStatus

router = APIRouter(prefix='/api', tags=['rates'])

_started_at = time.monotonic()


@router.get(
	'/rates',
	response_model=RatesResponse,
	response_model_exclude_none=True,
	status_code=status.HTTP_200_OK,
	responses={503: {'model': UnavailableResponse}},
	summary='Get current exchange rates',
)
async def get_rates(
	service: Annotated[RateService, Depends(get_rate_service)],
	settings: Annotated[Settings, Depends(get_settings)],
) -> RatesResponse:
	outcome = await service.get_rates()

	if outcome.status is RatesStatus.UNAVAILABLE or outcome.data is None:
		raise RatesUnavailableError(outcome.error or 'No exchange rate data', retry_after=outcome.retry_after)

	return RatesResponse(
		status=outcome.status.value,
		base=settings.BASE_CURRENCY,
		currencies=settings.TARGET_CURRENCIES,
		rates=outcome.data.rates,
		timestamp=outcome.data.timestamp,
		sources=outcome.data.sources,
		resolution=outcome.data.resolution.value,
		cached=outcome.cached,
		cache_age=outcome.cache_age,
		warning=outcome.warning,
	)


@router.get(
	'/health',
	response_model=HealthResponse,
	status_code=status.HTTP_200_OK,
	summary='Health check with cache statistics',
)
async def health(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> HealthResponse:
	stats = service.health()
	return HealthResponse(
		uptime=round(time.monotonic() - _started_at, 3),
		cache=CacheStatsResponse(
			has_data=stats.has_data,
			timestamp=stats.fetched_at,
			age=stats.age,
			is_stale=stats.is_stale,
			is_refreshing=stats.is_refreshing,
		),
	)


@router.get(
	'/currencies',
	response_model=CurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_currencies(
	settings: Annotated[Settings, Depends(get_settings)],
) -> CurrenciesResponse:
	return CurrenciesResponse(base=settings.BASE_CURRENCY, targets=settings.TARGET_CURRENCIES)
