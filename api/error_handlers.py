import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.schemas import UnavailableResponse
from config.settings import get_settings
from domain.exceptions.currency import RatesUnavailableError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(RatesUnavailableError)
	async def rates_unavailable_handler(request: Request, exc: RatesUnavailableError):
		logger.error(f'Rates unavailable: {exc}')
		settings = get_settings()
		body = UnavailableResponse(
			base=settings.BASE_CURRENCY,
			currencies=settings.TARGET_CURRENCIES,
			error=str(exc),
			retry_after=exc.retry_after,
		)
		headers = {'Retry-After': str(exc.retry_after)} if exc.retry_after is not None else None
		return JSONResponse(
			status_code=503,
			content=body.model_dump(by_alias=True, exclude_none=True),
			headers=headers,
		)

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return JSONResponse(status_code=500, content={'detail': 'Internal server error'})
