from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	BASE_CURRENCY: str = 'USD'
	TARGET_CURRENCIES: list[str] = [
		'EUR',
		'GBP',
		'JPY',
		'CAD',
		'AUD',
		'CHF',
		'CNY',
		'INR',
		'MXN',
		'BRL',
	]

	# Providers are queried in this order
	ENABLED_PROVIDERS: list[str] = ['exchangerate-api', 'open.er-api', 'frankfurter']
	FETCH_TIMEOUT_MS: int = 5000

	# Cache
	CACHE_TTL_MS: int = 5 * 60 * 1000
	REFRESH_THRESHOLD_MS: int = 4 * 60 * 1000
	CONFLICT_WINDOW_MS: int = 60 * 60 * 1000

	RETRY_AFTER_SECONDS: int = 30
	WARMUP_ATTEMPTS: int = 3

	# Application
	APP_NAME: str = 'Exchange Rate Tracker API'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str | None = None

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@field_validator('BASE_CURRENCY')
	@classmethod
	def uppercase_base(cls, v: str) -> str:
		return v.upper()

	@field_validator('TARGET_CURRENCIES')
	@classmethod
	def uppercase_targets(cls, v: list[str]) -> list[str]:
		return [code.upper() for code in v]

	@model_validator(mode='after')
	def refresh_before_expiry(self) -> 'Settings':
		if self.REFRESH_THRESHOLD_MS >= self.CACHE_TTL_MS:
			raise ValueError('REFRESH_THRESHOLD_MS must be lower than CACHE_TTL_MS')
		return self


@lru_cache
def get_settings() -> Settings:
	return Settings()
