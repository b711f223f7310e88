import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from domain.exceptions.currency import NormalizationError, ProviderError
from domain.models.currency import SourceResult
from infrastructure.providers.normalizers import Normalizer

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static configuration of one rate provider."""
    id: str
    endpoint_template: str
    normalize: Normalizer

    def url_for(self, base_currency: str) -> str:
        return self.endpoint_template.format(base=base_currency)


class SourceClient:
    """Fetches and normalizes rates from a single provider.

    ``fetch`` never raises for provider-level problems: a timeout, a non-2xx
    status, an unparseable body or a body the normalizer rejects all come back
    as ``None`` so callers can treat every provider uniformly.
    """

    def __init__(
        self,
        base_currency: str,
        target_currencies: list[str],
        client: httpx.AsyncClient | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ):
        self.base_currency = base_currency
        self.target_currencies = list(target_currencies)
        self.timeout_ms = timeout_ms
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000),
            headers={"accept": "application/json"},
        )

    async def fetch(self, provider: ProviderDescriptor) -> SourceResult | None:
        try:
            data = await self._request(provider)
            rates, timestamp = provider.normalize(data)
            result = SourceResult(
                rates=self._filter_rates(rates),
                timestamp=timestamp,
                source=provider.id,
            )
        except ProviderError as e:
            logger.error(f"[{provider.id}] {e}")
            return None
        except Exception as e:
            logger.error(f"[{provider.id}] Unexpected fetch error: {e}")
            return None

        logger.info(f"[{provider.id}] Successfully fetched {len(result.rates)} rates")
        return result

    async def _request(self, provider: ProviderDescriptor) -> dict[str, Any]:
        url = provider.url_for(self.base_currency)
        try:
            # The outer bound also covers the body read and any late response.
            response = await asyncio.wait_for(
                self._client.get(url), timeout=self.timeout_ms / 1000
            )
            response.raise_for_status()
            data = response.json()

        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProviderError(f"Request timed out after {self.timeout_ms}ms") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"HTTP error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"Request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise ProviderError(f"Response parsing error: {str(e)}") from e

        if not isinstance(data, dict):
            raise NormalizationError("Response body is not a JSON object")
        return data

    def _filter_rates(self, rates: dict[str, Any]) -> dict[str, Decimal]:
        filtered: dict[str, Decimal] = {}
        for currency in self.target_currencies:
            if rates.get(currency) is None:
                continue
            try:
                rate = Decimal(str(rates[currency]))
            except InvalidOperation as e:
                raise NormalizationError(f"Invalid rate for {currency}: {rates[currency]!r}") from e
            # json accepts Infinity/NaN literals
            if not rate.is_finite() or rate <= 0:
                raise NormalizationError(f"Invalid rate for {currency}: {rates[currency]!r}")
            filtered[currency] = rate
        return filtered

    async def close(self) -> None:
        await self._client.aclose()
