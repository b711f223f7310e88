"""Per-provider response normalizers.

Each normalizer turns one provider's raw JSON body into ``(rates, timestamp)``
where ``timestamp`` is epoch milliseconds. Normalizers are pure functions and
know nothing about HTTP; a payload they cannot read raises
``NormalizationError``.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from domain.exceptions.currency import NormalizationError

NormalizedPayload = tuple[dict[str, Any], int]
Normalizer = Callable[[dict[str, Any]], NormalizedPayload]


def _extract_rates(data: dict[str, Any]) -> dict[str, Any]:
    rates = data.get("rates")
    if not isinstance(rates, dict):
        raise NormalizationError("Response has no 'rates' object")
    return rates


def normalize_unix_time_payload(data: dict[str, Any]) -> NormalizedPayload:
    """exchangerate-api style body: ``rates`` plus ``time_last_update_unix`` in seconds."""
    rates = _extract_rates(data)
    try:
        timestamp = int(data["time_last_update_unix"]) * 1000
    except (KeyError, TypeError, ValueError) as e:
        raise NormalizationError(f"Invalid time_last_update_unix: {e}") from e
    return rates, timestamp


def normalize_frankfurter(data: dict[str, Any]) -> NormalizedPayload:
    """Frankfurter only reports a calendar date, taken as UTC midnight."""
    rates = _extract_rates(data)
    try:
        day = datetime.strptime(data["date"], "%Y-%m-%d").replace(tzinfo=UTC)
    except (KeyError, TypeError, ValueError) as e:
        raise NormalizationError(f"Invalid date: {e}") from e
    return rates, int(day.timestamp() * 1000)


NORMALIZERS: dict[str, Normalizer] = {
    "exchangerate-api": normalize_unix_time_payload,
    "open.er-api": normalize_unix_time_payload,
    "frankfurter": normalize_frankfurter,
}
