import logging
from decimal import ROUND_HALF_UP, Decimal

from domain.models.currency import ResolvedRates, Resolution, SourceResult

logger = logging.getLogger(__name__)

ONE_HOUR_MS = 60 * 60 * 1000
RATE_PRECISION = Decimal('0.000001')


class Resolver:
	"""Reconciles rates reported by several providers.

	- one source: used as is
	- timestamps more than ``conflict_window_ms`` apart: only the freshest source
	- otherwise: per-currency average over the sources reporting it
	"""

	def __init__(self, conflict_window_ms: int = ONE_HOUR_MS):
		self.conflict_window_ms = conflict_window_ms

	def resolve(self, results: list[SourceResult]) -> ResolvedRates | None:
		if not results:
			return None

		if len(results) == 1:
			only = results[0]
			return ResolvedRates(
				rates=dict(only.rates),
				timestamp=only.timestamp,
				sources=[only.source],
				resolution=Resolution.SINGLE_SOURCE,
			)

		newest = max(results, key=lambda r: r.timestamp)
		oldest = min(results, key=lambda r: r.timestamp)
		time_diff = newest.timestamp - oldest.timestamp

		if time_diff > self.conflict_window_ms:
			logger.info(
				f'Timestamps differ by {round(time_diff / 1000 / 60)} minutes - '
				f'using freshest source: {newest.source}'
			)
			return ResolvedRates(
				rates=dict(newest.rates),
				timestamp=newest.timestamp,
				sources=[newest.source],
				resolution=Resolution.FRESHEST_SOURCE,
			)

		logger.info(f'Timestamps within {self.conflict_window_ms}ms - averaging {len(results)} sources')
		return ResolvedRates(
			rates=average_rates(results),
			timestamp=newest.timestamp,
			sources=[r.source for r in results],
			resolution=Resolution.AVERAGED,
		)


def average_rates(results: list[SourceResult]) -> dict[str, Decimal]:
	"""Average each currency over the sources that report it, rounded to 6 places."""
	totals: dict[str, Decimal] = {}
	counts: dict[str, int] = {}

	for result in results:
		for currency, rate in result.rates.items():
			totals[currency] = totals.get(currency, Decimal('0')) + rate
			counts[currency] = counts.get(currency, 0) + 1

	# ROUND_HALF_UP rounds ties away from zero
	return {
		currency: (total / counts[currency]).quantize(RATE_PRECISION, rounding=ROUND_HALF_UP)
		for currency, total in totals.items()
	}
