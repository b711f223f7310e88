"""
Shared test configuration and fixtures.
"""

from decimal import Decimal

import pytest

from domain.models.currency import Resolution, ResolvedRates, SourceResult

T0 = 1_760_745_600_000  # 2025-10-18T00:00:00Z in epoch ms


class FakeClock:
    """Millisecond clock that only moves when told to"""
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_result():
    """Factory for SourceResult with string rates turned into Decimals"""
    def _make(source: str, timestamp: int = T0, **rates: str) -> SourceResult:
        return SourceResult(
            rates={code: Decimal(value) for code, value in rates.items()},
            timestamp=timestamp,
            source=source,
        )
    return _make


@pytest.fixture
def resolved_rates():
    return ResolvedRates(
        rates={'EUR': Decimal('0.92'), 'GBP': Decimal('0.79')},
        timestamp=T0,
        sources=['exchangerate-api', 'open.er-api'],
        resolution=Resolution.AVERAGED,
    )
