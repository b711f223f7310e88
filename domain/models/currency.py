from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class Resolution(str, Enum):
    SINGLE_SOURCE = "single-source"
    FRESHEST_SOURCE = "freshest-source"
    AVERAGED = "averaged"


class RatesStatus(str, Enum):
    LIVE = "live"
    STALE = "stale"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class SourceResult:
    """Rates reported by one provider, relative to the base currency."""
    rates: dict[str, Decimal]
    timestamp: int  # provider data time, epoch ms
    source: str


@dataclass(frozen=True)
class ResolvedRates:
    rates: dict[str, Decimal]
    timestamp: int  # newest timestamp among the sources used
    sources: list[str]
    resolution: Resolution


@dataclass(frozen=True)
class CacheSnapshot:
    data: ResolvedRates
    fetched_at: int
    age: int
    is_stale: bool
    needs_refresh: bool


@dataclass(frozen=True)
class CacheStats:
    has_data: bool
    fetched_at: int | None
    age: int | None
    is_stale: bool | None
    is_refreshing: bool


@dataclass(frozen=True)
class RatesOutcome:
    """What the read policy hands back to the HTTP layer."""
    status: RatesStatus
    data: ResolvedRates | None = None
    cached: bool = False
    cache_age: int | None = None
    warning: str | None = None
    error: str | None = None
    retry_after: int | None = None

    @property
    def is_available(self) -> bool:
        return self.data is not None
