import logging
import threading
import time
from collections.abc import Callable

from domain.exceptions.currency import ConfigurationError
from domain.models.currency import CacheSnapshot, CacheStats, ResolvedRates

logger = logging.getLogger(__name__)

HARD_TTL_MS = 5 * 60 * 1000
SOFT_TTL_MS = 4 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


class FreshnessCache:
    """Holds the latest resolved rates and classifies their age.

    Data older than the soft TTL should be refreshed in the background, data
    older than the hard TTL is stale. Stale data is still returned by ``get``
    so callers can degrade gracefully.
    """

    def __init__(
        self,
        hard_ttl_ms: int = HARD_TTL_MS,
        soft_ttl_ms: int = SOFT_TTL_MS,
        clock: Callable[[], int] = now_ms,
    ):
        if soft_ttl_ms >= hard_ttl_ms:
            raise ConfigurationError("Soft TTL must be lower than hard TTL")

        self.hard_ttl_ms = hard_ttl_ms
        self.soft_ttl_ms = soft_ttl_ms
        self._clock = clock
        self._lock = threading.Lock()
        self._data: ResolvedRates | None = None
        self._fetched_at: int | None = None
        self._refreshing = False

    def get(self) -> CacheSnapshot | None:
        with self._lock:
            data, fetched_at = self._data, self._fetched_at

        if data is None or fetched_at is None:
            return None

        age = self._clock() - fetched_at
        return CacheSnapshot(
            data=data,
            fetched_at=fetched_at,
            age=age,
            is_stale=age > self.hard_ttl_ms,
            needs_refresh=age > self.soft_ttl_ms,
        )

    def set(self, data: ResolvedRates) -> None:
        fetched_at = self._clock()
        with self._lock:
            self._data = data
            self._fetched_at = fetched_at
        logger.debug(f"Cache updated with {len(data.rates)} rates from {data.sources}")

    def is_refreshing(self) -> bool:
        with self._lock:
            return self._refreshing

    def set_refreshing(self, state: bool) -> None:
        with self._lock:
            self._refreshing = state

    def try_begin_refresh(self) -> bool:
        """Atomically claim the refresh flag. Returns False if already claimed."""
        with self._lock:
            if self._refreshing:
                return False
            self._refreshing = True
            return True

    def clear(self) -> None:
        with self._lock:
            self._data = None
            self._fetched_at = None
            self._refreshing = False

    def stats(self) -> CacheStats:
        snapshot = self.get()
        return CacheStats(
            has_data=snapshot is not None,
            fetched_at=snapshot.fetched_at if snapshot else None,
            age=snapshot.age if snapshot else None,
            is_stale=snapshot.is_stale if snapshot else None,
            is_refreshing=self.is_refreshing(),
        )
