"""Format Cache - time-bounded, lazily refreshed index over all format rules.

Invariants:
    - A read reloads the full rule set when the index is missing, empty, or older than the TTL
    - invalidate() makes the very next read reload (refresh marker set to -inf)
    - The index is swapped whole; readers never see a partially built one
    - No background refresh and no lock: concurrent stale reads may both reload,
      and both produce the same index from the same rows

Design Decisions:
    - Injectable clock (monotonic seconds): tests force staleness without sleeping
    - Loader passed per read: the cache is process-wide but DB sessions are per request
    - Module-level singleton initialized on startup, mirroring db_manager
"""

import logging
import math
import time
from collections.abc import Callable

from idformat.core.domain_types import FormatRule
from idformat.core.format_index import FormatIndex
from idformat.core.repository_protocols import RuleLoader

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0
_NEVER_REFRESHED = -math.inf


class FormatCache:
    """In-process view of the rule table, rebuilt from the store on demand."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._index: FormatIndex | None = None
        self._refreshed_at: float = _NEVER_REFRESHED
        self.reload_count = 0

    def is_stale(self) -> bool:
        if self._index is None or self._index.is_empty():
            return True
        return self._clock() - self._refreshed_at >= self.ttl_seconds

    def invalidate(self) -> None:
        """Force the next read to reload from the store."""
        self._refreshed_at = _NEVER_REFRESHED

    async def current(self, loader: RuleLoader) -> FormatIndex:
        """Return the index, reloading through loader first if stale."""
        if self.is_stale():
            rules = await loader()
            self._store_index(rules)
        return self._index

    def _store_index(self, rules: list[FormatRule]) -> None:
        self._index = FormatIndex.build(rules)
        self._refreshed_at = self._clock()
        self.reload_count += 1
        logger.debug(
            "Format cache reloaded", extra={"rule_count": len(rules)},
        )


# Singleton (initialized on startup)
format_cache: FormatCache | None = None


def init_format_cache(ttl_seconds: float = DEFAULT_TTL_SECONDS) -> FormatCache:
    global format_cache
    format_cache = FormatCache(ttl_seconds=ttl_seconds)
    return format_cache


def get_format_cache() -> FormatCache:
    """FastAPI dependency for the process-wide format cache."""
    if not format_cache:
        raise RuntimeError("Format cache not initialized")
    return format_cache
