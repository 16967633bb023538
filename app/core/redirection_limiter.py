"""
Redirection Limiter

Per-key admission control for the redirect endpoint. Each short URL hash gets
a fixed-window counter: the window opens on the first attempt after a reset
and lasts exactly `window_seconds`.

Design Decisions:
- Fixed window from first touch (not sliding): O(1) time and space per key.
  Up to 2x max_redirects can pass across two adjacent windows.
- Exclusive ceiling: the pre-increment count is compared with `count < max`,
  a fresh window starts at 0, so at most max_redirects admissions per window.
- Sharded locks: the table is split into shards, each with its own lock.
  The window check, comparison and increment run under one shard lock, so
  concurrent requests for the same key cannot over-admit, and keys in
  different shards never wait on each other.
- Process-local: every replica enforces its own limit.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _epoch_seconds() -> int:
    return int(time.time())


@dataclass
class CounterState:
    """Counter for one key in its current window."""
    count: int
    window_start: int


class _Shard:
    __slots__ = ("lock", "entries", "last_eviction")

    def __init__(self, now: int):
        self.lock = threading.Lock()
        self.entries: Dict[str, CounterState] = {}
        self.last_eviction = now


class RedirectionLimiter:
    """
    Fixed-window redirect counter keyed by short URL hash.

    Built once in the composition root and shared by every request handler.
    Denial is a normal return value (`False`), never an exception.
    """

    def __init__(
        self,
        max_redirects: int = 10,
        window_seconds: int = 10,
        shards: int = 16,
        clock: Optional[Clock] = None,
        eviction_interval_seconds: Optional[int] = None
    ):
        """
        Initialize the limiter.

        Args:
            max_redirects: Admissions allowed per key and window
            window_seconds: Window length in seconds
            shards: Number of independently locked partitions of the table
            clock: Callable returning epoch seconds (defaults to time.time)
            eviction_interval_seconds: How often a shard drops expired
                entries; None or 0 keeps entries forever

        Raises:
            ValueError: If any size or duration is not positive, or the
                eviction interval is negative
        """
        if max_redirects <= 0:
            raise ValueError(f"max_redirects must be positive, got {max_redirects}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        if shards <= 0:
            raise ValueError(f"shards must be positive, got {shards}")
        if eviction_interval_seconds is not None and eviction_interval_seconds < 0:
            raise ValueError(
                f"eviction_interval_seconds must not be negative, got {eviction_interval_seconds}"
            )

        self._max_redirects = max_redirects
        self._window_seconds = window_seconds
        self._clock: Clock = clock or _epoch_seconds
        self._eviction_interval = eviction_interval_seconds or None

        now = self._clock()
        self._shards: List[_Shard] = [_Shard(now) for _ in range(shards)]

    @property
    def max_redirects(self) -> int:
        return self._max_redirects

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def _is_expired(self, state: CounterState, now: int) -> bool:
        return now - state.window_start > self._window_seconds

    def _evict_expired(self, shard: _Shard, now: int) -> int:
        # Caller holds shard.lock
        expired = [key for key, state in shard.entries.items() if self._is_expired(state, now)]
        for key in expired:
            del shard.entries[key]
        shard.last_eviction = now
        return len(expired)

    def is_allowed(self, key: str) -> bool:
        """
        Count a redirection attempt for `key` and decide admit or deny.

        Starts a new window when none exists or the current one has expired,
        then admits only while the pre-increment count is below the ceiling.
        A denied attempt leaves the count unchanged.

        Args:
            key: Short URL hash (validated by the caller)

        Returns:
            True if the redirect may proceed, False if the window is exhausted
        """
        shard = self._shard_for(key)
        with shard.lock:
            now = self._clock()

            if self._eviction_interval and now - shard.last_eviction >= self._eviction_interval:
                removed = self._evict_expired(shard, now)
                if removed:
                    logger.debug(f"Evicted {removed} expired redirect counters")

            state = shard.entries.get(key)
            if state is None or self._is_expired(state, now):
                state = CounterState(count=0, window_start=now)
                shard.entries[key] = state

            if state.count < self._max_redirects:
                state.count += 1
                return True
            return False

    def current_redirects(self, key: str) -> int:
        """Redirections counted for `key` in its current window (0 if unseen)."""
        shard = self._shard_for(key)
        with shard.lock:
            state = shard.entries.get(key)
            return state.count if state else 0

    def seconds_until_reset(self, key: str) -> Optional[int]:
        """
        Seconds left in the window of `key` by the limiter's own clock.

        Returns:
            Non-negative seconds, or None if the key is unseen
        """
        reset_at = self.reset_at(key)
        if reset_at is None:
            return None
        return max(0, reset_at - self._clock())

    def reset_at(self, key: str) -> Optional[int]:
        """Epoch second at which the window of `key` ends, or None if unseen."""
        shard = self._shard_for(key)
        with shard.lock:
            state = shard.entries.get(key)
            if state is None:
                return None
            return state.window_start + self._window_seconds

    def purge_expired(self) -> int:
        """
        Drop every entry whose window has already expired.

        Shards are locked one at a time. Admit/deny results are unaffected:
        an expired entry would be reset by its next attempt anyway.

        Returns:
            Number of entries removed
        """
        removed = 0
        for shard in self._shards:
            with shard.lock:
                removed += self._evict_expired(shard, self._clock())
        return removed

    def tracked_keys(self) -> int:
        """Number of keys currently holding a counter."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total
