# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Short-lived cache for computed schedule events.

One instance lives on app.state and is shared by all requests. Entries are
immutable tuples of events; expired entries are never served.
"""

import time
from typing import Callable, Dict, Optional, Sequence, Tuple

from flowscope.models import ScheduleEvent


class ScheduleCache:
    """
    TTL cache keyed by connection, time zone and window.

    Expired entries are dropped on read, and cleanup() sweeps the whole store
    at most once per TTL window.
    """

    def __init__(self, ttl_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Tuple[ScheduleEvent, ...]]] = {}
        self._last_cleanup = clock()

    @staticmethod
    def make_key(connection_fingerprint: str, time_zone: Optional[str], range_start: str, range_end: str) -> str:
        return "|".join([connection_fingerprint, time_zone or "", range_start, range_end])

    def get(self, key: str) -> Optional[Tuple[ScheduleEvent, ...]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, events = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return events

    def set(self, key: str, events: Sequence[ScheduleEvent]) -> None:
        self._entries[key] = (self._clock() + self.ttl_seconds, tuple(events))

    def cleanup(self) -> int:
        """Remove expired entries. Returns how many were removed (0 when throttled)."""
        now = self._clock()
        if now - self._last_cleanup < self.ttl_seconds:
            return 0
        self._last_cleanup = now

        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
