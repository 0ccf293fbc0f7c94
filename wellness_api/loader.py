"""
Guard against stale responses when several loads for the same view overlap.

Every load takes a token from ``begin``; only the newest token for a key
may apply its result. An older load that finishes late is dropped.

This is a caller-side helper. The aggregators and HTTP routes are stateless
and never cancel work; a client that loads the profile or progress views
concurrently wraps each load in ``begin``/``apply`` and renders ``result``.
"""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Any

logger = logging.getLogger(__name__)


class LatestRequestGuard:
    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: dict[str, int] = {}
        self._results: dict[str, Any] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        with self._lock:
            token = next(self._counter)
            self._latest[key] = token
            return token

    def is_current(self, key: str, token: int) -> bool:
        with self._lock:
            return self._latest.get(key) == token

    def apply(self, key: str, token: int, result: Any) -> bool:
        """Store ``result`` for ``key`` if ``token`` is still the newest. Returns whether it was applied."""
        with self._lock:
            if self._latest.get(key) != token:
                logger.debug("Discarding stale %s result (token %s)", key, token)
                return False
            self._results[key] = result
            return True

    def result(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._results.get(key, default)
