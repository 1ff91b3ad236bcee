"""Caller-owned memo for advisor results."""
import copy
import logging
from collections import OrderedDict
from typing import Any, Callable, Optional

from starguide.models.roster import RosterSnapshot

logger = logging.getLogger(__name__)


class RecommendationCache:
    """LRU memo keyed by (roster content hash, mode, knowledge base version).

    Results are only reused for identical inputs, so a cache miss and a
    cache hit always return equal advice. ``get_or_compute`` hands out deep
    copies; the stored result is never exposed to callers.
    """

    def __init__(self, max_size: int = 128):
        if max_size < 0:
            raise ValueError(f"Cache size must be >= 0, got {max_size}")
        self.max_size = max_size
        self._entries: OrderedDict[tuple, Any] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(roster: RosterSnapshot, mode, knowledge_version: str, scope: str = "advice") -> tuple:
        return (scope, roster.content_hash(), getattr(mode, "value", mode), knowledge_version)

    def get(self, key: tuple) -> Optional[Any]:
        if key not in self._entries:
            self.misses += 1
            return None
        self.hits += 1
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: tuple, value: Any):
        if self.max_size == 0:
            return
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cached recommendation {evicted}")

    def get_or_compute(self, key: tuple, compute: Callable[[], Any]) -> Any:
        cached = self.get(key)
        if cached is not None:
            return copy.deepcopy(cached)
        value = compute()
        self.put(key, value)
        return copy.deepcopy(value)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
