"""Memoisation of mixed colours, keyed by multiset.

Entries are stored as immutable (rgb, lab) tuples and every lookup returns
a fresh MixedColour, so a caller can never alter what the cache holds.

A cache belongs to one SearchEngine. Reads of an entry are lock-free;
insert-if-absent, LRU reordering and the hit/miss counters take the lock,
so an engine can be shared between threads.
"""

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable

from jop_mixer.core.colour import RGB, Lab, rgb_to_lab
from jop_mixer.core.dyes import DYES, DyeTable
from jop_mixer.core.mixing import Counts, mix_counts, mix_totals
from jop_mixer.core.types import MixedColour, Totals

logger = logging.getLogger(__name__)


class MixCache:
    """Multiset -> (rgb, lab) memo with an optional LRU bound (`maxsize=None` is unbounded)."""

    def __init__(self, dyes: DyeTable = DYES, maxsize: int | None = None):
        self.dyes = dyes
        self.maxsize = maxsize
        self._entries: OrderedDict[tuple[int, ...], tuple[RGB, Lab]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def key(self, counts: Counts) -> str:
        """Canonical string key for a multiset, e.g. 'blue1_red2'."""
        return self.dyes.multiset(counts).key

    def get(self, counts: Counts) -> MixedColour:
        """Mixed colour of a multiset, computed from scratch on a miss."""
        ms = self.dyes.multiset(counts)
        return self._lookup(ms.counts, lambda: mix_counts(ms, self.dyes))

    def resolve(self, counts: tuple[int, ...], totals: Totals, n: int) -> MixedColour:
        """Mixed colour of a multiset whose running totals the caller already holds."""
        return self._lookup(counts, lambda: mix_totals(totals, n))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def _lookup(self, counts: tuple[int, ...], mix: Callable[[], RGB]) -> MixedColour:
        entry = self._entries.get(counts)
        if entry is not None:
            with self._lock:
                self.hits += 1
                if self.maxsize is not None and counts in self._entries:
                    self._entries.move_to_end(counts)
            return MixedColour(rgb=entry[0], lab=entry[1])

        rgb = mix()
        computed = (rgb, rgb_to_lab(rgb))
        with self._lock:
            entry = self._entries.setdefault(counts, computed)
            self.misses += 1
            if self.maxsize is not None and len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)
        return MixedColour(rgb=entry[0], lab=entry[1])

    def log_stats(self) -> None:
        logger.debug('[Cache] %d entries, %d hits, %d misses', len(self._entries), self.hits, self.misses)
