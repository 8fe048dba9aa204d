# Partition cache - memoization layered outside the pure partitioner
# Keyed on the full input tuple, so a hit is always identical to a fresh run

import logging
import os
from typing import Hashable, Iterable, Mapping, Optional, Sequence, Tuple

from cachetools import LRUCache
from prometheus_client import Counter

from .availability import Availability
from .models import ClassSection, SelectedClass, TranscriptEntry
from .partition import InProgressPolicy, PartitionResult, partition

logger = logging.getLogger(__name__)

PARTITION_CACHE_SIZE = int(os.getenv("PARTITION_CACHE_SIZE", "128"))

partition_cache_hit = Counter("schedule_partition_cache_hit_total", "Partition cache hits")
partition_cache_miss = Counter("schedule_partition_cache_miss_total", "Partition cache misses")


def _availability_key(availability: Availability) -> Tuple:
    return tuple(sorted(
        (slot, tuple(sorted(days.items())))
        for slot, days in availability.items()
    ))


class PartitionCache:
    """
    LRU memoization of partition().

    Results are shared between hits; treat them as read-only.
    """

    def __init__(self, maxsize: int = PARTITION_CACHE_SIZE):
        self._cache = LRUCache(maxsize=maxsize)

    def _get_cache_key(
        self,
        catalog: Tuple[ClassSection, ...],
        transcript: Tuple[TranscriptEntry, ...],
        availability: Availability,
        placed: Tuple[SelectedClass, ...],
        in_progress_policy: Optional[InProgressPolicy],
        passing_grades: Optional[Sequence[str]],
    ) -> Hashable:
        return (
            catalog,
            transcript,
            _availability_key(availability),
            placed,
            in_progress_policy,
            None if passing_grades is None else frozenset(passing_grades),
        )

    def partition(
        self,
        catalog: Iterable[ClassSection],
        transcript: Iterable[TranscriptEntry],
        availability: Mapping[str, Mapping[str, bool]],
        placed: Sequence[SelectedClass],
        *,
        in_progress_policy: Optional[InProgressPolicy] = None,
        passing_grades: Optional[Sequence[str]] = None,
    ) -> PartitionResult:
        catalog = tuple(catalog)
        transcript = tuple(transcript)
        placed = tuple(placed)
        key = self._get_cache_key(catalog, transcript, availability, placed, in_progress_policy, passing_grades)

        cached = self._cache.get(key)
        if cached is not None:
            partition_cache_hit.inc()
            return cached

        partition_cache_miss.inc()
        result = partition(
            catalog,
            transcript,
            availability,
            placed,
            in_progress_policy=in_progress_policy,
            passing_grades=passing_grades,
        )
        self._cache[key] = result
        logger.debug(f"Cached partition result ({len(self._cache)}/{self._cache.maxsize} entries)")
        return result

    def clear(self):
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
