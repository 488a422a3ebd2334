"""
Annotation pipeline: sources + merge + bounded cache.

Runs every enabled source over the text, merges the raw output into one
disjoint span list and caches the result per (text, enabled sources).
Progressive annotation delivers the instant (regex) result first and the
complete result afterwards.
"""

import threading
from collections import OrderedDict
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

import structlog

from ..models.annotation import Annotation
from .merger import merge_annotations
from .regex_source import RegexEntitySource
from .source import AnnotationSource


logger = structlog.get_logger(__name__)

DEFAULT_CACHE_SIZE = 128
ALL_SOURCES_KEY = "all"

CacheKey = Tuple[str, str]


def build_cache_key(text: str, enabled_source_ids: Optional[Iterable[str]]) -> CacheKey:
    """Cache key: the text plus ``"all"`` or the sorted, comma-joined source ids."""
    if enabled_source_ids is None:
        return text, ALL_SOURCES_KEY
    return text, ",".join(sorted(set(enabled_source_ids)))


class AnnotationPipeline:
    """
    Composes annotation sources, the merger and an LRU cache.

    One instance is meant to live for the whole process and be shared by
    every caller. The cache lock is only held around map access, never while
    a source runs, so a slow source for one text does not block other texts.
    Neither public annotate call raises: a failing source contributes no
    annotations.

    ``clear_cache`` and ``invalidate`` bump a generation counter. A result
    computed across such a call is returned to its caller but not cached.

    Args:
        sources: Sources in the order they run
        cache_size: Maximum number of cached results
    """

    def __init__(self, sources: Sequence[AnnotationSource], cache_size: int = DEFAULT_CACHE_SIZE):
        self.sources = list(sources)
        self.cache_size = cache_size
        self._cache: "OrderedDict[CacheKey, List[Annotation]]" = OrderedDict()
        self._cache_lock = threading.Lock()
        self._generation = 0

    def annotate(
        self, text: str, enabled_source_ids: Optional[Iterable[str]] = None
    ) -> List[Annotation]:
        """
        Return merged annotations for ``text``, from cache when possible.

        Args:
            text: Message text
            enabled_source_ids: Restrict to these source ids; None = all sources

        Returns:
            Disjoint annotations sorted by ``start_index``
        """
        if not text or text.isspace():
            return []

        enabled = self._freeze(enabled_source_ids)
        cache_key = build_cache_key(text, enabled)

        cached, generation = self._cache_get(cache_key)
        if cached is not None:
            logger.debug("annotation_cache_hit", sources=cache_key[1], text_length=len(text))
            return cached

        raw: List[Annotation] = []
        for source in self._active_sources(enabled):
            raw.extend(self._run_source(source, text))

        merged = merge_annotations(raw)
        self._cache_put(cache_key, merged, generation)

        logger.debug(
            "annotation_complete",
            sources=cache_key[1],
            text_length=len(text),
            raw_count=len(raw),
            merged_count=len(merged),
        )
        return list(merged)

    def annotate_progressive(
        self, text: str, enabled_source_ids: Optional[Iterable[str]] = None
    ) -> Iterator[List[Annotation]]:
        """
        Yield the instant result, then the complete result if it adds anything.

        The first item merges only the regex source and is always produced.
        The second item, produced only when the deferred sources return at
        least one annotation, merges everything and is written to the cache
        under the same key ``annotate`` uses.

        Args:
            text: Message text
            enabled_source_ids: Restrict to these source ids; None = all sources

        Yields:
            One or two disjoint annotation lists
        """
        if not text or text.isspace():
            yield []
            return

        enabled = self._freeze(enabled_source_ids)
        instant, deferred = self._split_sources(enabled)
        with self._cache_lock:
            generation = self._generation

        instant_raw: List[Annotation] = []
        for source in instant:
            instant_raw.extend(self._run_source(source, text))
        yield merge_annotations(instant_raw)

        if not deferred:
            return

        deferred_raw: List[Annotation] = []
        for source in deferred:
            deferred_raw.extend(self._run_source(source, text))

        if not deferred_raw:
            logger.debug("progressive_no_deferred_annotations", text_length=len(text))
            return

        merged = merge_annotations(instant_raw + deferred_raw)
        self._cache_put(build_cache_key(text, enabled), merged, generation)
        yield list(merged)

    def has_deferred_sources(self, enabled_source_ids: Optional[Iterable[str]] = None) -> bool:
        """Whether ``annotate_progressive`` may produce a second result."""
        _, deferred = self._split_sources(self._freeze(enabled_source_ids))
        return bool(deferred)

    def invalidate(self, text: str) -> None:
        """Drop every cached result for ``text``, whatever sources produced it."""
        with self._cache_lock:
            self._generation += 1
            stale = [key for key in self._cache if key[0] == text]
            for key in stale:
                del self._cache[key]

        if stale:
            logger.debug("annotation_cache_invalidated", entries_removed=len(stale))

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._generation += 1
            self._cache.clear()
        logger.info("annotation_cache_cleared")

    def close(self) -> None:
        """Release resources held by the sources."""
        for source in self.sources:
            source.close()

    @property
    def cache_entries(self) -> int:
        with self._cache_lock:
            return len(self._cache)

    @staticmethod
    def _freeze(enabled_source_ids: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
        return None if enabled_source_ids is None else frozenset(enabled_source_ids)

    @staticmethod
    def _is_instant(source: AnnotationSource) -> bool:
        return not source.requires_network and source.source_id == RegexEntitySource.SOURCE_ID

    def _active_sources(self, enabled: Optional[FrozenSet[str]]) -> List[AnnotationSource]:
        if enabled is None:
            return list(self.sources)
        return [s for s in self.sources if s.source_id in enabled]

    def _split_sources(
        self, enabled: Optional[FrozenSet[str]]
    ) -> Tuple[List[AnnotationSource], List[AnnotationSource]]:
        active = self._active_sources(enabled)
        instant = [s for s in active if self._is_instant(s)]
        deferred = [s for s in active if not self._is_instant(s)]
        return instant, deferred

    @staticmethod
    def _run_source(source: AnnotationSource, text: str) -> List[Annotation]:
        try:
            return list(source.annotate(text))
        except Exception as e:
            logger.warning(
                "annotation_source_failed",
                source=source.source_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    def _cache_get(self, key: CacheKey) -> Tuple[Optional[List[Annotation]], int]:
        """Cached value (or None) and the generation it was looked up in."""
        with self._cache_lock:
            cached = self._cache.get(key)
            if cached is None:
                return None, self._generation
            self._cache.move_to_end(key)
            return list(cached), self._generation

    def _cache_put(self, key: CacheKey, value: List[Annotation], generation: int) -> None:
        with self._cache_lock:
            stale = generation != self._generation
            if not stale:
                self._cache[key] = list(value)
                self._cache.move_to_end(key)
                while len(self._cache) > self.cache_size:
                    self._cache.popitem(last=False)

        if stale:
            logger.debug("annotation_cache_write_skipped", sources=key[1], text_length=len(key[0]))
