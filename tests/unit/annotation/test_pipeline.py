"""
Unit tests for the annotation pipeline: merging across sources and caching.
"""

import threading

import pytest

from text_annotator.annotation.pipeline import AnnotationPipeline, build_cache_key
from text_annotator.annotation.regex_source import RegexEntitySource
from text_annotator.models.annotation import AnnotationType

from tests.fixtures.sources import (
    SAMPLE_MESSAGES,
    FailingSource,
    StaticSource,
    make_annotation,
)


@pytest.fixture
def regex_like():
    return StaticSource("regex_entity", [make_annotation(0, 10, priority=100)])


@pytest.fixture
def ner_like():
    return StaticSource(
        "tiered_ner",
        [make_annotation(5, 15, priority=200, type=AnnotationType.PERSON_NAME)],
    )


class TestCacheKey:
    def test_all_sources_sentinel(self):
        assert build_cache_key("hi", None) == ("hi", "all")

    def test_sorted_and_joined(self):
        assert build_cache_key("hi", ["b", "a"]) == ("hi", "a,b")

    def test_empty_set_differs_from_all(self):
        assert build_cache_key("hi", []) != build_cache_key("hi", None)


class TestAnnotate:
    """Synchronous full-result annotation."""

    @pytest.mark.parametrize("text", ["", "  ", "\n"])
    def test_blank_text_skips_sources_and_cache(self, regex_like, text):
        pipeline = AnnotationPipeline([regex_like])

        assert pipeline.annotate(text) == []
        assert regex_like.calls == 0
        assert pipeline.cache_entries == 0

    def test_merges_all_sources(self, regex_like, ner_like):
        pipeline = AnnotationPipeline([regex_like, ner_like])

        result = pipeline.annotate("some message text")

        assert [(a.start_index, a.end_index, a.priority) for a in result] == [
            (0, 5, 100),
            (5, 15, 200),
        ]

    def test_end_to_end_with_regex_source(self):
        pipeline = AnnotationPipeline([RegexEntitySource()])

        result = pipeline.annotate(SAMPLE_MESSAGES["mixed"])

        assert [a.type for a in result] == [
            AnnotationType.PHONE_NUMBER,
            AnnotationType.EMAIL,
            AnnotationType.DATE_TIME,
        ]

    def test_enabled_source_ids_filter(self, regex_like, ner_like):
        pipeline = AnnotationPipeline([regex_like, ner_like])

        result = pipeline.annotate("some message text", {"tiered_ner"})

        assert [a.priority for a in result] == [200]
        assert regex_like.calls == 0

    def test_failing_source_contributes_nothing(self, regex_like):
        broken = FailingSource()
        pipeline = AnnotationPipeline([broken, regex_like])

        result = pipeline.annotate("some message text")

        assert broken.calls == 1
        assert [(a.start_index, a.end_index) for a in result] == [(0, 10)]


class TestCache:
    """Bounded LRU cache keyed by text and enabled sources."""

    def test_repeat_call_served_from_cache(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])

        first = pipeline.annotate("hello there")
        second = pipeline.annotate("hello there")

        assert first == second
        assert regex_like.calls == 1

    def test_returned_list_is_a_copy(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])

        pipeline.annotate("hello there").clear()

        assert len(pipeline.annotate("hello there")) == 1

    def test_source_sets_cached_independently(self, regex_like, ner_like):
        pipeline = AnnotationPipeline([regex_like, ner_like])

        everything = pipeline.annotate("hello there")
        only_regex = pipeline.annotate("hello there", ["regex_entity"])
        pipeline.annotate("hello there", ["regex_entity"])

        assert len(everything) == 2
        assert len(only_regex) == 1
        assert regex_like.calls == 2
        assert ner_like.calls == 1
        assert pipeline.cache_entries == 2

    def test_source_order_does_not_change_key(self, regex_like, ner_like):
        pipeline = AnnotationPipeline([regex_like, ner_like])

        pipeline.annotate("hello there", ["tiered_ner", "regex_entity"])
        pipeline.annotate("hello there", ["regex_entity", "tiered_ner"])

        assert regex_like.calls == 1

    def test_least_recently_used_evicted(self, regex_like):
        pipeline = AnnotationPipeline([regex_like], cache_size=2)

        pipeline.annotate("one")
        pipeline.annotate("two")
        pipeline.annotate("one")  # refresh
        pipeline.annotate("three")  # evicts "two"
        assert pipeline.cache_entries == 2
        assert regex_like.calls == 3

        pipeline.annotate("one")
        assert regex_like.calls == 3

        pipeline.annotate("two")
        assert regex_like.calls == 4

    def test_default_capacity(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])

        for i in range(200):
            pipeline.annotate(f"message {i}")

        assert pipeline.cache_entries == 128

    def test_invalidate_drops_every_source_set_for_text(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])
        pipeline.annotate("12")
        pipeline.annotate("12", ["regex_entity"])
        pipeline.annotate("12:30")

        pipeline.invalidate("12")

        assert pipeline.cache_entries == 1
        pipeline.annotate("12:30")
        assert regex_like.calls == 3
        pipeline.annotate("12")
        assert regex_like.calls == 4

    def test_invalidate_unknown_text_is_noop(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])
        pipeline.annotate("hello")

        pipeline.invalidate("other")

        assert pipeline.cache_entries == 1

    def test_clear_cache(self, regex_like):
        pipeline = AnnotationPipeline([regex_like])
        pipeline.annotate("one")
        pipeline.annotate("two")

        pipeline.clear_cache()

        assert pipeline.cache_entries == 0
        pipeline.annotate("one")
        assert regex_like.calls == 3


class BlockingSource(StaticSource):
    """Blocks on ``release`` when annotating the text ``"slow"``."""

    def __init__(self):
        super().__init__("tiered_ner", [make_annotation(0, 4)])
        self.started = threading.Event()
        self.release = threading.Event()

    def annotate(self, text):
        if text == "slow":
            self.started.set()
            self.release.wait(timeout=5)
        return super().annotate(text)


class TestConcurrency:
    def test_slow_source_does_not_block_other_texts(self):
        source = BlockingSource()
        pipeline = AnnotationPipeline([source])
        results = {}

        worker = threading.Thread(target=lambda: results.update(slow=pipeline.annotate("slow")))
        worker.start()
        try:
            assert source.started.wait(timeout=5)

            fast = pipeline.annotate("fast")

            assert len(fast) == 1
            assert not source.release.is_set()
        finally:
            source.release.set()
            worker.join(timeout=5)

        assert len(results["slow"]) == 1
        assert pipeline.cache_entries == 2

    @pytest.mark.parametrize("drop", ["clear_cache", "invalidate"])
    def test_result_computed_across_cache_drop_not_cached(self, drop):
        source = BlockingSource()
        pipeline = AnnotationPipeline([source])
        results = {}

        worker = threading.Thread(target=lambda: results.update(slow=pipeline.annotate("slow")))
        worker.start()
        try:
            assert source.started.wait(timeout=5)
            if drop == "clear_cache":
                pipeline.clear_cache()
            else:
                pipeline.invalidate("slow")
        finally:
            source.release.set()
            worker.join(timeout=5)

        assert len(results["slow"]) == 1
        assert pipeline.cache_entries == 0

        pipeline.annotate("slow")
        assert source.calls == 2
        assert pipeline.cache_entries == 1

    def test_cache_drop_skips_progressive_write(self):
        source = BlockingSource()
        pipeline = AnnotationPipeline([source])
        results = {}

        worker = threading.Thread(
            target=lambda: results.update(phases=list(pipeline.annotate_progressive("slow")))
        )
        worker.start()
        try:
            assert source.started.wait(timeout=5)
            pipeline.clear_cache()
        finally:
            source.release.set()
            worker.join(timeout=5)

        assert len(results["phases"]) == 2
        assert pipeline.cache_entries == 0


class TestClose:
    def test_close_reaches_every_source(self, regex_like, ner_like):
        closed = []
        regex_like.close = lambda: closed.append("regex_entity")
        ner_like.close = lambda: closed.append("tiered_ner")

        AnnotationPipeline([regex_like, ner_like]).close()

        assert closed == ["regex_entity", "tiered_ner"]
