"""
Test doubles for annotation sources and NER providers, plus sample messages.
"""

from typing import List, Optional

from text_annotator.annotation.ner.provider import NerEntity, NerProvider
from text_annotator.annotation.source import AnnotationSource
from text_annotator.models.annotation import Annotation, AnnotationType


SAMPLE_MESSAGES = {
    "mixed": "Call 555-123-4567 or email test@example.com by tomorrow",
    "url_and_time": "Menu at https://example.com/menu?day=fri see you at 7:30 PM",
    "plain": "sounds good, see you there",
    "named": "Lunch with Ada Lovelace at Acme in London",
}


def make_annotation(
    start: int,
    end: int,
    priority: int = 100,
    confidence: float = 1.0,
    type: AnnotationType = AnnotationType.URL,
    source: str = "test",
) -> Annotation:
    return Annotation(
        type=type,
        start_index=start,
        end_index=end,
        label=type.value,
        confidence=confidence,
        source=source,
        priority=priority,
    )


class StaticSource(AnnotationSource):
    """Source returning fixed annotations and counting calls."""

    def __init__(
        self,
        source_id: str,
        annotations: Optional[List[Annotation]] = None,
        requires_network: bool = False,
        default_priority: int = 100,
    ):
        self.source_id = source_id
        self.requires_network = requires_network
        self.default_priority = default_priority
        self.annotations = list(annotations or [])
        self.calls = 0

    def annotate(self, text: str) -> List[Annotation]:
        self.calls += 1
        return list(self.annotations)


class FailingSource(AnnotationSource):
    """Source that always raises."""

    def __init__(self, source_id: str = "broken"):
        self.source_id = source_id
        self.calls = 0

    def annotate(self, text: str) -> List[Annotation]:
        self.calls += 1
        raise RuntimeError("source exploded")


class FakeNerProvider(NerProvider):
    """Provider with scripted availability and results."""

    def __init__(
        self,
        provider_id: str,
        entities: Optional[List[NerEntity]] = None,
        available: bool = True,
        error: Optional[Exception] = None,
        requires_network: bool = False,
    ):
        self.provider_id = provider_id
        self.requires_network = requires_network
        self.entities = list(entities or [])
        self.available = available
        self.error = error
        self.extract_calls = 0
        self.availability_calls = 0
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def is_available(self) -> bool:
        self.availability_calls += 1
        return self.available

    def extract_entities(self, text: str) -> List[NerEntity]:
        self.extract_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entities)


def person(text: str, start: int, confidence: float = 0.9) -> NerEntity:
    return NerEntity(
        text=text,
        type=AnnotationType.PERSON_NAME,
        start_index=start,
        end_index=start + len(text),
        confidence=confidence,
    )
