"""
NER provider contract.

A provider wraps one model-backed entity extractor (on-device or cloud).
``extract_entities`` may raise for any reason (model missing, timeout,
malformed response); callers are expected to handle the failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ...models.annotation import Annotation, AnnotationType


@dataclass(frozen=True)
class NerEntity:
    """Entity returned by a provider, in original-text coordinates."""

    text: str
    type: AnnotationType
    start_index: int
    end_index: int
    confidence: float

    def to_annotation(self, source_id: str, priority: int) -> Annotation:
        return Annotation(
            type=self.type,
            start_index=self.start_index,
            end_index=self.end_index,
            label=self.type.value,
            confidence=self.confidence,
            source=source_id,
            priority=priority,
            metadata={"matched": self.text},
        )


class NerProvider(ABC):
    """Abstract model-backed entity extractor."""

    provider_id: str = ""
    requires_network: bool = False

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider can serve requests right now (may be cached)."""

    @abstractmethod
    def extract_entities(self, text: str) -> List[NerEntity]:
        """Extract entities from ``text``. May raise."""

    def close(self) -> None:
        """Release clients or models. Default: nothing to release."""
