"""
Annotation dataclass and entity type enum.

An annotation is a typed, half-open character interval ``[start_index,
end_index)`` over message text, carrying confidence, priority and the id
of the source that produced it.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class AnnotationType(str, Enum):
    """Entity types that can be attached to message text."""

    # Regex-detected entities
    DATE_TIME = "DATE_TIME"
    URL = "URL"
    EMAIL = "EMAIL"
    PHONE_NUMBER = "PHONE_NUMBER"

    # NER-detected entities
    PERSON_NAME = "PERSON_NAME"
    LOCATION = "LOCATION"
    ORGANIZATION = "ORGANIZATION"

    # Reserved for the classification overlay, never produced here
    TOXICITY_SPAN = "TOXICITY_SPAN"
    HORSEMAN_SPAN = "HORSEMAN_SPAN"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Annotation:
    """
    Represents an annotated span of message text.

    Instances are immutable; truncation during merging produces a copy via
    ``dataclasses.replace`` that keeps the original ``id``.

    Attributes:
        type: Entity type
        start_index: Character start position (inclusive)
        end_index: Character end position (exclusive)
        label: Display label, usually the type name
        confidence: Confidence score, clamped to 0.0-1.0
        source: Id of the source or provider that produced the span
        priority: Merge priority (higher wins)
        metadata: Free-form string metadata, e.g. ``{"matched": "..."}``
        id: Opaque unique token
    """

    type: AnnotationType
    start_index: int
    end_index: int
    label: str = ""
    confidence: float = 1.0
    source: str = ""
    priority: int = 0
    metadata: Dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        clamped = min(max(float(self.confidence), 0.0), 1.0)
        object.__setattr__(self, "confidence", clamped)

    @property
    def length(self) -> int:
        """Number of characters covered by the span."""
        return self.end_index - self.start_index

    def overlaps(self, other: "Annotation") -> bool:
        """True if the two half-open intervals intersect."""
        return self.start_index < other.end_index and self.end_index > other.start_index

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "label": self.label,
            "confidence": self.confidence,
            "source": self.source,
            "priority": self.priority,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class AnnotatedMessageText:
    """Message text paired with its merged annotations."""

    text: str
    annotations: List[Annotation]

    @classmethod
    def plain(cls, text: str) -> "AnnotatedMessageText":
        return cls(text=text, annotations=[])

    def to_dict(self) -> dict:
        return {"text": self.text, "annotations": [a.to_dict() for a in self.annotations]}
