"""
API request and response models for FastAPI endpoints.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .annotation import AnnotatedMessageText, Annotation, AnnotationType


class AnnotationModel(BaseModel):
    """Serialized annotation span."""

    id: str
    type: AnnotationType
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=0)
    label: str
    confidence: float = Field(ge=0.0, le=1.0)
    source: str
    priority: int
    metadata: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_annotation(cls, annotation: Annotation) -> "AnnotationModel":
        return cls(**annotation.to_dict())


class AnnotateRequest(BaseModel):
    """Request body for the annotate endpoints."""

    text: str = Field(description="Message text to annotate")
    enabled_source_ids: Optional[List[str]] = Field(
        default=None,
        description="Restrict to these source ids; all sources when omitted",
    )


class AnnotateResponse(BaseModel):
    """Merged annotations for a message."""

    text: str
    annotations: List[AnnotationModel]

    @classmethod
    def from_annotated(cls, annotated: AnnotatedMessageText) -> "AnnotateResponse":
        return cls(
            text=annotated.text,
            annotations=[AnnotationModel.from_annotation(a) for a in annotated.annotations],
        )


class ProgressivePhase(BaseModel):
    """One line of the progressive NDJSON stream."""

    phase: int = Field(description="1 = instant sources, 2 = all sources")
    final: bool
    annotations: List[AnnotationModel]


class InvalidateRequest(BaseModel):
    """Request body for cache invalidation."""

    text: str


class NerModeRequest(BaseModel):
    """Request body for changing the NER provider selection."""

    mode: str = Field(
        min_length=1,
        description="auto, off, or a provider id",
        examples=["auto", "off", "spacy_local"],
    )


class NerModeResponse(BaseModel):
    """Current NER provider selection and the registered providers."""

    mode: str
    providers: List[str]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    uptime_seconds: float = Field(description="Service uptime in seconds")
    components: Dict[str, str] = Field(default_factory=dict)
