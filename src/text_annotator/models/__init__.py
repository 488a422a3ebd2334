# Data models for the annotation pipeline

from .annotation import AnnotatedMessageText, Annotation, AnnotationType
from .api_models import (
    AnnotateRequest,
    AnnotateResponse,
    AnnotationModel,
    HealthResponse,
    InvalidateRequest,
    NerModeRequest,
    NerModeResponse,
    ProgressivePhase,
)

__all__ = [
    "Annotation",
    "AnnotationType",
    "AnnotatedMessageText",
    "AnnotationModel",
    "AnnotateRequest",
    "AnnotateResponse",
    "ProgressivePhase",
    "InvalidateRequest",
    "NerModeRequest",
    "NerModeResponse",
    "HealthResponse",
]
