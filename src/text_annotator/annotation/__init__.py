"""
Annotation pipeline (RegEx + tiered NER + deterministic merge).

Public API:
    - AnnotationPipeline: cached, progressive annotation (recommended)
    - build_annotation_pipeline: wiring from settings
    - RegexEntitySource: deterministic emails/URLs/phones/dates
    - TieredNerAnnotationSource: NER provider fallback chain
    - merge_annotations: overlap resolution

Example usage:
    >>> from text_annotator.annotation import AnnotationPipeline, RegexEntitySource
    >>> pipeline = AnnotationPipeline([RegexEntitySource()])
    >>> text = "Call 555-123-4567 or email test@example.com by tomorrow"
    >>> [a.type.value for a in pipeline.annotate(text)]
    ['PHONE_NUMBER', 'EMAIL', 'DATE_TIME']
"""

from .factory import build_annotation_pipeline
from .merger import merge_annotations
from .ner import NerProviderMode, NerProviderPreferences, TieredNerAnnotationSource
from .pipeline import AnnotationPipeline, build_cache_key
from .regex_source import RegexEntitySource
from .source import AnnotationSource

__all__ = [
    # Main API
    "AnnotationPipeline",
    "build_annotation_pipeline",
    # Components
    "AnnotationSource",
    "RegexEntitySource",
    "TieredNerAnnotationSource",
    "NerProviderMode",
    "NerProviderPreferences",
    "merge_annotations",
    "build_cache_key",
]
