"""
Tiered NER: provider contract, bundled providers and the fallback source.
"""

from .cloud_provider import CloudNerProvider
from .ollama_provider import OllamaNerProvider
from .preferences import NerProviderMode, NerProviderPreferences
from .prompts import build_prompt, build_prompt_with_no_think, parse_annotation_type, parse_response
from .provider import NerEntity, NerProvider
from .spacy_provider import SpacyNerProvider
from .tiered_source import TieredNerAnnotationSource

__all__ = [
    "NerEntity",
    "NerProvider",
    "NerProviderMode",
    "NerProviderPreferences",
    "TieredNerAnnotationSource",
    "SpacyNerProvider",
    "OllamaNerProvider",
    "CloudNerProvider",
    "build_prompt",
    "build_prompt_with_no_think",
    "parse_annotation_type",
    "parse_response",
]
