"""
Wiring for the long-lived pipeline instance.

Providers are registered in fallback order: fast on-device (spaCy),
general on-device (Ollama), cloud.
"""

from typing import List, Optional

import structlog

from ..config import Settings, settings as default_settings
from .ner.cloud_provider import CloudNerProvider
from .ner.ollama_provider import OllamaNerProvider
from .ner.preferences import NerProviderPreferences
from .ner.provider import NerProvider
from .ner.spacy_provider import SpacyNerProvider
from .ner.tiered_source import TieredNerAnnotationSource
from .pipeline import AnnotationPipeline
from .regex_source import RegexEntitySource


logger = structlog.get_logger(__name__)


def build_ner_providers(config: Settings) -> List[NerProvider]:
    return [
        SpacyNerProvider(
            model_name=config.spacy_model_name,
            confidence=config.spacy_ner_confidence,
        ),
        OllamaNerProvider(
            model=config.ollama_model,
            base_url=config.ollama_base_url,
            max_tokens=config.ollama_max_tokens,
            temperature=config.ollama_temperature,
        ),
        CloudNerProvider(
            base_url=config.cloud_ner_base_url,
            api_key=config.cloud_ner_api_key,
            timeout_seconds=config.cloud_ner_timeout_seconds,
        ),
    ]


def build_preferences(config: Settings) -> NerProviderPreferences:
    return NerProviderPreferences(
        initial_mode=config.ner_provider_mode,
        path=config.ner_preferences_path or None,
    )


def find_tiered_source(pipeline: AnnotationPipeline) -> Optional[TieredNerAnnotationSource]:
    for source in pipeline.sources:
        if isinstance(source, TieredNerAnnotationSource):
            return source
    return None


def build_annotation_pipeline(
    config: Optional[Settings] = None,
    preferences: Optional[NerProviderPreferences] = None,
    providers: Optional[List[NerProvider]] = None,
) -> AnnotationPipeline:
    """
    Build the pipeline with the regex source and the tiered NER source.

    Args:
        config: Settings; defaults to the global settings
        preferences: Selection holder; built from settings when omitted
        providers: NER providers in fallback order; built from settings when omitted

    Returns:
        Configured AnnotationPipeline
    """
    config = config or default_settings
    preferences = preferences or build_preferences(config)
    providers = providers if providers is not None else build_ner_providers(config)

    tiered = TieredNerAnnotationSource(providers, preferences)
    pipeline = AnnotationPipeline(
        sources=[RegexEntitySource(), tiered],
        cache_size=config.annotation_cache_size,
    )
    # Cached results depend on which NER tier ran
    preferences.subscribe(lambda _mode: pipeline.clear_cache())

    logger.info(
        "annotation_pipeline_built",
        providers=[p.provider_id for p in providers],
        ner_mode=preferences.selected_provider,
        cache_size=config.annotation_cache_size,
    )
    return pipeline
