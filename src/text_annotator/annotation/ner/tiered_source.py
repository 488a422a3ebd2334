"""
Tiered NER annotation source.

Tries NER providers in registration order until one succeeds, under the
mode selected in ``NerProviderPreferences``.
"""

from typing import List, Optional, Sequence

import structlog

from ...models.annotation import Annotation
from ..source import AnnotationSource
from .preferences import NerProviderMode, NerProviderPreferences
from .provider import NerProvider


logger = structlog.get_logger(__name__)


class TieredNerAnnotationSource(AnnotationSource):
    """
    Attempt-until-success chain over NER providers.

    AUTO considers every available provider in order; a provider id selects
    just that provider; OFF contacts nothing. The first provider whose
    ``extract_entities`` returns wins, later providers are not called.
    Provider failures are logged and never propagate.

    Args:
        providers: Providers in fallback order
        preferences: Live-readable selection mode
    """

    SOURCE_ID = "tiered_ner"

    source_id = SOURCE_ID
    default_priority = 200
    requires_network = False

    def __init__(self, providers: Sequence[NerProvider], preferences: NerProviderPreferences):
        self.providers = list(providers)
        self.preferences = preferences

    def annotate(self, text: str) -> List[Annotation]:
        if not text or text.isspace():
            return []

        mode = self.preferences.selected_provider
        if mode == NerProviderMode.OFF:
            return []

        if mode == NerProviderMode.AUTO:
            candidates = [p for p in self.providers if self._is_available(p)]
        else:
            candidates = [
                p for p in self.providers if self._matches(p, mode) and self._is_available(p)
            ]

        if not candidates:
            logger.debug("ner_no_provider_available", mode=mode)
            return []

        for provider in candidates:
            try:
                entities = provider.extract_entities(text)
            except Exception as e:
                logger.warning(
                    "ner_provider_failed",
                    provider=provider.provider_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            logger.debug(
                "ner_provider_succeeded",
                provider=provider.provider_id,
                entities_count=len(entities),
            )
            return [
                entity.to_annotation(provider.provider_id, self.default_priority)
                for entity in entities
            ]

        return []

    def find_provider(self, mode: str) -> Optional[NerProvider]:
        """Registered provider selected by ``mode``, matched ignoring case."""
        for provider in self.providers:
            if self._matches(provider, mode):
                return provider
        return None

    def close(self) -> None:
        for provider in self.providers:
            try:
                provider.close()
            except Exception as e:
                logger.warning("ner_provider_close_failed", provider=provider.provider_id, error=str(e))

    @staticmethod
    def _matches(provider: NerProvider, mode: str) -> bool:
        return provider.provider_id.casefold() == mode.casefold()

    @staticmethod
    def _is_available(provider: NerProvider) -> bool:
        try:
            return bool(provider.is_available())
        except Exception as e:
            logger.warning(
                "ner_availability_check_failed",
                provider=provider.provider_id,
                error=str(e),
            )
            return False
