"""
Fast on-device NER tier using a spaCy pipeline.
"""

import threading
from typing import List, Optional

import spacy
import structlog

from .prompts import parse_annotation_type
from .provider import NerEntity, NerProvider


logger = structlog.get_logger(__name__)


class SpacyNerProvider(NerProvider):
    """
    spaCy NER provider.

    The model is loaded by the first ``is_available`` call and the outcome is
    remembered; a model that fails to load keeps the provider unavailable
    until ``reset_availability`` is called.

    Args:
        model_name: spaCy package name, e.g. ``en_core_web_sm``
        confidence: Fixed confidence for every entity (spaCy exposes none)
    """

    PROVIDER_ID = "spacy_local"

    provider_id = PROVIDER_ID
    requires_network = False

    def __init__(self, model_name: str = "en_core_web_sm", confidence: float = 0.75):
        self.model_name = model_name
        self.confidence = confidence
        self._probe_lock = threading.Lock()
        self._nlp = None
        self._availability: Optional[bool] = None

    def is_available(self) -> bool:
        if self._availability is not None:
            return self._availability

        with self._probe_lock:
            if self._availability is not None:
                return self._availability
            try:
                self._nlp = spacy.load(self.model_name)
                self._availability = True
                logger.info("ner_model_loaded", provider=self.provider_id, model=self.model_name)
            except OSError as e:
                self._availability = False
                logger.warning(
                    "ner_model_load_failed",
                    provider=self.provider_id,
                    model=self.model_name,
                    error=str(e),
                    hint=f"Run: python -m spacy download {self.model_name}",
                )
            return self._availability

    def reset_availability(self) -> None:
        with self._probe_lock:
            self._availability = None
            self._nlp = None

    def extract_entities(self, text: str) -> List[NerEntity]:
        nlp = self._nlp
        if nlp is None:
            raise RuntimeError(f"spaCy model {self.model_name} not loaded")

        doc = nlp(text)

        entities = []
        for ent in doc.ents:
            entity_type = parse_annotation_type(ent.label_)
            if entity_type is None or ent.end_char <= ent.start_char:
                continue
            entities.append(
                NerEntity(
                    text=ent.text,
                    type=entity_type,
                    start_index=ent.start_char,
                    end_index=ent.end_char,
                    confidence=self.confidence,
                )
            )

        return entities
