"""
General on-device NER tier: a small local LLM served by Ollama.
"""

import threading
from typing import List, Optional

import ollama
import structlog

from .prompts import build_prompt_with_no_think, parse_response
from .provider import NerEntity, NerProvider


logger = structlog.get_logger(__name__)


class OllamaNerProvider(NerProvider):
    """
    NER through a locally served model (default ``qwen3:0.6b``).

    Availability means the Ollama server answers and lists the model. The
    probe result is remembered; ``reset_availability`` forces a new probe.
    Calls are serialized since a small local model serves one prompt at a time.

    Args:
        model: Ollama model tag
        base_url: Ollama server URL
        max_tokens: Generation limit
        temperature: Sampling temperature
        client: Preconfigured ``ollama.Client`` (tests)
    """

    PROVIDER_ID = "ollama_local"

    provider_id = PROVIDER_ID
    requires_network = False

    def __init__(
        self,
        model: str = "qwen3:0.6b",
        base_url: str = "http://localhost:11434",
        max_tokens: int = 200,
        temperature: float = 0.0,
        client: Optional[ollama.Client] = None,
    ):
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or ollama.Client(host=base_url)
        self._lock = threading.Lock()
        self._availability: Optional[bool] = None
        self.logger = logger.bind(provider=self.PROVIDER_ID, model=model)

    def is_available(self) -> bool:
        if self._availability is not None:
            return self._availability

        with self._lock:
            if self._availability is None:
                self._availability = self._probe()
            return self._availability

    def _probe(self) -> bool:
        try:
            listing = self.client.list()
        except Exception as e:
            self.logger.warning("ollama_probe_failed", error=str(e))
            return False

        names = {m.model for m in listing.models}
        if self.model not in names:
            self.logger.warning("ollama_model_not_found", available_models=sorted(names))
            return False
        return True

    def reset_availability(self) -> None:
        with self._lock:
            self._availability = None

    def extract_entities(self, text: str) -> List[NerEntity]:
        with self._lock:
            response = self.client.generate(
                model=self.model,
                prompt=build_prompt_with_no_think(text),
                options={
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
            )

        raw = response["response"] or ""
        entities = parse_response(raw, text)

        self.logger.debug(
            "ollama_extraction_complete",
            entities_count=len(entities),
            duration_ns=response.get("total_duration"),
        )
        return entities
