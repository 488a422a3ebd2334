"""
Cloud NER tier: remote extraction endpoint over HTTP.
"""

from typing import List, Optional

import httpx
import structlog
from pydantic import BaseModel, Field

from .prompts import parse_annotation_type
from .provider import NerEntity, NerProvider


logger = structlog.get_logger(__name__)

EXTRACT_PATH = "api/v1/ner/extract"


class NerEntityDto(BaseModel):
    """Entity as returned by the extraction endpoint."""

    text: str = ""
    type: str
    start: int
    end: int
    confidence: float = 0.9


class NerExtractionResponse(BaseModel):
    entities: List[NerEntityDto] = Field(default_factory=list)


class CloudNerProvider(NerProvider):
    """
    Remote NER provider.

    Available whenever an endpoint is configured; network failures surface as
    ``httpx.HTTPError`` from ``extract_entities``.

    Args:
        base_url: Service root, e.g. ``https://api.example.com/``
        api_key: Bearer token (optional)
        timeout_seconds: Per-request timeout
        client: Preconfigured ``httpx.Client`` (tests)
    """

    PROVIDER_ID = "cloud"

    provider_id = PROVIDER_ID
    requires_network = True

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self.client = client or httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
        )

    def is_available(self) -> bool:
        return bool(self.base_url)

    def extract_entities(self, text: str) -> List[NerEntity]:
        response = self.client.post(EXTRACT_PATH, json={"text": text})
        response.raise_for_status()

        if not response.content:
            return []

        body = NerExtractionResponse.model_validate(response.json())
        entities = [e for e in (self._to_entity(dto, text) for dto in body.entities) if e]

        logger.debug(
            "cloud_extraction_complete",
            returned_count=len(body.entities),
            entities_count=len(entities),
        )
        return entities

    @staticmethod
    def _to_entity(dto: NerEntityDto, original_text: str) -> Optional[NerEntity]:
        entity_type = parse_annotation_type(dto.type)
        if entity_type is None:
            return None

        start = min(max(dto.start, 0), len(original_text))
        end = min(max(dto.end, start), len(original_text))
        if end <= start:
            return None

        return NerEntity(
            text=original_text[start:end],
            type=entity_type,
            start_index=start,
            end_index=end,
            confidence=dto.confidence,
        )

    def close(self) -> None:
        self.client.close()
