"""
Prompt template and response parsing for LLM-backed NER providers.
"""

import json
from typing import Any, List, Optional

import structlog

from ...models.annotation import AnnotationType
from .provider import NerEntity


logger = structlog.get_logger(__name__)


SYSTEM_PROMPT = (
    "Extract named entities from the text. Return ONLY a JSON object with an "
    '"entities" array. Each entity has: "text" (exact substring), "type" '
    '(PERSON_NAME, LOCATION, or ORGANIZATION), "start" (character index), '
    '"end" (character index, exclusive). If no entities found, return '
    '{"entities": []}.'
)

# LLM output carries no per-entity score
LLM_ENTITY_CONFIDENCE = 0.85

_TYPE_ALIASES = {
    "PERSON_NAME": AnnotationType.PERSON_NAME,
    "PERSON": AnnotationType.PERSON_NAME,
    "PER": AnnotationType.PERSON_NAME,
    "LOCATION": AnnotationType.LOCATION,
    "LOC": AnnotationType.LOCATION,
    "GPE": AnnotationType.LOCATION,
    "ORGANIZATION": AnnotationType.ORGANIZATION,
    "ORG": AnnotationType.ORGANIZATION,
}


def build_prompt(text: str) -> str:
    return f"{SYSTEM_PROMPT}\n\nText: {text}"


def build_prompt_with_no_think(text: str) -> str:
    """Prompt variant that disables reasoning output on Qwen3-style models."""
    return f"/nothink\n{build_prompt(text)}"


def parse_annotation_type(name: str) -> Optional[AnnotationType]:
    """
    Map a model/NER label to an entity type.

    Examples:
        >>> parse_annotation_type("org")
        <AnnotationType.ORGANIZATION: 'ORGANIZATION'>
        >>> parse_annotation_type("MONEY") is None
        True
    """
    return _TYPE_ALIASES.get((name or "").upper())


def _extract_json_object(raw: str) -> str:
    """Strip code fences and surrounding chatter, keeping the outermost {...}."""
    raw = raw.strip()
    fence = raw.find("```")
    search_from = fence if fence >= 0 else 0
    start = raw.find("{", search_from)
    end = raw.rfind("}")
    if start >= 0 and end > start:
        return raw[start : end + 1]
    return raw


def _as_int(value: Any, default: int = -1) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_response(raw: str, original_text: str) -> List[NerEntity]:
    """
    Parse an LLM NER response into entities anchored in ``original_text``.

    Offsets reported by the model are trusted only when they fall inside the
    text; otherwise the entity text is located case-insensitively. Malformed
    JSON yields an empty list.

    Args:
        raw: Raw model output
        original_text: Text that was sent to the model

    Returns:
        Entities with surface text re-sliced from ``original_text``
    """
    try:
        root = json.loads(_extract_json_object(raw))
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("ner_response_malformed", error=str(e), response_length=len(raw or ""))
        return []

    if not isinstance(root, dict) or not isinstance(root.get("entities"), list):
        return []

    text_length = len(original_text)
    entities: List[NerEntity] = []

    for item in root["entities"]:
        if not isinstance(item, dict):
            continue

        surface = item.get("text")
        if not isinstance(surface, str) or not surface:
            continue

        entity_type = parse_annotation_type(str(item.get("type", "")))
        if entity_type is None:
            continue

        start = _as_int(item.get("start"))
        end = _as_int(item.get("end"))

        if not 0 <= start <= text_length:
            start = original_text.lower().find(surface.lower())
        if not start <= end <= text_length:
            end = start + len(surface)

        if start < 0 or end <= start or end > text_length:
            continue

        entities.append(
            NerEntity(
                text=original_text[start:end],
                type=entity_type,
                start_index=start,
                end_index=end,
                confidence=LLM_ENTITY_CONFIDENCE,
            )
        )

    return entities
