"""
Deterministic annotation merging.

Reconciles raw annotations from every source into one disjoint set.
"""

from dataclasses import replace
from typing import List, Optional, Sequence

import structlog

from ..models.annotation import Annotation


logger = structlog.get_logger(__name__)

MIN_SPAN_LENGTH = 2


def merge_annotations(annotations: Sequence[Annotation]) -> List[Annotation]:
    """
    Merge annotations from multiple sources, resolving overlaps.

    Priority rules (in order):
    1. Higher priority wins
    2. Higher confidence breaks ties
    3. Longer span breaks remaining ties

    Candidates are accepted in that order. A candidate that overlaps an
    accepted span is truncated to its non-overlapping part; when it wraps an
    accepted span on both sides only the longer fragment survives (leading
    fragment on ties). Anything shorter than 2 characters is discarded.
    Inputs are never mutated.

    Args:
        annotations: Raw annotations, in any order

    Returns:
        Pairwise non-overlapping annotations sorted by ``start_index``

    Examples:
        >>> from text_annotator.models.annotation import AnnotationType
        >>> low = Annotation(AnnotationType.URL, 0, 10, priority=100)
        >>> high = Annotation(AnnotationType.EMAIL, 5, 15, priority=200)
        >>> [(a.start_index, a.end_index) for a in merge_annotations([low, high])]
        [(0, 5), (5, 15)]
    """
    valid = [a for a in annotations if a.start_index < a.end_index]
    if len(valid) <= 1:
        return valid

    # sorted() is stable, so full ties keep input order
    ordered = sorted(
        valid,
        key=lambda a: (a.priority, a.confidence, a.length),
        reverse=True,
    )

    accepted: List[Annotation] = []
    for candidate in ordered:
        resolved = _resolve_overlaps(candidate, accepted)
        if resolved is not None and resolved.length >= MIN_SPAN_LENGTH:
            accepted.append(resolved)

    accepted.sort(key=lambda a: a.start_index)

    logger.debug(
        "annotation_merge_complete",
        original_count=len(annotations),
        merged_count=len(accepted),
        removed_count=len(annotations) - len(accepted),
    )

    return accepted


def _resolve_overlaps(
    candidate: Annotation, accepted: Sequence[Annotation]
) -> Optional[Annotation]:
    """Shrink ``candidate`` against every accepted span; None if discarded."""
    current = candidate

    for existing in accepted:
        if not current.overlaps(existing):
            continue

        starts_before = current.start_index < existing.start_index
        ends_after = current.end_index > existing.end_index

        if not starts_before and not ends_after:
            # Contained in (or identical to) the existing span
            return None

        if starts_before and ends_after:
            leading = existing.start_index - current.start_index
            trailing = current.end_index - existing.end_index
            if leading >= trailing:
                current = replace(current, end_index=existing.start_index)
            else:
                current = replace(current, start_index=existing.end_index)
        elif starts_before:
            current = replace(current, end_index=existing.start_index)
        else:
            current = replace(current, start_index=existing.end_index)

        if current.length < MIN_SPAN_LENGTH:
            return None

    return current
