"""
Annotation endpoints.

- POST /api/v1/annotations - merged annotations (cached)
- POST /api/v1/annotations/progressive - NDJSON stream, one line per phase
- POST /api/v1/annotations/invalidate - drop cached results for a text
- DELETE /api/v1/annotations/cache - drop every cached result
"""

from typing import Iterator, List, Optional

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from ...annotation.pipeline import AnnotationPipeline
from ...models.annotation import AnnotatedMessageText, Annotation
from ...models.api_models import (
    AnnotateRequest,
    AnnotateResponse,
    AnnotationModel,
    InvalidateRequest,
    ProgressivePhase,
)
from ..dependencies import get_pipeline


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/annotations", tags=["Annotations"])


def _to_models(annotations: List[Annotation]) -> List[AnnotationModel]:
    return [AnnotationModel.from_annotation(a) for a in annotations]


# Sync handlers run in FastAPI's threadpool, so slow NER calls don't block the loop
@router.post("", response_model=AnnotateResponse)
def annotate_endpoint(
    request: AnnotateRequest,
    pipeline: AnnotationPipeline = Depends(get_pipeline),
) -> AnnotateResponse:
    annotations = pipeline.annotate(request.text, request.enabled_source_ids)
    return AnnotateResponse.from_annotated(AnnotatedMessageText(request.text, annotations))


@router.post("/progressive")
def annotate_progressive_endpoint(
    request: AnnotateRequest,
    pipeline: AnnotationPipeline = Depends(get_pipeline),
) -> StreamingResponse:
    """Stream annotation phases as NDJSON (see ``progressive_lines``)."""
    lines = progressive_lines(pipeline, request.text, request.enabled_source_ids)
    return StreamingResponse(lines, media_type="application/x-ndjson")


def progressive_lines(
    pipeline: AnnotationPipeline, text: str, enabled_source_ids: Optional[List[str]] = None
) -> Iterator[str]:
    """
    NDJSON lines for a progressive annotation, each written as soon as it exists.

    Line 1 holds the instant (regex) result and is produced before any
    deferred source runs. It is final when no deferred source is enabled.
    Otherwise line 2 always follows with ``final: true``: the complete
    result, or the phase 1 annotations again when the NER tier added nothing.
    """
    expects_more = bool(text) and not text.isspace()
    expects_more = expects_more and pipeline.has_deferred_sources(enabled_source_ids)

    results = pipeline.annotate_progressive(text, enabled_source_ids)
    instant = next(results)
    yield _phase_line(1, instant, final=not expects_more)
    if not expects_more:
        return

    complete = next(results, instant)
    yield _phase_line(2, complete, final=True)


def _phase_line(phase: int, annotations: List[Annotation], final: bool) -> str:
    payload = ProgressivePhase(phase=phase, final=final, annotations=_to_models(annotations))
    return payload.model_dump_json() + "\n"


@router.post("/invalidate", status_code=status.HTTP_204_NO_CONTENT)
def invalidate_endpoint(
    request: InvalidateRequest,
    pipeline: AnnotationPipeline = Depends(get_pipeline),
) -> None:
    pipeline.invalidate(request.text)


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache_endpoint(pipeline: AnnotationPipeline = Depends(get_pipeline)) -> None:
    pipeline.clear_cache()
