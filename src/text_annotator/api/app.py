"""
FastAPI application exposing the annotation pipeline.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI

from ..annotation.factory import build_annotation_pipeline, build_preferences, find_tiered_source
from ..annotation.ner.preferences import NerProviderPreferences
from ..annotation.pipeline import AnnotationPipeline
from ..config import settings
from ..logging_config import setup_logging
from ..version import API_VERSION
from .middleware import setup_error_handling_middleware, setup_logging_middleware
from .routes import annotations, health, ner


setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "annotation_api_starting",
        version=API_VERSION,
        log_level=settings.log_level,
        ner_mode=app.state.preferences.selected_provider,
    )
    yield
    logger.info("annotation_api_stopping", cache_entries=app.state.pipeline.cache_entries)
    app.state.pipeline.close()


def create_app(
    pipeline: Optional[AnnotationPipeline] = None,
    preferences: Optional[NerProviderPreferences] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        pipeline: Pipeline to serve; built from settings when omitted
        preferences: NER selection holder; taken from the pipeline's tiered
            source when omitted

    Returns:
        Configured FastAPI app instance
    """
    if preferences is None and pipeline is not None:
        tiered = find_tiered_source(pipeline)
        preferences = tiered.preferences if tiered is not None else None
    preferences = preferences or build_preferences(settings)
    pipeline = pipeline or build_annotation_pipeline(settings, preferences)

    app = FastAPI(
        title="Text Annotator",
        description="Entity annotation for short message text: regex + tiered NER + deterministic merge",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline
    app.state.preferences = preferences

    # First added = outermost
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(annotations.router)
    app.include_router(ner.router)

    return app


def main() -> None:
    """Run the API server with uvicorn (development entry point)."""
    import uvicorn

    uvicorn.run(
        "text_annotator.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
