"""
Request-scoped access to the shared pipeline objects held on ``app.state``.
"""

from fastapi import Request

from ..annotation.factory import find_tiered_source
from ..annotation.ner.preferences import NerProviderPreferences
from ..annotation.ner.tiered_source import TieredNerAnnotationSource
from ..annotation.pipeline import AnnotationPipeline


def get_pipeline(request: Request) -> AnnotationPipeline:
    return request.app.state.pipeline


def get_preferences(request: Request) -> NerProviderPreferences:
    return request.app.state.preferences


def get_tiered_source(request: Request) -> TieredNerAnnotationSource:
    tiered = find_tiered_source(request.app.state.pipeline)
    if tiered is None:
        return TieredNerAnnotationSource([], request.app.state.preferences)
    return tiered
