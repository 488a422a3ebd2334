"""
NER provider selection endpoints.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from ...annotation.ner.preferences import NerProviderMode, NerProviderPreferences
from ...annotation.ner.tiered_source import TieredNerAnnotationSource
from ...models.api_models import NerModeRequest, NerModeResponse
from ..dependencies import get_preferences, get_tiered_source


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/ner", tags=["NER"])


@router.get("/mode", response_model=NerModeResponse)
def get_mode(
    preferences: NerProviderPreferences = Depends(get_preferences),
    tiered: TieredNerAnnotationSource = Depends(get_tiered_source),
) -> NerModeResponse:
    return NerModeResponse(
        mode=preferences.selected_provider,
        providers=[p.provider_id for p in tiered.providers],
    )


@router.put("/mode", response_model=NerModeResponse)
def set_mode(
    request: NerModeRequest,
    preferences: NerProviderPreferences = Depends(get_preferences),
    tiered: TieredNerAnnotationSource = Depends(get_tiered_source),
) -> NerModeResponse:
    provider_ids = [p.provider_id for p in tiered.providers]
    keyword = NerProviderMode.from_id(request.mode)
    provider = tiered.find_provider(request.mode.strip())

    if keyword in (NerProviderMode.AUTO, NerProviderMode.OFF):
        mode = keyword.value
    elif provider is not None:
        mode = provider.provider_id
    else:
        allowed = [NerProviderMode.AUTO.value, NerProviderMode.OFF.value, *provider_ids]
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown NER mode: {request.mode}. Allowed: {allowed}",
        )

    preferences.set_selected_provider(mode)
    return NerModeResponse(mode=preferences.selected_provider, providers=provider_ids)
