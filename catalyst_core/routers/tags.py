# catalyst_core/routers/tags.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from catalyst_core.routers.deps import get_registry_service
from catalyst_core.schemas.dimensions import TagCreate, TagRead
from catalyst_core.services import RegistryService

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=List[TagRead], summary="List tags")
def list_tags(
    *,
    service: RegistryService = Depends(get_registry_service),
    kind: Optional[str] = Query(None, description="One of cause, topic, esg, sdg, keyword."),
) -> List[TagRead]:
    return service.list_tags(kind=kind)


@router.post("", response_model=TagRead, summary="Get or create a tag")
def get_or_create_tag(
    *,
    payload: TagCreate,
    service: RegistryService = Depends(get_registry_service),
) -> TagRead:
    return service.get_or_create_tag(payload.kind, payload.name)
