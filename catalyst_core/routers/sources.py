# catalyst_core/routers/sources.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from catalyst_core.routers.deps import get_facts_service, get_registry_service
from catalyst_core.schemas.dimensions import SourceCreate, SourceRead
from catalyst_core.services import FactsService, RegistryService

router = APIRouter(prefix="/sources", tags=["sources"])


@router.get("", response_model=List[SourceRead], summary="List sources")
def list_sources(
    *,
    service: RegistryService = Depends(get_registry_service),
) -> List[SourceRead]:
    return service.list_sources()


@router.post(
    "",
    response_model=SourceRead,
    summary="Get or create a source",
    description="Sources are keyed by name; the other fields are only stored on creation.",
)
def get_or_create_source(
    *,
    payload: SourceCreate,
    service: RegistryService = Depends(get_registry_service),
) -> SourceRead:
    return service.get_or_create_source(
        payload.name,
        url=payload.url,
        license=payload.license,
        retrieved_at=payload.retrieved_at,
        note=payload.note,
    )


@router.get("/{source_id}", response_model=SourceRead, summary="Get a single source")
def get_source(
    *,
    source_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> SourceRead:
    return service.get_source(source_id)


@router.delete(
    "/{source_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a source",
    description="Always succeeds; measurements citing the source keep their values without provenance.",
)
def delete_source(
    *,
    source_id: int,
    service: FactsService = Depends(get_facts_service),
) -> Response:
    service.delete_source(source_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
