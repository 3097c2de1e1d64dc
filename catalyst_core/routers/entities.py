# catalyst_core/routers/entities.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalyst_core.routers.deps import get_facts_service, get_registry_service
from catalyst_core.schemas.dimensions import EntityCreate, EntityRead, TagRead
from catalyst_core.services import FactsService, RegistryService

router = APIRouter(prefix="/entities", tags=["entities"])


@router.get(
    "",
    response_model=List[EntityRead],
    summary="List entities",
    description=(
        "Return entities, optionally restricted to one entity type. "
        "With `iso`, return the entities whose alpha-2 or alpha-3 code matches."
    ),
)
def list_entities(
    *,
    service: RegistryService = Depends(get_registry_service),
    entity_type: Optional[str] = Query(None, description="Filter by entity type, e.g. 'country'."),
    iso: Optional[str] = Query(None, description="ISO-3166 alpha-2 or alpha-3 code."),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> List[EntityRead]:
    if iso is not None:
        return service.find_entity_by_iso(iso)
    return service.list_entities(entity_type=entity_type, limit=limit, offset=offset)


@router.post(
    "",
    response_model=EntityRead,
    summary="Get or create an entity",
    description="Idempotent on (entity_type, name): posting the same pair twice returns the same id.",
)
def get_or_create_entity(
    *,
    payload: EntityCreate,
    service: RegistryService = Depends(get_registry_service),
) -> EntityRead:
    return service.get_or_create_entity(
        payload.entity_type,
        payload.name,
        iso2=payload.iso2,
        iso3=payload.iso3,
    )


@router.get("/{entity_id}", response_model=EntityRead, summary="Get a single entity")
def get_entity(
    *,
    entity_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> EntityRead:
    return service.get_entity(entity_id)


@router.delete(
    "/{entity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an entity",
    description="Deletes the entity, all of its measurements and its tag links.",
)
def delete_entity(
    *,
    entity_id: int,
    service: FactsService = Depends(get_facts_service),
) -> Response:
    service.delete_entity(entity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


@router.get("/{entity_id}/tags", response_model=List[TagRead], summary="Tags of an entity")
def list_entity_tags(
    *,
    entity_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> List[TagRead]:
    service.get_entity(entity_id)
    return service.entity_tags(entity_id)


@router.post(
    "/{entity_id}/tags/{tag_id}",
    response_model=List[TagRead],
    summary="Tag an entity",
    description="Idempotent. Returns the entity's tags after linking.",
)
def tag_entity(
    *,
    entity_id: int,
    tag_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> List[TagRead]:
    service.tag_entity(entity_id, tag_id)
    return service.entity_tags(entity_id)


@router.delete(
    "/{entity_id}/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a tag from an entity",
)
def untag_entity(
    *,
    entity_id: int,
    tag_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> Response:
    service.untag_entity(entity_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
