# catalyst_core/routers/frameworks.py

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from catalyst_core.routers.deps import get_registry_service
from catalyst_core.schemas.dimensions import FrameworkCreate, FrameworkRead
from catalyst_core.services import RegistryService

router = APIRouter(prefix="/frameworks", tags=["frameworks"])


@router.get("", response_model=List[FrameworkRead], summary="List frameworks")
def list_frameworks(
    *,
    service: RegistryService = Depends(get_registry_service),
) -> List[FrameworkRead]:
    return service.list_frameworks()


@router.post(
    "",
    response_model=FrameworkRead,
    summary="Get or create a framework",
    description="Idempotent on the framework name.",
)
def get_or_create_framework(
    *,
    payload: FrameworkCreate,
    service: RegistryService = Depends(get_registry_service),
) -> FrameworkRead:
    return service.get_or_create_framework(payload.name, payload.description)


@router.get("/{framework_id}", response_model=FrameworkRead, summary="Get a single framework")
def get_framework(
    *,
    framework_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> FrameworkRead:
    return service.get_framework(framework_id)


@router.delete(
    "/{framework_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a framework",
    description="Refused with 409 while metrics belong to the framework.",
)
def delete_framework(
    *,
    framework_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> Response:
    service.delete_framework(framework_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
