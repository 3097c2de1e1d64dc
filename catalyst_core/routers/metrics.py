# catalyst_core/routers/metrics.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalyst_core.routers.deps import get_facts_service, get_registry_service
from catalyst_core.schemas.dimensions import MetricCreate, MetricRead, TagRead
from catalyst_core.services import FactsService, RegistryService

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get(
    "",
    response_model=List[MetricRead],
    summary="List metrics",
)
def list_metrics(
    *,
    service: RegistryService = Depends(get_registry_service),
    framework_id: Optional[int] = Query(None, description="Only metrics of this framework id."),
    framework: Optional[str] = Query(None, description="Only metrics of this framework name."),
) -> List[MetricRead]:
    if framework_id is not None:
        return service.list_metrics(framework=framework_id)
    return service.list_metrics(framework=framework)


@router.post(
    "",
    response_model=MetricRead,
    summary="Get or create a metric",
    description=(
        "Idempotent on (framework, code), or on (framework, name) when no code is given. "
        "`framework` may be an id or a name; an unknown name creates the framework."
    ),
)
def get_or_create_metric(
    *,
    payload: MetricCreate,
    service: RegistryService = Depends(get_registry_service),
) -> MetricRead:
    return service.get_or_create_metric(
        payload.framework,
        code=payload.code,
        name=payload.name,
        unit=payload.unit,
        direction=payload.direction,
        description=payload.description,
    )


@router.get("/{metric_id}", response_model=MetricRead, summary="Get a single metric")
def get_metric(
    *,
    metric_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> MetricRead:
    return service.get_metric(metric_id)


@router.delete(
    "/{metric_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a metric",
    description="Refused with 409 while measurements reference the metric.",
)
def delete_metric(
    *,
    metric_id: int,
    service: FactsService = Depends(get_facts_service),
) -> Response:
    service.delete_metric(metric_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{metric_id}/tags", response_model=List[TagRead], summary="Tags of a metric")
def list_metric_tags(
    *,
    metric_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> List[TagRead]:
    service.get_metric(metric_id)
    return service.metric_tags(metric_id)


@router.post(
    "/{metric_id}/tags/{tag_id}",
    response_model=List[TagRead],
    summary="Tag a metric",
    description="Idempotent. Returns the metric's tags after linking.",
)
def tag_metric(
    *,
    metric_id: int,
    tag_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> List[TagRead]:
    service.tag_metric(metric_id, tag_id)
    return service.metric_tags(metric_id)


@router.delete(
    "/{metric_id}/tags/{tag_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a tag from a metric",
)
def untag_metric(
    *,
    metric_id: int,
    tag_id: int,
    service: RegistryService = Depends(get_registry_service),
) -> Response:
    service.untag_metric(metric_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
