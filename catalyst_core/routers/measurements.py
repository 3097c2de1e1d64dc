# catalyst_core/routers/measurements.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalyst_core.routers.deps import (
    get_facts_service,
    get_latest_service,
    get_projection_service,
)
from catalyst_core.schemas.measurements import (
    FlatMeasurement,
    LatestValue,
    MeasurementCreate,
    MeasurementRead,
)
from catalyst_core.services import FactsService, LatestService, ProjectionService

router = APIRouter(prefix="/measurements", tags=["measurements"])


@router.post(
    "",
    response_model=MeasurementRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a measurement",
    description=(
        "Insert one fact. A second fact for the same (entity, metric, period) is refused "
        "with 409; existing facts are never overwritten."
    ),
)
def record_measurement(
    *,
    payload: MeasurementCreate,
    service: FactsService = Depends(get_facts_service),
) -> MeasurementRead:
    return service.record_measurement(
        payload.entity_id,
        payload.metric_id,
        payload.period_id,
        payload.value,
        source_id=payload.source_id,
        confidence=payload.confidence,
        note=payload.note,
    )


@router.get(
    "",
    response_model=List[MeasurementRead],
    summary="Query measurements",
    description="All filters are combined with AND. `order_by` may be repeated; prefix a field with '-' for descending.",
)
def query_measurements(
    *,
    service: FactsService = Depends(get_facts_service),
    entity_id: Optional[int] = Query(None),
    metric_id: Optional[int] = Query(None),
    period_id: Optional[int] = Query(None),
    source_id: Optional[int] = Query(None),
    order_by: Optional[List[str]] = Query(None, description="e.g. -created_at"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> List[MeasurementRead]:
    return service.query(
        entity_id=entity_id,
        metric_id=metric_id,
        period_id=period_id,
        source_id=source_id,
        order_by=order_by,
        limit=limit,
        offset=offset,
    )


# Fixed paths are declared before "/{measurement_id}".


@router.get(
    "/latest",
    response_model=List[LatestValue],
    summary="Latest value per (entity, metric)",
    description="Year-kind facts only: the greatest year wins, then the newest fact.",
)
def latest_by_year(
    *,
    service: LatestService = Depends(get_latest_service),
    entity_id: Optional[int] = Query(None),
    metric_id: Optional[int] = Query(None),
) -> List[LatestValue]:
    latest = service.latest_by_year(entity_id=entity_id, metric_id=metric_id)
    return [latest[key] for key in sorted(latest)]


@router.get(
    "/flat",
    response_model=List[FlatMeasurement],
    summary="Flattened measurements",
    description="One row per fact with entity, metric, framework, period and source labels.",
)
def flat_measurements(
    *,
    service: ProjectionService = Depends(get_projection_service),
    entity_id: Optional[int] = Query(None),
    metric_id: Optional[int] = Query(None),
    framework: Optional[str] = Query(None, description="Framework name."),
    period_kind: Optional[str] = Query(None, description="date, year or time."),
) -> List[FlatMeasurement]:
    return service.flat_measurements(
        entity_id=entity_id,
        metric_id=metric_id,
        framework=framework,
        period_kind=period_kind,
    )


@router.get("/{measurement_id}", response_model=MeasurementRead, summary="Get a single measurement")
def get_measurement(
    *,
    measurement_id: int,
    service: FactsService = Depends(get_facts_service),
) -> MeasurementRead:
    return service.get_measurement(measurement_id)


@router.delete(
    "/{measurement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a measurement",
)
def delete_measurement(
    *,
    measurement_id: int,
    service: FactsService = Depends(get_facts_service),
) -> Response:
    service.delete_measurement(measurement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
