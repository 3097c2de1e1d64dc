# catalyst_core/routers/periods.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from catalyst_core.routers.deps import get_facts_service, get_periods_service
from catalyst_core.schemas.periods import PeriodCreate, PeriodRead
from catalyst_core.services import FactsService, PeriodsService

router = APIRouter(prefix="/periods", tags=["periods"])


@router.get("", response_model=List[PeriodRead], summary="List periods")
def list_periods(
    *,
    service: PeriodsService = Depends(get_periods_service),
    kind: Optional[str] = Query(None, description="date, year or time."),
) -> List[PeriodRead]:
    return service.list_periods(kind=kind)


@router.post(
    "",
    response_model=PeriodRead,
    summary="Resolve a period",
    description=(
        "Canonicalize a (kind, value) pair and return its period, creating it on first use. "
        "Exactly one of date_value, year_value, time_value must be set and match `kind`."
    ),
)
def resolve_period(
    *,
    payload: PeriodCreate,
    service: PeriodsService = Depends(get_periods_service),
) -> PeriodRead:
    return service.resolve_period(
        payload.kind,
        date_value=payload.date_value,
        year_value=payload.year_value,
        time_value=payload.time_value,
    )


@router.get("/{period_id}", response_model=PeriodRead, summary="Get a single period")
def get_period(
    *,
    period_id: int,
    service: PeriodsService = Depends(get_periods_service),
) -> PeriodRead:
    return service.get_period(period_id)


@router.delete(
    "/{period_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a period",
    description="Refused with 409 while measurements reference the period.",
)
def delete_period(
    *,
    period_id: int,
    service: FactsService = Depends(get_facts_service),
) -> Response:
    service.delete_period(period_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
