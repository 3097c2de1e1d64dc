# catalyst_core/services/projection_service.py

from __future__ import annotations

from typing import List, Optional, Union

from sqlalchemy.orm import Session

from catalyst_core.domain.models import PeriodKind
from catalyst_core.errors import InvalidPeriod
from catalyst_core.repositories import MeasurementsRepository
from catalyst_core.schemas.measurements import FlatMeasurement

from .base import BaseService, read_only


def period_text(row) -> str:
    """Render whichever of the three period columns is set as text."""
    if row.date_value is not None:
        return row.date_value
    if row.year_value is not None:
        return str(row.year_value)
    return repr(float(row.time_value))


class ProjectionService(BaseService):
    """
    Flattened, read-only view of the fact table with every foreign key
    replaced by its labels. Intended for export and display.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)
        self._measurements = MeasurementsRepository(session)

    @read_only
    def flat_measurements(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
        framework: Optional[str] = None,
        period_kind: Optional[Union[PeriodKind, str]] = None,
    ) -> List[FlatMeasurement]:
        kind = None
        if period_kind is not None:
            try:
                kind = PeriodKind(period_kind)
            except ValueError:
                raise InvalidPeriod(
                    f"Unknown period kind {period_kind!r}.",
                    details={"kind": period_kind, "allowed": [k.value for k in PeriodKind]},
                ) from None

        rows = self._measurements.flat_rows(
            entity_id=entity_id,
            metric_id=metric_id,
            framework=framework,
            period_kind=kind,
        )
        return [
            FlatMeasurement(
                measurement_id=row.measurement_id,
                entity_type=row.entity_type,
                entity_name=row.entity_name,
                framework=row.framework,
                metric_code=row.metric_code,
                metric_name=row.metric_name,
                unit=row.unit,
                period_kind=row.period_kind,
                period_value=period_text(row),
                value=row.value,
                source_name=row.source_name,
                source_url=row.source_url,
                confidence=row.confidence,
                note=row.note,
                created_at=row.created_at,
            )
            for row in rows
        ]
