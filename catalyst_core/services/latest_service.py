# catalyst_core/services/latest_service.py
"""
Latest-value projection.

For every (entity, metric) pair with at least one year-kind fact, pick the
fact with the greatest year. Ties on the year go to the most recently
created fact, then to the highest measurement id, so the answer does not
depend on insertion order or on the order rows come back from the store.

Nothing is cached; each call reads the current facts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from catalyst_core.repositories import MeasurementsRepository
from catalyst_core.schemas.measurements import LatestValue

from .base import BaseService, read_only

GroupKey = Tuple[int, int]


def _utc(moment: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class LatestService(BaseService):
    def __init__(self, session: Session) -> None:
        super().__init__(session)
        self._measurements = MeasurementsRepository(session)

    @read_only
    def latest_by_year(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
    ) -> Dict[GroupKey, LatestValue]:
        """
        Map (entity_id, metric_id) to the current value of that pair.

        Facts on date or time-index periods are ignored. Pairs with no
        year-kind fact are absent from the result.
        """
        best: Dict[GroupKey, Tuple[Tuple[int, datetime, int], LatestValue]] = {}

        for measurement, year in self._measurements.year_facts(entity_id=entity_id, metric_id=metric_id):
            key = (measurement.entity_id, measurement.metric_id)
            rank = (year, _utc(measurement.created_at), measurement.id)
            current = best.get(key)
            if current is not None and current[0] >= rank:
                continue
            best[key] = (
                rank,
                LatestValue(
                    entity_id=measurement.entity_id,
                    metric_id=measurement.metric_id,
                    measurement_id=measurement.id,
                    year=year,
                    value=measurement.value,
                    source_id=measurement.source_id,
                ),
            )

        return {key: latest for key, (_, latest) in best.items()}
