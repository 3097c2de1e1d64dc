# catalyst_core/repositories/measurements.py

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.orm import Session

from ..db import models
from ..domain.models import PeriodKind

# Columns a caller may order query results by.
ORDERABLE_COLUMNS = {
    "id": models.Measurement.id,
    "created_at": models.Measurement.created_at,
    "value": models.Measurement.value,
    "entity_id": models.Measurement.entity_id,
    "metric_id": models.Measurement.metric_id,
    "period_id": models.Measurement.period_id,
}


class MeasurementsRepository:
    """
    Data access for the fact table.

    Besides plain CRUD this exposes the two read shapes the projections
    need: year-kind facts joined with their year, and the flattened join
    over every dimension.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    def _base_select(self) -> Select[Any]:
        return select(models.Measurement)

    @staticmethod
    def _filtered(
        stmt: Select[Any],
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
        period_id: Optional[int] = None,
        source_id: Optional[int] = None,
    ) -> Select[Any]:
        if entity_id is not None:
            stmt = stmt.where(models.Measurement.entity_id == entity_id)
        if metric_id is not None:
            stmt = stmt.where(models.Measurement.metric_id == metric_id)
        if period_id is not None:
            stmt = stmt.where(models.Measurement.period_id == period_id)
        if source_id is not None:
            stmt = stmt.where(models.Measurement.source_id == source_id)
        return stmt

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_by_id(self, measurement_id: int) -> Optional[models.Measurement]:
        return self.session.get(models.Measurement, measurement_id)

    def get_by_triple(
        self, entity_id: int, metric_id: int, period_id: int
    ) -> Optional[models.Measurement]:
        stmt = self._filtered(
            self._base_select(),
            entity_id=entity_id,
            metric_id=metric_id,
            period_id=period_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def count_for(self, *, metric_id: Optional[int] = None, period_id: Optional[int] = None) -> int:
        """Number of facts referencing the given metric and/or period."""
        stmt = self._filtered(
            select(func.count(models.Measurement.id)),
            metric_id=metric_id,
            period_id=period_id,
        )
        return int(self.session.execute(stmt).scalar_one())

    def query(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
        period_id: Optional[int] = None,
        source_id: Optional[int] = None,
        order_by: Sequence[Tuple[str, bool]] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[models.Measurement]:
        """
        Facts matching every given filter.

        ``order_by`` is a list of (column name, descending) pairs; names must
        be keys of ORDERABLE_COLUMNS. Without it the order is unspecified.
        """
        stmt = self._filtered(
            self._base_select(),
            entity_id=entity_id,
            metric_id=metric_id,
            period_id=period_id,
            source_id=source_id,
        )
        for name, descending in order_by:
            column = ORDERABLE_COLUMNS[name]
            stmt = stmt.order_by(column.desc() if descending else column.asc())

        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self.session.execute(stmt).scalars().all())

    def year_facts(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
    ) -> Sequence[Tuple[models.Measurement, int]]:
        """
        (fact, year) pairs for every fact whose period is of kind "year".
        """
        stmt = self._filtered(
            select(models.Measurement, models.Period.year_value)
            .join(models.Period, models.Period.id == models.Measurement.period_id)
            .where(models.Period.kind == PeriodKind.YEAR),
            entity_id=entity_id,
            metric_id=metric_id,
        )
        return [(row[0], row[1]) for row in self.session.execute(stmt).all()]

    def flat_rows(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
        framework: Optional[str] = None,
        period_kind: Optional[PeriodKind] = None,
    ) -> Sequence[Any]:
        """
        Denormalized rows: every fact joined with its entity, metric,
        framework, period and (optional) source.
        """
        stmt = (
            select(
                models.Measurement.id.label("measurement_id"),
                models.Entity.entity_type,
                models.Entity.name.label("entity_name"),
                models.Framework.name.label("framework"),
                models.Metric.code.label("metric_code"),
                models.Metric.name.label("metric_name"),
                models.Metric.unit,
                models.Period.kind.label("period_kind"),
                models.Period.date_value,
                models.Period.year_value,
                models.Period.time_value,
                models.Measurement.value,
                models.Source.name.label("source_name"),
                models.Source.url.label("source_url"),
                models.Measurement.confidence,
                models.Measurement.note,
                models.Measurement.created_at,
            )
            .join(models.Entity, models.Entity.id == models.Measurement.entity_id)
            .join(models.Metric, models.Metric.id == models.Measurement.metric_id)
            .join(models.Framework, models.Framework.id == models.Metric.framework_id)
            .join(models.Period, models.Period.id == models.Measurement.period_id)
            .outerjoin(models.Source, models.Source.id == models.Measurement.source_id)
        )
        stmt = self._filtered(stmt, entity_id=entity_id, metric_id=metric_id)
        if framework is not None:
            stmt = stmt.where(models.Framework.name == framework)
        if period_kind is not None:
            stmt = stmt.where(models.Period.kind == period_kind)
        stmt = stmt.order_by(models.Measurement.id)
        return list(self.session.execute(stmt).all())

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        entity_id: int,
        metric_id: int,
        period_id: int,
        value: float,
        source_id: Optional[int] = None,
        confidence: Optional[float] = None,
        note: Optional[str] = None,
    ) -> models.Measurement:
        measurement = models.Measurement(
            entity_id=entity_id,
            metric_id=metric_id,
            period_id=period_id,
            value=value,
            source_id=source_id,
            confidence=confidence,
            note=note,
        )
        self.session.add(measurement)
        self.session.flush()
        return measurement

    def delete(self, measurement: models.Measurement) -> None:
        self.session.delete(measurement)
        self.session.flush()

    def delete_for_entity(self, entity_id: int) -> int:
        """Delete every fact of an entity; returns the number of rows removed."""
        result = self.session.execute(
            delete(models.Measurement)
            .where(models.Measurement.entity_id == entity_id)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)

    def detach_source(self, source_id: int) -> int:
        """Clear the source of every fact citing it; returns the number of facts touched."""
        result = self.session.execute(
            update(models.Measurement)
            .where(models.Measurement.source_id == source_id)
            .values(source_id=None)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
