# catalyst_core/services/facts_service.py

from __future__ import annotations

import math
from numbers import Real
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalyst_core.errors import (
    ConstraintViolation,
    DuplicateFact,
    NotFoundError,
    RangeError,
    ReferentialIntegrityError,
)
from catalyst_core.observability import get_tracer
from catalyst_core.repositories import (
    EntitiesRepository,
    MeasurementsRepository,
    MetricsRepository,
    PeriodsRepository,
    SourcesRepository,
)
from catalyst_core.repositories.measurements import ORDERABLE_COLUMNS
from catalyst_core.schemas.measurements import MeasurementRead

from .base import BaseService, read_only

logger = structlog.get_logger()
tracer = get_tracer(__name__)

OrderBy = Union[str, Sequence[str], None]


def parse_order_by(order_by: OrderBy) -> List[Tuple[str, bool]]:
    """
    Turn ``"-created_at"`` or ``["metric_id", "-value"]`` into
    (column, descending) pairs. Unknown columns are a ConstraintViolation.
    """
    if order_by is None:
        return []
    fields: Iterable[str] = [order_by] if isinstance(order_by, str) else order_by

    parsed: List[Tuple[str, bool]] = []
    for raw in fields:
        text = raw.strip() if isinstance(raw, str) else ""
        descending = text.startswith("-")
        name = text[1:] if descending else text
        if name not in ORDERABLE_COLUMNS:
            raise ConstraintViolation(
                f"Cannot order measurements by {raw!r}.",
                details={"field": "order_by", "value": raw, "allowed": sorted(ORDERABLE_COLUMNS)},
            )
        parsed.append((name, descending))
    return parsed


def _finite_number(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise RangeError(
            f"{field} must be a real number, got {value!r}.",
            details={"field": field, "value": repr(value)},
        )
    number = float(value)
    if not math.isfinite(number):
        raise RangeError(
            f"{field} must be finite, got {value!r}.",
            details={"field": field, "value": repr(value)},
        )
    return number


class FactsService(BaseService):
    """
    The fact table and the deletion rules of the dimension graph.

    Responsibilities:
    - Record a measurement once per (entity, metric, period); never
      overwrite an existing fact.
    - Filter, order and page through facts.
    - Delete dimensions with their cascade / restrict / detach semantics.

    Every check runs before anything is written.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)
        self._measurements = MeasurementsRepository(session)
        self._entities = EntitiesRepository(session)
        self._metrics = MetricsRepository(session)
        self._periods = PeriodsRepository(session)
        self._sources = SourcesRepository(session)

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def _check_references(
        self,
        entity_id: int,
        metric_id: int,
        period_id: int,
        source_id: Optional[int],
    ) -> None:
        missing = {}
        if self._entities.get_by_id(entity_id) is None:
            missing["entity_id"] = entity_id
        if self._metrics.get_by_id(metric_id) is None:
            missing["metric_id"] = metric_id
        if self._periods.get_by_id(period_id) is None:
            missing["period_id"] = period_id
        if source_id is not None and self._sources.get_by_id(source_id) is None:
            missing["source_id"] = source_id
        if missing:
            raise ReferentialIntegrityError(
                "Measurement references rows that do not exist: "
                + ", ".join(f"{k}={v}" for k, v in missing.items()),
                details={"missing": missing},
            )

    def record_measurement(
        self,
        entity_id: int,
        metric_id: int,
        period_id: int,
        value: float,
        source_id: Optional[int] = None,
        confidence: Optional[float] = None,
        note: Optional[str] = None,
    ) -> MeasurementRead:
        """
        Insert one fact.

        Raises, in this order:
        - RangeError when ``confidence`` is outside [0, 1] or ``value`` is
          not a finite number;
        - ReferentialIntegrityError when the entity, metric, period or a
          given source does not exist;
        - DuplicateFact when the triple already has a fact. The unique
          constraint backs the check, so the loser of a concurrent insert
          gets the same error.
        """
        value = _finite_number(value, "value")
        if confidence is not None:
            confidence = _finite_number(confidence, "confidence")
            if not 0.0 <= confidence <= 1.0:
                raise RangeError(
                    f"confidence must be within [0, 1], got {confidence!r}.",
                    details={"field": "confidence", "value": confidence},
                )

        with tracer.start_as_current_span("facts.record_measurement"):
            with self.transaction():
                self._check_references(entity_id, metric_id, period_id, source_id)
                if self._measurements.get_by_triple(entity_id, metric_id, period_id) is not None:
                    raise DuplicateFact(entity_id, metric_id, period_id)
                try:
                    with self.session.begin_nested():
                        measurement = self._measurements.create(
                            entity_id=entity_id,
                            metric_id=metric_id,
                            period_id=period_id,
                            value=value,
                            source_id=source_id,
                            confidence=confidence,
                            note=note,
                        )
                except IntegrityError as exc:
                    if self._measurements.get_by_triple(entity_id, metric_id, period_id) is not None:
                        raise DuplicateFact(entity_id, metric_id, period_id) from exc
                    raise ReferentialIntegrityError(
                        "Measurement was rejected by a foreign key.",
                        details={"reason": str(exc.orig)},
                    ) from exc

        logger.info(
            "measurement_recorded",
            measurement_id=measurement.id,
            entity_id=entity_id,
            metric_id=metric_id,
            period_id=period_id,
        )
        return MeasurementRead.model_validate(measurement)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @read_only
    def get_measurement(self, measurement_id: int) -> MeasurementRead:
        measurement = self._measurements.get_by_id(measurement_id)
        if measurement is None:
            raise NotFoundError("measurement", measurement_id)
        return MeasurementRead.model_validate(measurement)

    @read_only
    def query(
        self,
        *,
        entity_id: Optional[int] = None,
        metric_id: Optional[int] = None,
        period_id: Optional[int] = None,
        source_id: Optional[int] = None,
        order_by: OrderBy = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[MeasurementRead]:
        """Facts matching every given filter (conjunction)."""
        if limit is not None and limit < 0:
            raise ConstraintViolation("limit must not be negative.", details={"field": "limit"})
        if offset < 0:
            raise ConstraintViolation("offset must not be negative.", details={"field": "offset"})

        rows = self._measurements.query(
            entity_id=entity_id,
            metric_id=metric_id,
            period_id=period_id,
            source_id=source_id,
            order_by=parse_order_by(order_by),
            limit=limit,
            offset=offset,
        )
        return [MeasurementRead.model_validate(m) for m in rows]

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    def delete_entity(self, entity_id: int) -> int:
        """
        Delete an entity together with its facts and tag links.

        Returns the number of facts removed.
        """
        with self.transaction():
            entity = self._entities.get_by_id(entity_id)
            if entity is None:
                raise NotFoundError("entity", entity_id)
            removed = self._measurements.delete_for_entity(entity_id)
            self._entities.delete(entity)
        logger.info("entity_deleted", entity_id=entity_id, measurements_removed=removed)
        return removed

    def delete_metric(self, metric_id: int) -> None:
        """Delete a metric nobody measured. Restricted while facts use it."""
        with self.transaction():
            metric = self._metrics.get_by_id(metric_id)
            if metric is None:
                raise NotFoundError("metric", metric_id)
            in_use = self._measurements.count_for(metric_id=metric_id)
            if in_use:
                raise ReferentialIntegrityError(
                    f"Metric {metric_id} is referenced by {in_use} measurement(s).",
                    details={"metric_id": metric_id, "measurements": in_use},
                )
            self._metrics.delete(metric)
        logger.info("metric_deleted", metric_id=metric_id)

    def delete_period(self, period_id: int) -> None:
        """Delete an unused period. Restricted while facts use it."""
        with self.transaction():
            period = self._periods.get_by_id(period_id)
            if period is None:
                raise NotFoundError("period", period_id)
            in_use = self._measurements.count_for(period_id=period_id)
            if in_use:
                raise ReferentialIntegrityError(
                    f"Period {period_id} is referenced by {in_use} measurement(s).",
                    details={"period_id": period_id, "measurements": in_use},
                )
            self._periods.delete(period)
        logger.info("period_deleted", period_id=period_id)

    def delete_source(self, source_id: int) -> int:
        """
        Delete a source. Facts citing it keep their values and lose their
        provenance. Returns the number of facts detached.
        """
        with self.transaction():
            source = self._sources.get_by_id(source_id)
            if source is None:
                raise NotFoundError("source", source_id)
            detached = self._measurements.detach_source(source_id)
            self._sources.delete(source)
        logger.info("source_deleted", source_id=source_id, measurements_detached=detached)
        return detached

    def delete_measurement(self, measurement_id: int) -> None:
        with self.transaction():
            measurement = self._measurements.get_by_id(measurement_id)
            if measurement is None:
                raise NotFoundError("measurement", measurement_id)
            self._measurements.delete(measurement)
        logger.info("measurement_deleted", measurement_id=measurement_id)
