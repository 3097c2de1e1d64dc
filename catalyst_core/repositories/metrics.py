# catalyst_core/repositories/metrics.py

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, delete, select
from sqlalchemy.orm import Session, joinedload

from ..db import models


class MetricsRepository:
    """
    Data access for metrics. Both natural keys, (framework, code) and
    (framework, name), are exposed as lookups.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _base_select(self) -> Select[Any]:
        return select(models.Metric).options(joinedload(models.Metric.framework))

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_by_id(self, metric_id: int) -> Optional[models.Metric]:
        return self.session.get(models.Metric, metric_id)

    def get_by_code(self, framework_id: int, code: str) -> Optional[models.Metric]:
        stmt = self._base_select().where(
            models.Metric.framework_id == framework_id,
            models.Metric.code == code,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_name(self, framework_id: int, name: str) -> Optional[models.Metric]:
        stmt = self._base_select().where(
            models.Metric.framework_id == framework_id,
            models.Metric.name == name,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_metrics(self, *, framework_id: Optional[int] = None) -> Sequence[models.Metric]:
        stmt = self._base_select()
        if framework_id is not None:
            stmt = stmt.where(models.Metric.framework_id == framework_id)
        stmt = stmt.order_by(models.Metric.framework_id, models.Metric.code, models.Metric.name)
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        framework_id: int,
        name: str,
        code: Optional[str] = None,
        unit: Optional[str] = None,
        direction: int = 0,
        description: Optional[str] = None,
    ) -> models.Metric:
        metric = models.Metric(
            framework_id=framework_id,
            code=code,
            name=name,
            unit=unit,
            direction=direction,
            description=description,
        )
        self.session.add(metric)
        self.session.flush()
        return metric

    def delete(self, metric: models.Metric) -> None:
        """
        Delete a metric and its tag links. Callers check for facts first.
        """
        self.session.execute(
            delete(models.metric_tags).where(models.metric_tags.c.metric_id == metric.id)
        )
        self.session.delete(metric)
        self.session.flush()
