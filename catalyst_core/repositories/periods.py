# catalyst_core/repositories/periods.py

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import models
from ..domain.models import PeriodKind
from ..domain.periods import period_columns


class PeriodsRepository:
    """
    Data access for periods. Rows are looked up by their canonical
    ``value_key``; there is no update operation.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def get_by_id(self, period_id: int) -> Optional[models.Period]:
        return self.session.get(models.Period, period_id)

    def get_by_value(self, period) -> Optional[models.Period]:
        """Fetch the row storing the given period variant, or None."""
        stmt = select(models.Period).where(models.Period.value_key == period.value_key)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_periods(self, *, kind: Optional[PeriodKind] = None) -> Sequence[models.Period]:
        stmt = select(models.Period)
        if kind is not None:
            stmt = stmt.where(models.Period.kind == kind)
        stmt = stmt.order_by(
            models.Period.kind,
            models.Period.date_value,
            models.Period.year_value,
            models.Period.time_value,
        )
        return list(self.session.execute(stmt).scalars().all())

    def create(self, period) -> models.Period:
        row = models.Period(**period_columns(period))
        self.session.add(row)
        self.session.flush()
        return row

    def delete(self, row: models.Period) -> None:
        self.session.delete(row)
        self.session.flush()
