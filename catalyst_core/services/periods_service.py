# catalyst_core/services/periods_service.py

from __future__ import annotations

from typing import Any, List, Optional, Union

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalyst_core.domain.models import PeriodKind, coerce_enum
from catalyst_core.domain.periods import parse_period
from catalyst_core.errors import ConstraintViolation, InvalidPeriod, NotFoundError
from catalyst_core.repositories import PeriodsRepository
from catalyst_core.schemas.periods import PeriodRead

from .base import BaseService, insert_or_find, read_only

logger = structlog.get_logger()


def _period_conflict(exc: IntegrityError) -> InvalidPeriod:
    return InvalidPeriod(
        "Period was rejected by the store.",
        details={"reason": str(exc.orig)},
    )


class PeriodsService(BaseService):
    """
    Turns loose period input into canonical, deduplicated period rows.

    Equal periods always resolve to the same id: the canonical variant's
    ``value_key`` is unique in storage.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)
        self._periods = PeriodsRepository(session)

    def resolve_period(
        self,
        kind: Any,
        date_value: Any = None,
        year_value: Any = None,
        time_value: Any = None,
    ) -> PeriodRead:
        """
        Validate the (kind, value) input and return the matching period,
        creating it on first use.

        Raises InvalidPeriod when the kind is unknown, when zero or several
        values are given, or when the value does not match the kind.
        """
        period = parse_period(kind, date_value=date_value, year_value=year_value, time_value=time_value)
        return self.resolve(period)

    def resolve(self, period) -> PeriodRead:
        """Get-or-create for an already-built period variant."""
        with self.transaction():
            row, created = insert_or_find(
                self.session,
                find=lambda: self._periods.get_by_value(period),
                create=lambda: self._periods.create(period),
                on_conflict=_period_conflict,
            )
        if created:
            logger.info("period_created", period_id=row.id, value_key=period.value_key)
        return PeriodRead.from_row(row)

    @read_only
    def get_period(self, period_id: int) -> PeriodRead:
        row = self._periods.get_by_id(period_id)
        if row is None:
            raise NotFoundError("period", period_id)
        return PeriodRead.from_row(row)

    @read_only
    def find_period(
        self,
        kind: Any,
        date_value: Any = None,
        year_value: Any = None,
        time_value: Any = None,
    ) -> Optional[PeriodRead]:
        """Like resolve_period, but never creates."""
        period = parse_period(kind, date_value=date_value, year_value=year_value, time_value=time_value)
        row = self._periods.get_by_value(period)
        return PeriodRead.from_row(row) if row is not None else None

    @read_only
    def list_periods(self, *, kind: Optional[Union[PeriodKind, str]] = None) -> List[PeriodRead]:
        period_kind = None
        if kind is not None:
            try:
                period_kind = coerce_enum(PeriodKind, kind, "kind")
            except ConstraintViolation as exc:
                raise InvalidPeriod(exc.message, details=exc.details) from exc
        return [PeriodRead.from_row(row) for row in self._periods.list_periods(kind=period_kind)]
