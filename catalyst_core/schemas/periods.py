# catalyst_core/schemas/periods.py

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from pydantic import Field

from catalyst_core.domain.models import PeriodKind
from catalyst_core.domain.periods import PeriodValue

from .common import APIModel


class PeriodCreate(APIModel):
    """
    Loose input shape of a period: a kind plus one value field.

    Consistency (exactly one value, matching the kind) is checked by the
    period resolver, which raises InvalidPeriod.
    """

    kind: str = Field(..., description="date, year or time.")
    date_value: Optional[Union[date, str]] = None
    year_value: Optional[int] = None
    time_value: Optional[float] = None


class PeriodRead(APIModel):
    id: int
    kind: PeriodKind
    value: PeriodValue
    display_value: str = Field(..., description="Date, year or time index rendered as text.")

    @classmethod
    def from_row(cls, row) -> "PeriodRead":
        period = row.to_value()
        return cls(
            id=row.id,
            kind=row.kind,
            value=period,
            display_value=period.display_value,
        )


__all__ = ["PeriodCreate", "PeriodRead"]
