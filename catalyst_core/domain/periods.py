# catalyst_core/domain/periods.py
"""
Period sum type.

A period is exactly one of three variants, each carrying only its own
value:

    DatePeriod(value=date(2024, 12, 31))   kind="date"
    YearPeriod(value=2024)                 kind="year"
    TimeIndexPeriod(value=1.5)             kind="time"

The variants are frozen pydantic models discriminated on ``kind``, so a
"year period with a date" cannot be constructed. ``parse_period`` is the
boundary that turns the loose (kind, date?, year?, time?) input shape into
a variant, raising InvalidPeriod for anything ambiguous.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalyst_core.domain.models import PeriodKind
from catalyst_core.errors import InvalidPeriod

DATE_FORMAT = "%Y-%m-%d"


class _PeriodBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def value_key(self) -> str:
        """Canonical "<kind>:<value>" string used as the dedup key in storage."""
        return f"{self.kind}:{self.display_value}"


class DatePeriod(_PeriodBase):
    kind: Literal["date"] = "date"
    value: date

    @property
    def display_value(self) -> str:
        return self.value.strftime(DATE_FORMAT)


class YearPeriod(_PeriodBase):
    kind: Literal["year"] = "year"
    value: int

    @field_validator("value", mode="before")
    @classmethod
    def _no_bools(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("a year must be an integer, not a boolean")
        return value

    @property
    def display_value(self) -> str:
        return str(self.value)


class TimeIndexPeriod(_PeriodBase):
    kind: Literal["time"] = "time"
    value: float

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("a time index must be finite")
        # -0.0 and 0.0 are the same instant
        return value + 0.0

    @property
    def display_value(self) -> str:
        return repr(float(self.value))


PeriodValue = Annotated[
    Union[DatePeriod, YearPeriod, TimeIndexPeriod],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Canonicalization
# ---------------------------------------------------------------------------


def canonical_date(value: Any) -> date:
    """
    Accept a ``date``, ``datetime`` or ISO string and return a plain date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text).date()
            return datetime.strptime(text, DATE_FORMAT).date()
        except ValueError:
            raise InvalidPeriod(
                f"date_value {value!r} is not a YYYY-MM-DD date.",
                details={"date_value": value},
            ) from None
    raise InvalidPeriod(
        f"date_value must be a date or ISO string, got {type(value).__name__}.",
        details={"date_value": repr(value)},
    )


def canonical_year(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidPeriod("year_value must be an integer.", details={"year_value": value})
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and "_" not in value:
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidPeriod(
                f"year_value {value!r} is not an integer.",
                details={"year_value": value},
            ) from None
    raise InvalidPeriod(
        f"year_value must be an integer, got {value!r}.",
        details={"year_value": repr(value)},
    )


def canonical_time(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidPeriod("time_value must be a real number.", details={"time_value": value})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidPeriod(
            f"time_value must be a real number, got {value!r}.",
            details={"time_value": repr(value)},
        ) from None
    if not math.isfinite(number):
        raise InvalidPeriod("time_value must be finite.", details={"time_value": repr(value)})
    # -0.0 and 0.0 are the same instant
    return number + 0.0


def parse_period(
    kind: Any,
    date_value: Any = None,
    year_value: Any = None,
    time_value: Any = None,
):
    """
    Build a period variant from the loose four-field input shape.

    Exactly one of the value fields must be given and it must be the one
    named by ``kind``.
    """
    try:
        period_kind = PeriodKind(kind)
    except (ValueError, TypeError):
        raise InvalidPeriod(
            f"Unknown period kind {kind!r}.",
            details={"kind": repr(kind), "allowed": [k.value for k in PeriodKind]},
        ) from None

    provided = {
        name: v
        for name, v in (
            ("date_value", date_value),
            ("year_value", year_value),
            ("time_value", time_value),
        )
        if v is not None
    }
    if len(provided) != 1:
        raise InvalidPeriod(
            f"Exactly one period value must be set, got {sorted(provided) or 'none'}.",
            details={"kind": period_kind.value, "provided": sorted(provided)},
        )

    field = f"{period_kind.value}_value"
    if field not in provided:
        raise InvalidPeriod(
            f"Period kind {period_kind.value!r} requires {field}, got {next(iter(provided))}.",
            details={"kind": period_kind.value, "provided": sorted(provided)},
        )

    if period_kind is PeriodKind.DATE:
        return DatePeriod(value=canonical_date(date_value))
    if period_kind is PeriodKind.YEAR:
        return YearPeriod(value=canonical_year(year_value))
    return TimeIndexPeriod(value=canonical_time(time_value))


def period_columns(period) -> dict[str, Optional[Any]]:
    """Storage column values for a variant; the other two columns are None."""
    return {
        "kind": PeriodKind(period.kind),
        "date_value": period.display_value if isinstance(period, DatePeriod) else None,
        "year_value": period.value if isinstance(period, YearPeriod) else None,
        "time_value": period.value if isinstance(period, TimeIndexPeriod) else None,
        "value_key": period.value_key,
    }


__all__ = [
    "DatePeriod",
    "YearPeriod",
    "TimeIndexPeriod",
    "PeriodValue",
    "parse_period",
    "period_columns",
    "canonical_date",
    "canonical_year",
    "canonical_time",
]
