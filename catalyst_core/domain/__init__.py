from .models import EntityType, MetricDirection, PeriodKind, TagKind
from .periods import (
    DatePeriod,
    PeriodValue,
    TimeIndexPeriod,
    YearPeriod,
    parse_period,
)

__all__ = [
    "EntityType",
    "MetricDirection",
    "PeriodKind",
    "TagKind",
    "DatePeriod",
    "YearPeriod",
    "TimeIndexPeriod",
    "PeriodValue",
    "parse_period",
]
