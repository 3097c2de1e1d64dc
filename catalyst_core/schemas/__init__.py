from .common import APIModel, ErrorDetail, ErrorResponse
from .dimensions import (
    EntityCreate,
    EntityRead,
    FrameworkCreate,
    FrameworkRead,
    MetricCreate,
    MetricRead,
    SourceCreate,
    SourceRead,
    TagCreate,
    TagRead,
)
from .measurements import FlatMeasurement, LatestValue, MeasurementCreate, MeasurementRead
from .periods import PeriodCreate, PeriodRead

__all__ = [
    "APIModel",
    "ErrorDetail",
    "ErrorResponse",
    "EntityCreate",
    "EntityRead",
    "FrameworkCreate",
    "FrameworkRead",
    "MetricCreate",
    "MetricRead",
    "SourceCreate",
    "SourceRead",
    "TagCreate",
    "TagRead",
    "MeasurementCreate",
    "MeasurementRead",
    "LatestValue",
    "FlatMeasurement",
    "PeriodCreate",
    "PeriodRead",
]
