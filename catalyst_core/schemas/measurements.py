"""
catalyst_core/schemas/measurements.py

Read/write models for facts and the two read-only projections over them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from catalyst_core.domain.models import EntityType, PeriodKind

from .common import APIModel


class MeasurementCreate(APIModel):
    entity_id: int
    metric_id: int
    period_id: int
    value: float
    source_id: Optional[int] = None
    confidence: Optional[float] = Field(
        default=None,
        description="Caller-asserted certainty in [0, 1].",
    )
    note: Optional[str] = None


class MeasurementRead(APIModel):
    id: int
    entity_id: int
    metric_id: int
    period_id: int
    value: float
    source_id: Optional[int] = None
    confidence: Optional[float] = None
    note: Optional[str] = None
    created_at: datetime


class LatestValue(APIModel):
    """
    The "current" value of one (entity, metric) pair: the fact with the
    greatest year, newest first on ties.
    """

    entity_id: int
    metric_id: int
    measurement_id: int
    year: int
    value: float
    source_id: Optional[int] = None


class FlatMeasurement(APIModel):
    """
    One fact with human-friendly labels for every dimension it points at.
    """

    measurement_id: int
    entity_type: EntityType
    entity_name: str
    framework: str
    metric_code: Optional[str] = None
    metric_name: str
    unit: Optional[str] = None
    period_kind: PeriodKind
    period_value: str
    value: float
    source_name: Optional[str] = None
    source_url: Optional[str] = None
    confidence: Optional[float] = None
    note: Optional[str] = None
    created_at: datetime


__all__ = [
    "MeasurementCreate",
    "MeasurementRead",
    "LatestValue",
    "FlatMeasurement",
]
