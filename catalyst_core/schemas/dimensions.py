"""
catalyst_core/schemas/dimensions.py

Pydantic models for the dimension registry: entities, frameworks,
metrics, sources and tags.

The ``*Create`` models describe get-or-create payloads. They are kept
loose on purpose (plain strings and ints): the registry service owns the
validation of closed sets and code lengths, so that in-process callers and
HTTP callers get the same ConstraintViolation errors.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import Field

from catalyst_core.domain.models import EntityType, TagKind

from .common import APIModel


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class EntityCreate(APIModel):
    entity_type: str = Field(..., description="One of country, organization, project, persona, experiment, dataset, other.")
    name: str = Field(..., description="Display name; unique together with entity_type.")
    iso2: Optional[str] = Field(default=None, description="ISO-3166 alpha-2 code.")
    iso3: Optional[str] = Field(default=None, description="ISO-3166 alpha-3 code.")


class EntityRead(APIModel):
    id: int
    entity_type: EntityType
    name: str
    iso2: Optional[str] = None
    iso3: Optional[str] = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Frameworks
# ---------------------------------------------------------------------------


class FrameworkCreate(APIModel):
    name: str
    description: Optional[str] = None


class FrameworkRead(APIModel):
    id: int
    name: str
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class MetricCreate(APIModel):
    """
    Get-or-create payload for a metric.

    ``framework`` is either a framework id or a framework name; a name that
    does not exist yet creates the framework.
    """

    framework: Union[int, str]
    name: str
    code: Optional[str] = None
    unit: Optional[str] = None
    direction: int = Field(0, description="-1 lower is better, 0 neutral, +1 higher is better.")
    description: Optional[str] = None


class MetricRead(APIModel):
    id: int
    framework_id: int
    code: Optional[str] = None
    name: str
    unit: Optional[str] = None
    direction: int
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class SourceCreate(APIModel):
    name: str
    url: Optional[str] = None
    license: Optional[str] = None
    retrieved_at: Optional[datetime] = None
    note: Optional[str] = None


class SourceRead(APIModel):
    id: int
    name: str
    url: Optional[str] = None
    license: Optional[str] = None
    retrieved_at: Optional[datetime] = None
    note: Optional[str] = None


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class TagCreate(APIModel):
    kind: str = Field(..., description="One of cause, topic, esg, sdg, keyword.")
    name: str


class TagRead(APIModel):
    id: int
    kind: TagKind
    name: str


__all__ = [
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
]
