# catalyst_core/routers/deps.py
"""
Dependency-injected service factories shared by the routers.

Tests swap the database by overriding ``get_session``; every service below
picks the override up automatically.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from catalyst_core.db.session import get_session
from catalyst_core.services import (
    FactsService,
    LatestService,
    PeriodsService,
    ProjectionService,
    RegistryService,
)


def get_registry_service(session: Session = Depends(get_session)) -> RegistryService:
    return RegistryService(session)


def get_periods_service(session: Session = Depends(get_session)) -> PeriodsService:
    return PeriodsService(session)


def get_facts_service(session: Session = Depends(get_session)) -> FactsService:
    return FactsService(session)


def get_latest_service(session: Session = Depends(get_session)) -> LatestService:
    return LatestService(session)


def get_projection_service(session: Session = Depends(get_session)) -> ProjectionService:
    return ProjectionService(session)
