# catalyst_core/store.py
"""
In-process entry point.

    from catalyst_core.db.session import db_session
    from catalyst_core.store import MeasurementStore

    with db_session() as session:
        store = MeasurementStore(session)
        france = store.registry.get_or_create_entity("country", "France", iso2="FR", iso3="FRA")
        metric = store.registry.get_or_create_metric("WorldBank", code="NY.GDP", name="GDP", unit="USD")
        year = store.periods.resolve_period("year", year_value=2023)
        store.facts.record_measurement(france.id, metric.id, year.id, 3.05e12)
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from catalyst_core.services import (
    FactsService,
    LatestService,
    PeriodsService,
    ProjectionService,
    RegistryService,
)


class MeasurementStore:
    """All store components bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.registry = RegistryService(session)
        self.periods = PeriodsService(session)
        self.facts = FactsService(session)
        self.latest = LatestService(session)
        self.projection = ProjectionService(session)

    def __repr__(self) -> str:
        return f"<MeasurementStore session={self.session!r}>"
