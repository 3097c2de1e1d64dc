# catalyst_core/repositories/sources.py

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import models


class SourcesRepository:
    """
    Data access for provenance records.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def get_by_id(self, source_id: int) -> Optional[models.Source]:
        return self.session.get(models.Source, source_id)

    def get_by_name(self, name: str) -> Optional[models.Source]:
        stmt = select(models.Source).where(models.Source.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_sources(self) -> Sequence[models.Source]:
        stmt = select(models.Source).order_by(models.Source.name)
        return list(self.session.execute(stmt).scalars().all())

    def create(
        self,
        *,
        name: str,
        url: Optional[str] = None,
        license: Optional[str] = None,
        retrieved_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> models.Source:
        source = models.Source(
            name=name,
            url=url,
            license=license,
            retrieved_at=retrieved_at,
            note=note,
        )
        self.session.add(source)
        self.session.flush()
        return source

    def delete(self, source: models.Source) -> None:
        self.session.delete(source)
        self.session.flush()
