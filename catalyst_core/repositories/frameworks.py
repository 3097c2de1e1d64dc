# catalyst_core/repositories/frameworks.py

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db import models


class FrameworksRepository:
    """
    Data access for frameworks (named metric taxonomies).
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def get_by_id(self, framework_id: int) -> Optional[models.Framework]:
        return self.session.get(models.Framework, framework_id)

    def get_by_name(self, name: str) -> Optional[models.Framework]:
        stmt = select(models.Framework).where(models.Framework.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_frameworks(self) -> Sequence[models.Framework]:
        stmt = select(models.Framework).order_by(models.Framework.name)
        return list(self.session.execute(stmt).scalars().all())

    def count_metrics(self, framework_id: int) -> int:
        stmt = select(func.count(models.Metric.id)).where(models.Metric.framework_id == framework_id)
        return int(self.session.execute(stmt).scalar_one())

    def create(self, *, name: str, description: Optional[str] = None) -> models.Framework:
        framework = models.Framework(name=name, description=description)
        self.session.add(framework)
        self.session.flush()
        return framework

    def delete(self, framework: models.Framework) -> None:
        self.session.delete(framework)
        self.session.flush()
