# catalyst_core/repositories/entities.py

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.orm import Session

from ..db import models
from ..domain.models import EntityType


class EntitiesRepository:
    """
    Thin data-access layer around the Entity model.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    def _base_select(self) -> Select[Any]:
        return select(models.Entity)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_by_id(self, entity_id: int) -> Optional[models.Entity]:
        """
        Fetch a single entity by primary key, or None if it does not exist.
        """
        return self.session.get(models.Entity, entity_id)

    def get_by_natural_key(self, entity_type: EntityType, name: str) -> Optional[models.Entity]:
        """
        Fetch the entity identified by (type, name), or None.
        """
        stmt = self._base_select().where(
            models.Entity.entity_type == entity_type,
            models.Entity.name == name,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_iso(self, code: str) -> Sequence[models.Entity]:
        """
        Entities whose iso2 or iso3 code matches ``code`` (case-insensitive).
        """
        code = code.upper()
        stmt = (
            self._base_select()
            .where(
                or_(
                    func.upper(models.Entity.iso2) == code,
                    func.upper(models.Entity.iso3) == code,
                )
            )
            .order_by(models.Entity.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_entities(
        self,
        *,
        entity_type: Optional[EntityType] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[models.Entity]:
        stmt = self._base_select()
        if entity_type is not None:
            stmt = stmt.where(models.Entity.entity_type == entity_type)
        stmt = stmt.order_by(models.Entity.entity_type, models.Entity.name)

        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        entity_type: EntityType,
        name: str,
        iso2: Optional[str] = None,
        iso3: Optional[str] = None,
    ) -> models.Entity:
        """
        Create and flush a new Entity.
        """
        entity = models.Entity(entity_type=entity_type, name=name, iso2=iso2, iso3=iso3)
        self.session.add(entity)
        self.session.flush()
        return entity

    def delete(self, entity: models.Entity) -> None:
        """
        Delete an entity row together with its tag links.
        """
        self.session.execute(
            delete(models.entity_tags).where(models.entity_tags.c.entity_id == entity.id)
        )
        self.session.delete(entity)
        self.session.flush()
