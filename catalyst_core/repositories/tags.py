# catalyst_core/repositories/tags.py

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Table, and_, insert, select
from sqlalchemy.orm import Session

from ..db import models
from ..domain.models import TagKind


class TagsRepository:
    """
    Data access for tags and the entity/metric link tables.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def get_by_id(self, tag_id: int) -> Optional[models.Tag]:
        return self.session.get(models.Tag, tag_id)

    def get_by_natural_key(self, kind: TagKind, name: str) -> Optional[models.Tag]:
        stmt = select(models.Tag).where(models.Tag.kind == kind, models.Tag.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_tags(self, *, kind: Optional[TagKind] = None) -> Sequence[models.Tag]:
        stmt = select(models.Tag)
        if kind is not None:
            stmt = stmt.where(models.Tag.kind == kind)
        stmt = stmt.order_by(models.Tag.kind, models.Tag.name)
        return list(self.session.execute(stmt).scalars().all())

    def create(self, *, kind: TagKind, name: str) -> models.Tag:
        tag = models.Tag(kind=kind, name=name)
        self.session.add(tag)
        self.session.flush()
        return tag

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _link_exists(self, table: Table, owner_column: str, owner_id: int, tag_id: int) -> bool:
        stmt = select(table).where(
            and_(table.c[owner_column] == owner_id, table.c.tag_id == tag_id)
        )
        return self.session.execute(stmt).first() is not None

    def _link(self, table: Table, owner_column: str, owner_id: int, tag_id: int) -> bool:
        if self._link_exists(table, owner_column, owner_id, tag_id):
            return False
        self.session.execute(insert(table).values({owner_column: owner_id, "tag_id": tag_id}))
        return True

    def _unlink(self, table: Table, owner_column: str, owner_id: int, tag_id: int) -> bool:
        result = self.session.execute(
            table.delete().where(
                and_(table.c[owner_column] == owner_id, table.c.tag_id == tag_id)
            )
        )
        return bool(result.rowcount)

    def _tags_for(self, table: Table, owner_column: str, owner_id: int) -> Sequence[models.Tag]:
        stmt = (
            select(models.Tag)
            .join(table, table.c.tag_id == models.Tag.id)
            .where(table.c[owner_column] == owner_id)
            .order_by(models.Tag.kind, models.Tag.name)
        )
        return list(self.session.execute(stmt).scalars().all())

    def link_entity(self, entity_id: int, tag_id: int) -> bool:
        """Attach a tag to an entity; returns False if the link already existed."""
        return self._link(models.entity_tags, "entity_id", entity_id, tag_id)

    def unlink_entity(self, entity_id: int, tag_id: int) -> bool:
        return self._unlink(models.entity_tags, "entity_id", entity_id, tag_id)

    def tags_for_entity(self, entity_id: int) -> Sequence[models.Tag]:
        return self._tags_for(models.entity_tags, "entity_id", entity_id)

    def link_metric(self, metric_id: int, tag_id: int) -> bool:
        return self._link(models.metric_tags, "metric_id", metric_id, tag_id)

    def unlink_metric(self, metric_id: int, tag_id: int) -> bool:
        return self._unlink(models.metric_tags, "metric_id", metric_id, tag_id)

    def tags_for_metric(self, metric_id: int) -> Sequence[models.Tag]:
        return self._tags_for(models.metric_tags, "metric_id", metric_id)
