# catalyst_core/services/registry_service.py

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalyst_core.domain.models import (
    EntityType,
    MetricDirection,
    TagKind,
    check_iso_code,
    coerce_enum,
    require_name,
)
from catalyst_core.errors import ConstraintViolation, NotFoundError, ReferentialIntegrityError
from catalyst_core.observability import get_tracer
from catalyst_core.repositories import (
    EntitiesRepository,
    FrameworksRepository,
    MetricsRepository,
    SourcesRepository,
    TagsRepository,
)
from catalyst_core.schemas.dimensions import (
    EntityRead,
    FrameworkRead,
    MetricRead,
    SourceRead,
    TagRead,
)

from .base import BaseService, insert_or_find, read_only

logger = structlog.get_logger()
tracer = get_tracer(__name__)

FrameworkRef = Union[int, str]


def _conflict(kind: str):
    def translate(exc: IntegrityError) -> ConstraintViolation:
        return ConstraintViolation(
            f"{kind} conflicts with an existing row.",
            details={"kind": kind, "reason": str(exc.orig)},
        )

    return translate


class RegistryService(BaseService):
    """
    Dimension registry: entities, frameworks, metrics, sources and tags.

    Responsibilities:
    - Validate dimension fields against their closed sets and formats.
    - Idempotent get-or-create on each natural key, safe against the
      lookup-then-insert race.
    - Lookups by id and by natural key.

    Each public write runs in its own transaction.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)
        self._entities = EntitiesRepository(session)
        self._frameworks = FrameworksRepository(session)
        self._metrics = MetricsRepository(session)
        self._sources = SourcesRepository(session)
        self._tags = TagsRepository(session)

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def get_or_create_entity(
        self,
        entity_type: Union[EntityType, str],
        name: str,
        iso2: Optional[str] = None,
        iso3: Optional[str] = None,
    ) -> EntityRead:
        """
        Return the entity identified by (type, name), creating it if needed.

        ISO codes are only used when the entity is created; an existing
        entity is returned unchanged.
        """
        etype = coerce_enum(EntityType, entity_type, "entity_type")
        name = require_name(name)
        iso2 = check_iso_code(iso2, 2, "iso2")
        iso3 = check_iso_code(iso3, 3, "iso3")

        with tracer.start_as_current_span("registry.get_or_create_entity"):
            with self.transaction():
                entity, created = insert_or_find(
                    self.session,
                    find=lambda: self._entities.get_by_natural_key(etype, name),
                    create=lambda: self._entities.create(
                        entity_type=etype, name=name, iso2=iso2, iso3=iso3
                    ),
                    on_conflict=_conflict("entity"),
                )
        if created:
            logger.info("entity_created", entity_id=entity.id, entity_type=etype.value, name=name)
        return EntityRead.model_validate(entity)

    @read_only
    def get_entity(self, entity_id: int) -> EntityRead:
        entity = self._entities.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError("entity", entity_id)
        return EntityRead.model_validate(entity)

    @read_only
    def find_entity(self, entity_type: Union[EntityType, str], name: str) -> Optional[EntityRead]:
        etype = coerce_enum(EntityType, entity_type, "entity_type")
        entity = self._entities.get_by_natural_key(etype, name)
        return EntityRead.model_validate(entity) if entity is not None else None

    @read_only
    def find_entity_by_iso(self, code: str) -> List[EntityRead]:
        """Entities whose alpha-2 or alpha-3 code equals ``code``."""
        if not isinstance(code, str) or len(code) not in (2, 3):
            raise ConstraintViolation(
                f"ISO code must have 2 or 3 characters, got {code!r}.",
                details={"field": "iso", "value": code},
            )
        return [EntityRead.model_validate(e) for e in self._entities.find_by_iso(code)]

    @read_only
    def list_entities(
        self,
        *,
        entity_type: Optional[Union[EntityType, str]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[EntityRead]:
        if limit is not None and limit < 0:
            raise ConstraintViolation("limit must not be negative.", details={"field": "limit"})
        if offset < 0:
            raise ConstraintViolation("offset must not be negative.", details={"field": "offset"})
        etype = coerce_enum(EntityType, entity_type, "entity_type") if entity_type is not None else None
        entities = self._entities.list_entities(entity_type=etype, limit=limit, offset=offset)
        return [EntityRead.model_validate(e) for e in entities]

    # -------------------------------------------------------------------------
    # Frameworks
    # -------------------------------------------------------------------------

    def get_or_create_framework(self, name: str, description: Optional[str] = None) -> FrameworkRead:
        name = require_name(name)
        with self.transaction():
            framework = self._get_or_create_framework_row(name, description)
        return FrameworkRead.model_validate(framework)

    def _get_or_create_framework_row(self, name: str, description: Optional[str]):
        framework, created = insert_or_find(
            self.session,
            find=lambda: self._frameworks.get_by_name(name),
            create=lambda: self._frameworks.create(name=name, description=description),
            on_conflict=_conflict("framework"),
        )
        if created:
            logger.info("framework_created", framework_id=framework.id, name=name)
        return framework

    @read_only
    def get_framework(self, framework_id: int) -> FrameworkRead:
        framework = self._frameworks.get_by_id(framework_id)
        if framework is None:
            raise NotFoundError("framework", framework_id)
        return FrameworkRead.model_validate(framework)

    @read_only
    def find_framework(self, name: str) -> Optional[FrameworkRead]:
        framework = self._frameworks.get_by_name(name)
        return FrameworkRead.model_validate(framework) if framework is not None else None

    @read_only
    def list_frameworks(self) -> List[FrameworkRead]:
        return [FrameworkRead.model_validate(f) for f in self._frameworks.list_frameworks()]

    def delete_framework(self, framework_id: int) -> None:
        """
        Delete a framework. Restricted while any metric belongs to it.
        """
        with self.transaction():
            framework = self._frameworks.get_by_id(framework_id)
            if framework is None:
                raise NotFoundError("framework", framework_id)
            metric_count = self._frameworks.count_metrics(framework_id)
            if metric_count:
                raise ReferentialIntegrityError(
                    f"Framework {framework_id} still has {metric_count} metric(s).",
                    details={"framework_id": framework_id, "metrics": metric_count},
                )
            self._frameworks.delete(framework)
        logger.info("framework_deleted", framework_id=framework_id)

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def _framework_id(self, framework: FrameworkRef) -> int:
        """Resolve a framework id or name; names are get-or-created."""
        if isinstance(framework, bool):
            raise ConstraintViolation("framework must be an id or a name.", details={"field": "framework"})
        if isinstance(framework, int):
            if self._frameworks.get_by_id(framework) is None:
                raise NotFoundError("framework", framework)
            return framework
        name = require_name(framework, "framework")
        return self._get_or_create_framework_row(name, None).id

    def _find_metric_row(self, framework_id: int, code: Optional[str], name: str):
        """
        Look a metric up by code when one is given, by name otherwise.

        A code miss whose name is taken by a differently-coded metric is a
        conflict, not a match.
        """
        if code is None:
            return self._metrics.get_by_name(framework_id, name)
        metric = self._metrics.get_by_code(framework_id, code)
        if metric is not None:
            return metric
        clash = self._metrics.get_by_name(framework_id, name)
        if clash is not None:
            raise ConstraintViolation(
                f"Metric name {name!r} is already used by code {clash.code!r} in this framework.",
                details={
                    "framework_id": framework_id,
                    "name": name,
                    "code": code,
                    "existing_metric_id": clash.id,
                    "existing_code": clash.code,
                },
            )
        return None

    def get_or_create_metric(
        self,
        framework: FrameworkRef,
        code: Optional[str] = None,
        name: Optional[str] = None,
        unit: Optional[str] = None,
        direction: Union[MetricDirection, int] = MetricDirection.NEUTRAL,
        description: Optional[str] = None,
    ) -> MetricRead:
        """
        Return the metric keyed by (framework, code), or by (framework, name)
        when no code is given, creating it if needed.

        ``framework`` is a framework id or name.
        """
        name = require_name(name)
        if code is not None:
            code = require_name(code, "code")
        metric_direction = coerce_enum(MetricDirection, direction, "direction")

        with tracer.start_as_current_span("registry.get_or_create_metric"):
            with self.transaction():
                framework_id = self._framework_id(framework)
                metric, created = insert_or_find(
                    self.session,
                    find=lambda: self._find_metric_row(framework_id, code, name),
                    create=lambda: self._metrics.create(
                        framework_id=framework_id,
                        code=code,
                        name=name,
                        unit=unit,
                        direction=int(metric_direction),
                        description=description,
                    ),
                    on_conflict=_conflict("metric"),
                )
        if created:
            logger.info("metric_created", metric_id=metric.id, framework_id=framework_id, code=code)
        return MetricRead.model_validate(metric)

    @read_only
    def get_metric(self, metric_id: int) -> MetricRead:
        metric = self._metrics.get_by_id(metric_id)
        if metric is None:
            raise NotFoundError("metric", metric_id)
        return MetricRead.model_validate(metric)

    @read_only
    def find_metric(
        self,
        framework: FrameworkRef,
        *,
        code: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[MetricRead]:
        """Lookup by (framework, code) or (framework, name); never creates."""
        if code is None and name is None:
            raise ConstraintViolation("find_metric needs a code or a name.", details={"field": "code"})
        if isinstance(framework, str):
            fw = self._frameworks.get_by_name(framework)
            if fw is None:
                return None
            framework_id = fw.id
        else:
            framework_id = framework
        if code is not None:
            metric = self._metrics.get_by_code(framework_id, code)
        else:
            metric = self._metrics.get_by_name(framework_id, name)
        return MetricRead.model_validate(metric) if metric is not None else None

    @read_only
    def list_metrics(self, *, framework: Optional[FrameworkRef] = None) -> List[MetricRead]:
        framework_id: Optional[int] = None
        if isinstance(framework, str):
            fw = self._frameworks.get_by_name(framework)
            if fw is None:
                return []
            framework_id = fw.id
        elif framework is not None:
            framework_id = framework
        return [MetricRead.model_validate(m) for m in self._metrics.list_metrics(framework_id=framework_id)]

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def get_or_create_source(
        self,
        name: str,
        url: Optional[str] = None,
        license: Optional[str] = None,
        retrieved_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> SourceRead:
        """
        Return the source with this name, creating it if needed. Sources
        are keyed by name alone.
        """
        name = require_name(name)
        with self.transaction():
            source, created = insert_or_find(
                self.session,
                find=lambda: self._sources.get_by_name(name),
                create=lambda: self._sources.create(
                    name=name,
                    url=url,
                    license=license,
                    retrieved_at=retrieved_at,
                    note=note,
                ),
                on_conflict=_conflict("source"),
            )
        if created:
            logger.info("source_created", source_id=source.id, name=name)
        return SourceRead.model_validate(source)

    @read_only
    def get_source(self, source_id: int) -> SourceRead:
        source = self._sources.get_by_id(source_id)
        if source is None:
            raise NotFoundError("source", source_id)
        return SourceRead.model_validate(source)

    @read_only
    def find_source(self, name: str) -> Optional[SourceRead]:
        source = self._sources.get_by_name(name)
        return SourceRead.model_validate(source) if source is not None else None

    @read_only
    def list_sources(self) -> List[SourceRead]:
        return [SourceRead.model_validate(s) for s in self._sources.list_sources()]

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def get_or_create_tag(self, kind: Union[TagKind, str], name: str) -> TagRead:
        tag_kind = coerce_enum(TagKind, kind, "kind")
        name = require_name(name)
        with self.transaction():
            tag, created = insert_or_find(
                self.session,
                find=lambda: self._tags.get_by_natural_key(tag_kind, name),
                create=lambda: self._tags.create(kind=tag_kind, name=name),
                on_conflict=_conflict("tag"),
            )
        if created:
            logger.info("tag_created", tag_id=tag.id, kind=tag_kind.value, name=name)
        return TagRead.model_validate(tag)

    @read_only
    def list_tags(self, *, kind: Optional[Union[TagKind, str]] = None) -> List[TagRead]:
        tag_kind = coerce_enum(TagKind, kind, "kind") if kind is not None else None
        return [TagRead.model_validate(t) for t in self._tags.list_tags(kind=tag_kind)]

    def _require_tag(self, tag_id: int) -> None:
        if self._tags.get_by_id(tag_id) is None:
            raise NotFoundError("tag", tag_id)

    def tag_entity(self, entity_id: int, tag_id: int) -> bool:
        """Attach a tag to an entity. Idempotent; returns True when a link was added."""
        with self.transaction():
            if self._entities.get_by_id(entity_id) is None:
                raise NotFoundError("entity", entity_id)
            self._require_tag(tag_id)
            return self._tags.link_entity(entity_id, tag_id)

    def untag_entity(self, entity_id: int, tag_id: int) -> bool:
        with self.transaction():
            return self._tags.unlink_entity(entity_id, tag_id)

    @read_only
    def entity_tags(self, entity_id: int) -> List[TagRead]:
        return [TagRead.model_validate(t) for t in self._tags.tags_for_entity(entity_id)]

    def tag_metric(self, metric_id: int, tag_id: int) -> bool:
        with self.transaction():
            if self._metrics.get_by_id(metric_id) is None:
                raise NotFoundError("metric", metric_id)
            self._require_tag(tag_id)
            return self._tags.link_metric(metric_id, tag_id)

    def untag_metric(self, metric_id: int, tag_id: int) -> bool:
        with self.transaction():
            return self._tags.unlink_metric(metric_id, tag_id)

    @read_only
    def metric_tags(self, metric_id: int) -> List[TagRead]:
        return [TagRead.model_validate(t) for t in self._tags.tags_for_metric(metric_id)]
