# catalyst_core/db/models.py

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

from catalyst_core.domain.models import EntityType, PeriodKind, TagKind
from catalyst_core.domain.periods import DatePeriod, TimeIndexPeriod, YearPeriod

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


# ---------------------------------------------------------------------------
# Tag link tables
# ---------------------------------------------------------------------------

entity_tags = Table(
    "entity_tags",
    Base.metadata,
    Column("entity_id", ForeignKey("entities.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

metric_tags = Table(
    "metric_tags",
    Base.metadata,
    Column("metric_id", ForeignKey("metrics.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------


class Entity(Base):
    """
    Unit of analysis: anything measured or attached as evidence
    (countries, organizations, projects, personas, ...).
    """

    __tablename__ = "entities"
    __table_args__ = (
        UniqueConstraint("entity_type", "name", name="uq_entities_type_name"),
        CheckConstraint("iso2 IS NULL OR length(iso2) = 2", name="ck_entities_iso2"),
        CheckConstraint("iso3 IS NULL OR length(iso3) = 3", name="ck_entities_iso3"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_type: Mapped[EntityType] = mapped_column(
        SQLEnum(
            EntityType,
            name="entity_type_enum",
            native_enum=False,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    iso2: Mapped[Optional[str]] = mapped_column(String(2), nullable=True, index=True)
    iso3: Mapped[Optional[str]] = mapped_column(String(3), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def __repr__(self) -> str:
        return f"<Entity id={self.id!r} type={self.entity_type.value!r} name={self.name!r}>"


class Framework(Base):
    """Named taxonomy grouping related metrics (SDG, ESG, Resilience, ...)."""

    __tablename__ = "frameworks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Framework id={self.id!r} name={self.name!r}>"


class Metric(Base):
    """
    A measurable concept scoped to exactly one framework.

    Values live in ``measurements``; ``direction`` is -1 when lower is
    better and +1 when higher is better.
    """

    __tablename__ = "metrics"
    __table_args__ = (
        UniqueConstraint("framework_id", "code", name="uq_metrics_framework_code"),
        UniqueConstraint("framework_id", "name", name="uq_metrics_framework_name"),
        CheckConstraint("direction IN (-1, 0, 1)", name="ck_metrics_direction"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    framework_id: Mapped[int] = mapped_column(
        ForeignKey("frameworks.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    direction: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    framework: Mapped[Framework] = relationship("Framework")

    def __repr__(self) -> str:
        return f"<Metric id={self.id!r} framework_id={self.framework_id!r} code={self.code!r}>"


class Source(Base):
    """Provenance: where a measurement came from."""

    __tablename__ = "sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    license: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    retrieved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Source id={self.id!r} name={self.name!r}>"


class Tag(Base):
    """Cause / topic / ESG / SDG / keyword classification."""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("kind", "name", name="uq_tags_kind_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[TagKind] = mapped_column(
        SQLEnum(
            TagKind,
            name="tag_kind_enum",
            native_enum=False,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Tag id={self.id!r} kind={self.kind.value!r} name={self.name!r}>"


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


class Period(Base):
    """
    Stored form of the period sum type.

    Exactly one of date_value / year_value / time_value is set and it matches
    ``kind`` (enforced by the CHECK constraint). ``value_key`` is the
    canonical "<kind>:<value>" string and carries the uniqueness, since a
    UNIQUE over the nullable columns would not deduplicate NULLs.
    """

    __tablename__ = "periods"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'date' AND date_value IS NOT NULL AND year_value IS NULL AND time_value IS NULL) OR "
            "(kind = 'year' AND year_value IS NOT NULL AND date_value IS NULL AND time_value IS NULL) OR "
            "(kind = 'time' AND time_value IS NOT NULL AND date_value IS NULL AND year_value IS NULL)",
            name="ck_periods_one_value",
        ),
        Index("idx_periods_kind_year", "kind", "year_value"),
        Index("idx_periods_kind_date", "kind", "date_value"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[PeriodKind] = mapped_column(
        SQLEnum(
            PeriodKind,
            name="period_kind_enum",
            native_enum=False,
            values_callable=_enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    date_value: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    year_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    time_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    value_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    def to_value(self):
        """Return the immutable period variant for this row."""
        if self.kind is PeriodKind.DATE:
            return DatePeriod(value=date.fromisoformat(self.date_value))
        if self.kind is PeriodKind.YEAR:
            return YearPeriod(value=self.year_value)
        return TimeIndexPeriod(value=self.time_value)

    @property
    def display_value(self) -> str:
        return self.to_value().display_value

    def __repr__(self) -> str:
        return f"<Period id={self.id!r} key={self.value_key!r}>"


# ---------------------------------------------------------------------------
# Measurements (facts)
# ---------------------------------------------------------------------------


class Measurement(Base):
    """
    The universal fact table: one value of a metric for an entity during a
    period, with optional provenance and confidence.
    """

    __tablename__ = "measurements"
    __table_args__ = (
        UniqueConstraint("entity_id", "metric_id", "period_id", name="uq_measurements_triple"),
        CheckConstraint(
            "confidence IS NULL OR (confidence >= 0 AND confidence <= 1)",
            name="ck_measurements_confidence",
        ),
        Index("idx_measurements_entity_metric", "entity_id", "metric_id"),
        Index("idx_measurements_metric_period", "metric_id", "period_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id", ondelete="CASCADE"),
        nullable=False,
    )
    metric_id: Mapped[int] = mapped_column(
        ForeignKey("metrics.id", ondelete="RESTRICT"),
        nullable=False,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id", ondelete="RESTRICT"),
        nullable=False,
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)
    source_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("sources.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )

    entity: Mapped[Entity] = relationship("Entity")
    metric: Mapped[Metric] = relationship("Metric")
    period: Mapped[Period] = relationship("Period")
    source: Mapped[Optional[Source]] = relationship("Source")

    def __repr__(self) -> str:
        return (
            f"<Measurement id={self.id!r} entity_id={self.entity_id!r} "
            f"metric_id={self.metric_id!r} period_id={self.period_id!r}>"
        )
