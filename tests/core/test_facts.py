# tests/core/test_facts.py

import math

import pytest
from sqlalchemy import func, select

from catalyst_core.db import models
from catalyst_core.errors import (
    ConstraintViolation,
    DuplicateFact,
    NotFoundError,
    RangeError,
    ReferentialIntegrityError,
)
from catalyst_core.services import parse_order_by


def test_france_scenario(store, france_gdp):
    """
    The first fact for a triple is stored; a second one is refused and the
    original value is kept.
    """
    france, metric, year = france_gdp

    fact = store.facts.record_measurement(france.id, metric.id, year.id, 0.50, confidence=0.8)
    assert fact.id is not None
    assert fact.value == 0.50
    assert fact.confidence == 0.8

    with pytest.raises(DuplicateFact) as excinfo:
        store.facts.record_measurement(france.id, metric.id, year.id, 0.90, confidence=0.8)
    assert excinfo.value.details == {
        "entity_id": france.id,
        "metric_id": metric.id,
        "period_id": year.id,
    }

    stored = store.facts.query(entity_id=france.id, metric_id=metric.id)
    assert [m.value for m in stored] == [0.50]


def test_duplicate_caught_by_unique_constraint(store, france_gdp):
    """A concurrent loser that missed the pre-check still gets DuplicateFact."""
    france, metric, year = france_gdp
    store.facts.record_measurement(france.id, metric.id, year.id, 1.0)

    repo = store.facts._measurements
    real_lookup = repo.get_by_triple
    calls = []

    def stale_lookup(*args):
        calls.append(args)
        return None if len(calls) == 1 else real_lookup(*args)

    repo.get_by_triple = stale_lookup

    with pytest.raises(DuplicateFact):
        store.facts.record_measurement(france.id, metric.id, year.id, 2.0)
    assert len(calls) == 2


@pytest.mark.parametrize("confidence", [1.5, -0.1, math.nan])
def test_confidence_out_of_range(store, session, france_gdp, confidence):
    france, metric, year = france_gdp
    with pytest.raises(RangeError):
        store.facts.record_measurement(france.id, metric.id, year.id, 0.5, confidence=confidence)
    assert session.query(models.Measurement).count() == 0


@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan, "1.0", True])
def test_value_must_be_finite_number(store, france_gdp, value):
    france, metric, year = france_gdp
    with pytest.raises(RangeError):
        store.facts.record_measurement(france.id, metric.id, year.id, value)


def test_range_checked_before_references(store):
    with pytest.raises(RangeError):
        store.facts.record_measurement(1, 2, 3, 0.5, confidence=1.5)


def test_missing_references(store, france_gdp):
    france, metric, year = france_gdp
    with pytest.raises(ReferentialIntegrityError) as excinfo:
        store.facts.record_measurement(france.id, 999, year.id, 0.5, source_id=42)
    assert excinfo.value.details["missing"] == {"metric_id": 999, "source_id": 42}


def test_delete_entity_removes_only_its_facts(store, session, france_gdp):
    france, metric, year = france_gdp
    spain = store.registry.get_or_create_entity("country", "Spain")
    tag = store.registry.get_or_create_tag("keyword", "eu")
    store.registry.tag_entity(france.id, tag.id)

    store.facts.record_measurement(france.id, metric.id, year.id, 1.0)
    kept = store.facts.record_measurement(spain.id, metric.id, year.id, 2.0)

    assert store.facts.delete_entity(france.id) == 1

    assert [m.id for m in store.facts.query()] == [kept.id]
    assert session.execute(select(func.count()).select_from(models.entity_tags)).scalar_one() == 0
    with pytest.raises(NotFoundError):
        store.registry.get_entity(france.id)


def test_delete_metric_is_restricted(store, session, france_gdp):
    france, metric, year = france_gdp
    fact = store.facts.record_measurement(france.id, metric.id, year.id, 1.0)

    with pytest.raises(ReferentialIntegrityError) as excinfo:
        store.facts.delete_metric(metric.id)
    assert excinfo.value.details["measurements"] == 1

    assert store.registry.get_metric(metric.id).id == metric.id
    assert store.facts.get_measurement(fact.id).value == 1.0


def test_delete_period_is_restricted(store, france_gdp):
    france, metric, year = france_gdp
    fact = store.facts.record_measurement(france.id, metric.id, year.id, 1.0)

    with pytest.raises(ReferentialIntegrityError):
        store.facts.delete_period(year.id)

    store.facts.delete_measurement(fact.id)
    store.facts.delete_period(year.id)
    with pytest.raises(NotFoundError):
        store.periods.get_period(year.id)


def test_delete_source_detaches_facts(store, france_gdp):
    france, metric, year = france_gdp
    source = store.registry.get_or_create_source("Eurostat")
    fact = store.facts.record_measurement(france.id, metric.id, year.id, 1.0, source_id=source.id)

    assert store.facts.delete_source(source.id) == 1

    reloaded = store.facts.get_measurement(fact.id)
    assert reloaded.source_id is None
    assert reloaded.value == 1.0


def test_delete_missing_rows(store):
    for delete in (
        store.facts.delete_entity,
        store.facts.delete_metric,
        store.facts.delete_period,
        store.facts.delete_source,
        store.facts.delete_measurement,
    ):
        with pytest.raises(NotFoundError):
            delete(12345)


def test_query_filters_and_ordering(store):
    metric = store.registry.get_or_create_metric("Demo", code="X.1", name="Test Metric")
    france = store.registry.get_or_create_entity("country", "France")
    spain = store.registry.get_or_create_entity("country", "Spain")
    years = [store.periods.resolve_period("year", year_value=y) for y in (2020, 2021)]

    facts = [
        store.facts.record_measurement(france.id, metric.id, years[0].id, 3.0),
        store.facts.record_measurement(france.id, metric.id, years[1].id, 1.0),
        store.facts.record_measurement(spain.id, metric.id, years[0].id, 2.0),
    ]

    by_value = store.facts.query(metric_id=metric.id, order_by="-value")
    assert [m.value for m in by_value] == [3.0, 2.0, 1.0]

    french = store.facts.query(entity_id=france.id, order_by=["id"])
    assert [m.id for m in french] == [facts[0].id, facts[1].id]

    page = store.facts.query(order_by="id", limit=1, offset=1)
    assert [m.id for m in page] == [facts[1].id]

    assert store.facts.query(entity_id=spain.id, period_id=years[1].id) == []


def test_query_rejects_unknown_order_field(store):
    with pytest.raises(ConstraintViolation):
        store.facts.query(order_by="note")


def test_parse_order_by():
    assert parse_order_by(None) == []
    assert parse_order_by("-created_at") == [("created_at", True)]
    assert parse_order_by(["metric_id", "-value"]) == [("metric_id", False), ("value", True)]


def test_query_limit_zero_returns_nothing(store, france_gdp):
    france, metric, year = france_gdp
    store.facts.record_measurement(france.id, metric.id, year.id, 1.0)

    assert store.facts.query(limit=0) == []
    assert len(store.facts.query(limit=None)) == 1
